"""Memory layout, ELF and virtio structures, a simulated page table, a shell parser and small user tools."""

__version__ = "0.1.0"