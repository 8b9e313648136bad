# xvkit

Pieces of a small RISC-V teaching operating system, usable from Python.

- `xvkit.layout`: the physical memory map constants (`KERNBASE`, `PHYSTOP`,
  `TRAMPOLINE`, `TRAPFRAME`, ...) and address helpers (`kstack`,
  `clint_mtimecmp`, `plic_menable`, `plic_senable`, `plic_mpriority`,
  `plic_spriority`, `plic_mclaim`, `plic_sclaim`); the `OpenFlag` and
  `FileType` enums; and the `Stat` record with `pack`/`unpack`.
- `xvkit.elf`: `ElfHeader` and `ProgramHeader` with `pack`/`unpack`,
  `ProgramFlag`, and `read_program_headers` for walking an executable's
  segments. A bad magic number or truncated data raises `ElfFormatError`.
- `xvkit.virtio`: `MmioRegister` offsets, `ConfigStatus` and `DescFlag` bits,
  and the virtqueue structures `VirtqDesc`, `VirtqAvail`, `VirtqUsedElem`,
  `VirtqUsed` and `BlkRequest`, each with `pack`/`unpack`.
- `xvkit.vm`: a simulated Sv39 three-level `PageTable` over a simulated
  `PhysicalMemory`, with `walk`, `walkaddr`, `mappages`, `kvmmap`, `unmap`,
  `load_first`, `grow`, `shrink`, `free`, `copy_to`, `clear_user`, `copyout`,
  `copyin` and `copyinstr`, plus the helpers `pg_round_up`, `pg_round_down`,
  `px`, `pte_to_pa` and `pa_to_pte`. Faults raise `KernelPanic`,
  `OutOfMemory` or `BadAddress`.
- `xvkit.umalloc`: a first-fit free-list `Allocator` over a bounded,
  simulated heap (`malloc`, `free`, `free_units`). Exhausting the heap raises
  `MemoryError`.
- `xvkit.printf`: `format_printf`, `fprintf` and `printf`, understanding only
  `%d %l %x %p %s %c %%`.
- `xvkit.grep`: `match`, a tiny regular-expression matcher supporting
  `^ . * $`, and `grep` over a text stream.
- `xvkit.shparse`: `tokenize` and `parse_command`, producing trees of
  `ExecCommand`, `RedirCommand`, `PipeCommand`, `ListCommand` and
  `BackCommand`; malformed lines raise `ShellSyntaxError`.
- `xvkit.rand`: the Park–Miller generator (`do_rand`, `ParkMiller`).
- `xvkit.ulib`: `atoi`, `strcmp`, `memcmp` and `gets` with C-style results
  (`atoi` stops at the first non-digit, `strcmp` returns the byte difference,
  `gets` keeps the line terminator).
- `xvkit.tools`: `cat`, `echo`, `wc` (returning `WcCounts`), `ls`, `fmtname`
  and `print_num_reverse`, and the command entry points listed below.

The package has no runtime dependencies.

## Installing

```
pip install .
pip install ".[test]"   # with the test tools
```

## Library examples

```python
from xvkit.grep import match
from xvkit.printf import format_printf
from xvkit.rand import ParkMiller

match("^ab*c$", "abbbc")        # True
format_printf("%d %x", -5, 255)  # "-5 FF"
ParkMiller(1).next()             # 33613
```

A user address space:

```python
from xvkit.vm import PhysicalMemory, PageTable, PteFlag

memory = PhysicalMemory(64)
table = PageTable(memory)
size = table.grow(0, 8192, PteFlag.W)
table.copyout(100, b"hello\0")
table.copyinstr(100, 64)          # b"hello"
table.free(size)
```

Parsing a command line:

```python
from xvkit.shparse import parse_command

tree = parse_command("cat < in | grep x > out; echo done &")
```

## Commands

Each tool is installed as a command and works on the host's files and
processes:

```
xv-grep PATTERN [FILE ...]
xv-cat [FILE ...]
xv-echo [WORD ...]
xv-wc [FILE ...]
xv-ls [PATH ...]
xv-hello
xv-ln OLD NEW
xv-mkdir DIR ...
xv-rm PATH ...
xv-kill PID ...
```

- `xv-grep` prints matching newline-terminated lines.
- `xv-wc` prints `lines words chars name`.
- `xv-ls` prints the blank-padded name, type number (1 directory, 2 file,
  3 other), inode number and size; a directory is listed as `.`, `..` and its
  entries in sorted order.
- `xv-mkdir` and `xv-rm` stop at the first failure; `xv-rm` also removes
  empty directories.
- `xv-kill` sends `SIGKILL` (or `SIGTERM` where that is absent) to each
  positive process id and ignores failures.
- Missing arguments print a usage line and exit with status 1.

## What this package does not do

It does not boot or run an operating system. There is no process scheduler,
no file system or disk image builder, and no disk driver: the virtio and ELF
modules only describe and encode structures. `xvkit.shparse` parses command
lines but does not run them, so there is no interactive shell command.

## Running the tests

```
pytest
```