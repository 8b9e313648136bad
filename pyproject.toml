[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkit"
version = "0.1.0"
description = "Memory layout, ELF and virtio structures, a simulated Sv39 page table, a shell parser and small user tools from a RISC-V teaching operating system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "teaching",
    "riscv",
    "page-table",
    "virtio",
    "elf",
    "shell",
    "grep",
    "malloc",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[project.scripts]
xv-grep = "xvkit.grep:main"
xv-cat = "xvkit.tools:cat_main"
xv-echo = "xvkit.tools:echo_main"
xv-wc = "xvkit.tools:wc_main"
xv-hello = "xvkit.tools:hello_main"
xv-ln = "xvkit.tools:ln_main"
xv-mkdir = "xvkit.tools:mkdir_main"
xv-rm = "xvkit.tools:rm_main"
xv-ls = "xvkit.tools:ls_main"
xv-kill = "xvkit.tools:kill_main"

[tool.hatch.build.targets.wheel]
packages = ["xvkit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
