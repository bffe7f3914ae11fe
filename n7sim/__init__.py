"""Simulation of a small teaching kernel and its runtime library."""

__version__ = "0.1.0"

__all__ = [
    "chars",
    "div64",
    "doprnt",
    "cpu",
    "console",
    "mem",
    "kheap",
    "sbrk",
    "keyboard",
    "paging",
    "descriptors",
    "irq",
    "debugger",
    "timer",
    "syscalls",
    "panic",
    "kernel",
]