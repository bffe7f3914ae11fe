# n7sim

`n7sim` simulates a small 32-bit teaching kernel in plain Python. The
hardware it talks to (I/O ports, video memory, the processor's flag
register) is modelled by Python objects, so every part can be driven and
inspected from ordinary code.

## What is in it

Kernel pieces:

- `n7sim.cpu`: `PortBus`, the I/O port space (`outb`/`outw`/`outl`,
  `inb`/`inw`/`inl`, with every write recorded in `writes` and reads served
  from values queued with `feed`), and `Cpu` with `cli`, `sti`, `hlt`,
  `save_flags` and `restore_flags`.
- `n7sim.console`: `Console`, an 80x25 VGA text screen with a hardware
  cursor. `putchar` handles newline, backspace, tab (stops every 4 cells),
  carriage return and form feed (clears the screen); `cell(x, y)` and
  `text()` read the screen back.
- `n7sim.mem`: `PhysicalMemory`, a bitmap of 4 KiB pages over 16 MiB, with
  `set_page`, `clear_page`, `is_used`, `find_free_page` (raises
  `OutOfPagesError` when full), `free_pages`, `reset` and `report`.
- `n7sim.kheap`: `KernelHeap`, a bump allocator (`kmalloc`, `kmalloc_a`
  for page-aligned blocks, `allocate`).
- `n7sim.sbrk`: `BreakAllocator.sbrk`, which raises `MemoryError` when the
  break would move down or past the end of its region.
- `n7sim.keyboard`: the `KeyCode` enumeration, AZERTY scancode tables,
  `scancode_to_key`, `is_key_released`, and `Keyboard.getch`, which polls
  the controller ports and tracks the shift key.
- `n7sim.paging`: `PageDirectoryEntry` and `PageTableEntry` with
  `to_int`/`from_int`, `split_virtual_address`, and `PagingManager`
  (`initialise` builds the kernel directory and tables; `alloc_page_entry`
  backs a virtual page with a physical one).
- `n7sim.descriptors`: `fill_descriptor`, `fill_gate`, `TaskStateSegment`
  and `DescriptorTables` (`setup_gdt`, `setup_idt`, `setup_tss`,
  `setup_pic`, `setup_base`).
- `n7sim.irq`: `IdtEntry`, `make_irq_entry` and `init_irq_entry` for
  32-bit ring-0 interrupt gates.
- `n7sim.debugger`: `write_hex`, `dump_registers` (paints the register
  dump of a `TaskStateSegment` into an 80x25 screen buffer from a text
  template) and `tss_selector_to_address`.
- `n7sim.timer`: `Timer` with `init` (programs the timer at 100 Hz and
  unmasks IRQ0), `tick`, `time` (returns hours, minutes, seconds) and
  `display_time` (draws the clock at the top right of the console).
- `n7sim.syscalls`: `SyscallTable` (`add`, `call`), `sys_example`,
  `sys_shutdown`, `sys_write` and `init_syscall`.
- `n7sim.panic`: `KernelPanic`, `panic(fmt, *args)` and
  `kernel_assert(condition, expression)`.
- `n7sim.kernel`: `Kernel`, the whole machine, and the `main` command.

Runtime library:

- `n7sim.chars`: ASCII `isspace`, `isdigit`, `isalpha`, `isalnum`,
  `isupper`, `islower`, `isxdigit`, `tolower`, `toupper`, and `atoi`
  (returns -1 for any non-digit character, signs included).
- `n7sim.div64`: `do_div64` returning `(quotient, remainder)`, `div64`,
  `mod64`; a zero divisor gives quotient 0 and the dividend as remainder.
- `n7sim.doprnt`: the printf engine `doprnt`, plus `sprintf` and
  `snprintf`. It supports `%d %i %u %o %x %X %c %s %p`, `%z` (signed
  hex), `%r`/`%n` (signed/unsigned in a chosen radix), the `%b` bit-field
  format, the flags `# - + 0` and space, and width and precision (also
  `*`). Integers behave as 32-bit values.

## Installation

```
pip install .
```

## Running the kernel

```
n7sim
```

This boots the simulated kernel: it initialises paging, installs the
interrupt and system-call gates, starts the timer, runs the self tests
(paging, software interrupt 50, the `example` and `shutdown` system calls)
and prints the console screen. With `--process1` it also runs the first
user process, which prints `Hello, world from P1`.

## Using the pieces

```python
from n7sim.doprnt import sprintf
from n7sim.console import Console
from n7sim.mem import PhysicalMemory
from n7sim.kernel import Kernel

sprintf("reg = %b", 3, "\10\2BITTWO\1BITONE")   # 'reg = 3<BITTWO,BITONE>'
sprintf("%08x|%-5d|%+d", 0xBEEF, 42, 7)          # '0000beef|42   |+7'

console = Console()
console.putbytes(b"hello\tworld\n")
print(console.text())

memory = PhysicalMemory()
page = memory.find_free_page()                   # 0, now marked used
print(memory.report())

kernel = Kernel()
kernel.start()
kernel.interrupt(32)                             # one timer tick, redraws the clock
kernel.printf("%d pages free\n", kernel.memory.free_pages())
print(kernel.console.text())
```

`Kernel.interrupt(vector)` looks up the gate installed in the IDT and runs
the routine behind it; it raises `LookupError` for a vector with no gate.

## What it does not do

- It does not execute machine code. Interrupt routines, system calls and
  the user process are Python functions reached through the simulated IDT.
- The register dump screen is only drawn by `dump_registers`; nothing
  raises processor exceptions, and there is no interactive debugger that
  switches between the dump and the saved screen.
- Keyboard input is only read by polling `Keyboard.getch`; no keyboard
  interrupt handler is installed, and `main` does not read from a real
  keyboard.
- `sys_shutdown(bus, 1)` writes the power-off value to the port bus; it
  does not stop the program.

## Tests

```
pip install .[test]
pytest
```