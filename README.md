# secos

Pure-Python models of the pieces of a small x86-64 hobby kernel: an in-memory
filesystem behind a single-root virtual filesystem layer, FAT32 and ext2
header readers, keyboard, PIT timer and CMOS clock logic, a framebuffer with
a text console, and encoders for the GDT, TSS and IDT. There are no
third-party dependencies.

## Installing

```
pip install .
```

To run the tests, install the `test` extra and run `pytest`.

## Filesystems

```python
from secos.ramfs import RamFS
from secos.vfs import Vfs
from secos.ramfs_vfs import mount_ramfs

fs = RamFS()
fs.init("20250101000000", "NOHASH")   # sample files, VERSION, sys/manifest.txt
vfs = Vfs()
mount_ramfs(vfs, fs)

print(vfs.read_all("/hello.txt", 256))  # b'Hello from RAMFS!\n'
vfs.create("/notes.txt", b"first")
vfs.write("/notes.txt", 5, b" line")
for child in vfs.readdir("/"):
    print(child.path, child.type)
```

- `secos.ramfs.RamFS` holds at most 32 entries, each named by its full path
  (without a leading `/`) shorter than 96 characters. It supports `add`,
  `add_static`, `write`, `truncate`, `remove`, `mkdir`, `rmdir`, `rename`
  (which moves a directory's descendants with it), `find`, `entries`,
  `list_path` and `is_dir`. Entries added with `add_static` are immutable
  and cannot be written, truncated, renamed or removed. Writes may not start
  past the end of a file. Failures raise `RamFSError`.
- `secos.vfs.Vfs` dispatches path operations to one filesystem mounted at
  `/`. `mount_root` fails if a root is already mounted; `replace_root`
  does not. Failures raise `VfsError`. A filesystem is any subclass of
  `FilesystemOps`; its defaults find nothing and refuse every change.
- `secos.ramfs_vfs.RamFSOps` adapts a `RamFS` to that interface, turning
  `RamFSError` into `VfsError`; `mount_ramfs(vfs, ramfs)` mounts it.

## Block devices, FAT32 and ext2

`secos.block.BlockRegistry` holds up to four `BlockDevice`s, found by name.
`RamBlockDevice` is backed by a byte buffer, and `make_ext2_ramdev()`
returns a zero-filled eight-sector device named `ext2ram`.

- `secos.fat32.parse_bpb(device)` decodes the BIOS parameter block from
  sector 0; `mount_fat32(registry, ramfs, dev_name)` does so for a
  registered device and adds `fat32_bpb.txt` with a text report to the RAM
  filesystem.
- `secos.ext2.read_superblock(device)` decodes the superblock at byte 1024
  and checks the `0xEF53` magic; `mount_ext2(registry, ramfs, vfs,
  dev_name)` adds `ext2_superblock.txt` and makes a placeholder `Ext2Ops`
  the VFS root. The zero-filled `ext2ram` device fails the magic check.

## Drivers

- `secos.keyboard`: `translate_scancode` maps US QWERTY set-1 make codes to
  characters; `Keyboard.handle_scancode` tracks shift and caps lock and
  buffers up to 255 characters for `getchar` and `readline` (both take an
  optional timeout and raise `TimeoutError`).
- `secos.timer`: `pit_divisor` computes the clamped PIT reload value;
  `Timer.init` resets state and returns the `(port, byte)` writes that would
  program the PIT; `handle_tick` counts ticks and runs up to eight callbacks;
  `sleep` and `sleep_ms` block until enough ticks have passed.
- `secos.rtc`: `decode_registers` turns raw CMOS values (BCD or binary,
  12- or 24-hour) into an `RtcDateTime`, and `format_datetime` renders it
  as `YYYY-MM-DD HH:MM:SS`.
- `secos.fb.Framebuffer` wraps a `bytearray` of `pitch * height` bytes.
  `clear` and `putpixel` write 32-bit values; `draw_test_pattern` and
  `debug_fill` handle 16, 24 and 32 bits per pixel; `getpixel` reads one
  back.
- `secos.font` holds the 8x16 font for ASCII 32–126, the CP437
  box-drawing shapes (`box_drawing_mask`), `render_glyph` and `fontdump`.
- `secos.console.FramebufferConsole` renders text on a 32-bpp framebuffer
  with wrapping, backspace and scrolling, a chip-shaped logo with a glow,
  a blinking underline cursor driven by `tick` (optionally registered on a
  `Timer`) and optional double buffering (`enable_dbuf`, `flush`,
  `set_dbuf_auto`).

## Descriptor tables

`secos.tss.build_gdt(tss_base)` returns the packed GDT (five segment
descriptors plus a 16-byte TSS descriptor), `gdt_pointer` the packed
limit/base operand, and `Tss.pack` the task state segment. `secos.idt.Idt`
fills a 256-entry interrupt table from named handler addresses (`init`),
packs it and its pointer, and `pic_remap_sequence` lists the port writes
that move the 8259 PIC interrupts to vectors 0x20–0x2F.

## What this package does not do

It touches no hardware: port I/O is returned as lists of `(port, byte)`
pairs and descriptor tables as bytes, and nothing is loaded into a CPU.
The FAT32 and ext2 code reads only the header structures; `Fat32Ops` and
`Ext2Ops` show no files and refuse every change. There is no command-line
program, shell, scheduler or boot process.