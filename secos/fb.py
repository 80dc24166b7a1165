"""Linear framebuffer description and basic drawing primitives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

_BYTES_PER_PIXEL = {16: 2, 24: 3, 32: 4}


@dataclass
class FramebufferInfo:
    """Geometry and pixel format of a linear framebuffer."""

    addr: int = 0
    virt_addr: int = 0
    pitch: int = 0
    width: int = 0
    height: int = 0
    bpp: int = 32
    type: int = 1
    red_mask_size: int = 0
    red_mask_pos: int = 0
    green_mask_size: int = 0
    green_mask_pos: int = 0
    blue_mask_size: int = 0
    blue_mask_pos: int = 0


def pack_rgb(r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into a 0xRRGGBB value."""
    return ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def _split_rgb(color: int):
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def _rgb565(r: int, g: int, b: int) -> int:
    return ((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)


def _encode(bpp: int, r: int, g: int, b: int) -> Optional[bytes]:
    if bpp == 32:
        return pack_rgb(r, g, b).to_bytes(4, "little")
    if bpp == 24:
        return bytes((b, g, r))
    if bpp == 16:
        return _rgb565(r, g, b).to_bytes(2, "little")
    return None


class Framebuffer:
    """A framebuffer whose pixel memory is a bytearray of ``pitch * height``."""

    def __init__(
        self,
        info: FramebufferInfo,
        memory: Optional[Union[bytearray, memoryview]] = None,
    ) -> None:
        if info.width < 0 or info.height < 0 or info.pitch < 0:
            raise ValueError("framebuffer dimensions must not be negative")
        bytes_pp = _BYTES_PER_PIXEL.get(info.bpp)
        if bytes_pp is not None and info.pitch < info.width * bytes_pp:
            raise ValueError("pitch is smaller than a row of pixels")
        size = info.pitch * info.height
        if memory is None:
            memory = bytearray(size)
        elif len(memory) < size:
            raise ValueError("framebuffer memory is smaller than pitch * height")
        self.info = info
        self.memory = memory

    def _store(self, offset: int, raw: bytes) -> None:
        end = min(offset + len(raw), len(self.memory))
        if end > offset:
            self.memory[offset:end] = raw[: end - offset]

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.info.width and 0 <= y < self.info.height

    def clear(self, color: int) -> None:
        """Write ``color`` as a 32-bit value to every pixel of every row."""
        row = (color & 0xFFFFFFFF).to_bytes(4, "little") * self.info.width
        for y in range(self.info.height):
            self._store(y * self.info.pitch, row)

    def putpixel(self, x: int, y: int, color: int) -> None:
        """Write a 32-bit ``color`` at (x, y); points outside are ignored."""
        if not self._in_bounds(x, y):
            return
        offset = y * self.info.pitch + x * 4
        self._store(offset, (color & 0xFFFFFFFF).to_bytes(4, "little"))

    def getpixel(self, x: int, y: int) -> int:
        """Read the pixel at (x, y) in the framebuffer's own format.

        32 and 24 bpp give 0xRRGGBB, 16 bpp gives the raw RGB565 value.
        """
        if not self._in_bounds(x, y):
            raise IndexError(f"pixel ({x}, {y}) is outside the framebuffer")
        bytes_pp = _BYTES_PER_PIXEL.get(self.info.bpp)
        if bytes_pp is None:
            raise ValueError(f"unsupported depth {self.info.bpp} bpp")
        offset = y * self.info.pitch + x * bytes_pp
        raw = bytes(self.memory[offset : offset + bytes_pp])
        if self.info.bpp == 24:
            b, g, r = raw
            return pack_rgb(r, g, b)
        return int.from_bytes(raw, "little")

    def draw_test_pattern(self) -> None:
        """Fill the screen with a red/green/blue gradient."""
        info = self.info
        if info.bpp not in _BYTES_PER_PIXEL:
            return
        for y in range(info.height):
            row = bytearray()
            for x in range(info.width):
                r = (x * 255) // info.width
                g = (y * 255) // info.height
                b = ((x + y) * 255) // (info.width + info.height)
                row += _encode(info.bpp, r & 0xFF, g & 0xFF, b & 0xFF)
            self._store(y * info.pitch, bytes(row))

    def debug_fill(self, color_rgb: int) -> None:
        """Fill every pixel with ``color_rgb`` converted to the pixel format."""
        info = self.info
        r, g, b = _split_rgb(color_rgb)
        if info.bpp == 32:
            pixel = (color_rgb & 0xFFFFFFFF).to_bytes(4, "little")
        else:
            pixel = _encode(info.bpp, r, g, b)
            if pixel is None:
                return
        row = pixel * info.width
        for y in range(info.height):
            self._store(y * info.pitch, row)