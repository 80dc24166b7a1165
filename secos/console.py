"""Text console drawn on a 32-bpp framebuffer.

Renders 8x16 glyphs, a blinking underline cursor, a chip-shaped logo with
a pulsing glow and optional double buffering.
"""

from __future__ import annotations

from typing import Optional, Union

from secos.fb import Framebuffer
from secos.font import GLYPH_H, GLYPH_W, glyph, render_glyph
from secos.timer import Timer

KERNEL_VERSION = "v0.2"

VGA_BLACK = 0
VGA_LIGHT_GREEN = 10
VGA_WHITE = 15

VGA_PALETTE = (
    0x000000, 0x0000AA, 0x00AA00, 0x00AAAA, 0xAA0000, 0xAA00AA, 0xAA5500, 0xAAAAAA,
    0x555555, 0x5555FF, 0x55FF55, 0x55FFFF, 0xFF5555, 0xFF55FF, 0xFFFF55, 0xFFFFFF,
)

CURSOR_THICKNESS = 2

LOGO_BODY_W = 120
LOGO_BODY_H = 40
LOGO_MARGIN = 8
LOGO_TOP = 4
LOGO_PIN_LEN = 6
LOGO_PIN_SPACING = 10
LOGO_LABEL = "SecOS"
LOGO_BODY_TOP = 0x303030
LOGO_BODY_BOTTOM = 0x202020
LOGO_PIN = 0x909090
LOGO_PIN_SHADOW = 0x404040
LOGO_OUTLINE = 0xAAAAAA
LOGO_TEXT = 0x66CCFF
LOGO_VERSION_TEXT = 0x88FFAA
GLOW_A = 0x003366
GLOW_B = 0x00AAFF
GLOW_C = 0x33DDFF
GLOW_PAD = 3
GLOW_PERIOD = 200
GLOW_TICK_DIVIDER = 5


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def blend(a: int, b: int, t: float) -> int:
    """Interpolate between two 0xRRGGBB colours; ``t`` is clamped to 0..1."""
    t = min(max(t, 0.0), 1.0)
    channels = []
    for shift in (16, 8, 0):
        ca = (a >> shift) & 0xFF
        cb = (b >> shift) & 0xFF
        channels.append((ca + int((cb - ca) * t)) & 0xFF)
    r, g, bl = channels
    return (r << 16) | (g << 8) | bl


def _char_code(char: Union[str, int]) -> int:
    if isinstance(char, int):
        return char & 0xFF
    if isinstance(char, str) and len(char) == 1:
        return ord(char)
    raise TypeError(f"expected a single character or a byte, got {char!r}")


class FramebufferConsole:
    """A scrolling text console on a 32-bpp framebuffer.

    Creating one clears the screen, draws the logo and selects white on
    black.
    """

    def __init__(self, framebuffer: Framebuffer, version: str = KERNEL_VERSION) -> None:
        info = framebuffer.info
        if info.bpp != 32:
            raise ValueError(f"console needs a 32 bpp framebuffer, got {info.bpp}")
        if info.width < GLYPH_W or info.height < GLYPH_H:
            raise ValueError("framebuffer is smaller than one character cell")
        self.framebuffer = framebuffer
        self.width = info.width
        self.height = info.height
        self.pitch = info.pitch
        self.version = version
        self.fg = VGA_LIGHT_GREEN
        self.bg = VGA_BLACK
        self.cursor_x = 0
        self.cursor_y = 0
        self.cursor_blink_enabled = False
        self.cursor_blink_phase = 0
        self.blink_counter = 0
        self.blink_interval_ticks = 0
        self.logo_glow_enabled = True
        self.logo_glow_phase = 0
        self.logo_x = 0
        self.logo_y = 0
        self.logo_w = 0
        self.logo_h = 0
        self._dbuf: Optional[bytearray] = None
        self.dbuf_auto_flush = False

        framebuffer.clear(0x000000)
        self.draw_logo()
        self.set_color(VGA_WHITE, VGA_BLACK)

    # -- low-level drawing -------------------------------------------------

    @property
    def dbuf_enabled(self) -> bool:
        return self._dbuf is not None

    @property
    def _target(self):
        return self._dbuf if self._dbuf is not None else self.framebuffer.memory

    @property
    def _size(self) -> int:
        return self.pitch * self.height

    @property
    def _fg_rgb(self) -> int:
        return VGA_PALETTE[self.fg & 0xF]

    @property
    def _bg_rgb(self) -> int:
        return VGA_PALETTE[self.bg & 0xF]

    def _put(self, x: int, y: int, rgb: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        offset = y * self.pitch + x * 4
        self._target[offset : offset + 4] = (rgb & 0xFFFFFFFF).to_bytes(4, "little")

    def _draw_block(self, x: int, y: int, w: int, h: int, rgb: int) -> None:
        if x < 0 or y < 0:
            return
        w = min(w, self.width - x)
        h = min(h, self.height - y)
        if w <= 0 or h <= 0:
            return
        row = (rgb & 0xFFFFFFFF).to_bytes(4, "little") * w
        target = self._target
        for yy in range(y, y + h):
            offset = yy * self.pitch + x * 4
            target[offset : offset + 4 * w] = row

    def _flush_unless_auto(self) -> None:
        if self.dbuf_enabled and not self.dbuf_auto_flush:
            self.flush()

    def _flush_if_auto(self) -> None:
        if self.dbuf_enabled and self.dbuf_auto_flush:
            self.flush()

    # -- cursor ------------------------------------------------------------

    def _underline(self, rgb: int) -> None:
        gx = self.cursor_x * GLYPH_W
        gy = self.cursor_y * GLYPH_H
        thickness = min(CURSOR_THICKNESS, GLYPH_H)
        for y in range(thickness):
            for x in range(GLYPH_W):
                self._put(gx + x, gy + GLYPH_H - 1 - y, rgb)
        self._flush_unless_auto()

    def _draw_cursor(self) -> None:
        if not self.cursor_blink_enabled:
            return
        self._underline(self._fg_rgb)

    def _clear_cursor(self) -> None:
        self._underline(self._bg_rgb)

    def enable_cursor_blink(self, timer: Optional[Timer], timer_freq: int) -> None:
        """Start blinking the cursor about twice a second.

        ``tick`` is registered on ``timer``; with no timer the caller drives
        ``tick`` itself.
        """
        if timer_freq <= 0:
            raise ValueError("timer frequency must be positive")
        self.blink_interval_ticks = max(timer_freq // 2, 1)
        if timer is not None:
            timer.register_tick_callback(self.tick)
        self.cursor_blink_enabled = True
        self.blink_counter = 0
        self.cursor_blink_phase = 0
        self._draw_cursor()

    def disable_cursor_blink(self) -> None:
        """Stop blinking and erase the cursor."""
        if not self.cursor_blink_enabled:
            return
        self.cursor_blink_enabled = False
        self._clear_cursor()

    def tick(self) -> None:
        """Advance the blink and glow animations by one timer tick."""
        if not self.cursor_blink_enabled:
            return
        self.blink_counter += 1
        if self.logo_glow_enabled and self.blink_counter % GLOW_TICK_DIVIDER == 0:
            self.logo_glow_phase += 1
            self._draw_logo_glow()
        if self.blink_counter >= self.blink_interval_ticks:
            self.blink_counter = 0
            if self.cursor_blink_phase == 0:
                self._clear_cursor()
                self.cursor_blink_phase = 1
            else:
                self._draw_cursor()
                self.cursor_blink_phase = 0

    # -- logo --------------------------------------------------------------

    def _glow_colors(self):
        phase = (self.logo_glow_phase % GLOW_PERIOD) / GLOW_PERIOD
        left = blend(GLOW_A, GLOW_B, phase)
        right = blend(GLOW_B, GLOW_C, phase)
        return left, right, blend(left, right, 0.5)

    def _paint_glow(self) -> None:
        left, right, edge = self._glow_colors()
        gx0 = self.logo_x - GLOW_PAD
        gy0 = self.logo_y - GLOW_PAD
        gw0 = self.logo_w + GLOW_PAD * 2
        gh0 = self.logo_h + GLOW_PAD * 2
        for x in range(gw0):
            self._put(gx0 + x, gy0, edge)
            self._put(gx0 + x, gy0 + gh0 - 1, edge)
        for y in range(gh0):
            self._put(gx0, gy0 + y, left)
            self._put(gx0 + gw0 - 1, gy0 + y, right)

    def _draw_logo_glow(self) -> None:
        if not self.logo_glow_enabled or self.logo_w == 0:
            return
        self._paint_glow()
        self._flush_unless_auto()

    def _clear_logo_area(self) -> None:
        if self.logo_w == 0 or self.logo_h == 0:
            return
        reach = LOGO_PIN_LEN + 2
        top = max(self.logo_y - reach, 0)
        left = max(self.logo_x - reach, 0)
        bottom = min(self.logo_y + self.logo_h + reach, self.height)
        right = min(self.logo_x + self.logo_w + reach, self.width)
        self._draw_block(left, top, right - left, bottom - top, 0x000000)

    def _draw_text(self, text: str, x: int, y: int, spacing: int, rgb: int,
                   shadow: bool, opaque: bool) -> None:
        for i, char in enumerate(text):
            rows = glyph(char)
            gx = x + i * (GLYPH_W + spacing)
            if shadow:
                for r, line in enumerate(rows):
                    for col in range(GLYPH_W):
                        if (line >> col) & 1:
                            self._draw_block(gx + col + 1, y + r + 1, 1, 1, 0x000000)
            for r, line in enumerate(rows):
                for col in range(GLYPH_W):
                    if (line >> col) & 1:
                        self._draw_block(gx + col, y + r, 1, 1, rgb)
                    elif opaque:
                        self._draw_block(gx + col, y + r, 1, 1, 0x000000)

    def draw_logo(self) -> None:
        """Draw the chip logo with its label and version in the top-right."""
        body_w, body_h = LOGO_BODY_W, LOGO_BODY_H
        if body_w + LOGO_MARGIN > self.width:
            body_w = self.width - LOGO_MARGIN
        self.logo_w, self.logo_h = body_w, body_h
        self.logo_x = self.width - body_w - LOGO_MARGIN
        self.logo_y = LOGO_TOP
        x0, y0 = self.logo_x, self.logo_y

        for y in range(body_h):
            colour = blend(LOGO_BODY_TOP, LOGO_BODY_BOTTOM, y / (body_h - 1))
            self._draw_block(x0, y0 + y, body_w, 1, colour)

        self._draw_block(x0, y0, body_w, 1, LOGO_OUTLINE)
        self._draw_block(x0, y0 + body_h - 1, body_w, 1, LOGO_OUTLINE)
        self._draw_block(x0, y0, 1, body_h, LOGO_OUTLINE)
        self._draw_block(x0 + body_w - 1, y0, 1, body_h, LOGO_OUTLINE)

        pin = LOGO_PIN_LEN
        for px in range(x0 + 6, x0 + body_w - 6, LOGO_PIN_SPACING):
            for py in (y0 - (pin + 2), y0 + body_h + 2):
                self._draw_block(px, py, 4, pin, LOGO_PIN)
                self._draw_block(px + 1, py, 2, pin, LOGO_PIN_SHADOW)
        for py in range(y0 + 6, y0 + body_h - 6, LOGO_PIN_SPACING):
            for px in (x0 - (pin + 2), x0 + body_w + 2):
                self._draw_block(px, py, pin, 4, LOGO_PIN)
                self._draw_block(px, py + 1, pin, 2, LOGO_PIN_SHADOW)

        spacing = 1
        label_w = len(LOGO_LABEL) * GLYPH_W + (len(LOGO_LABEL) - 1) * spacing
        tx = x0 + _cdiv(body_w - label_w, 2)
        ty = y0 + _cdiv(body_h - GLYPH_H, 2)
        self._draw_text(LOGO_LABEL, tx, ty, spacing, LOGO_TEXT, shadow=True, opaque=True)

        ver_w = len(self.version) * GLYPH_W + (len(self.version) - 1) * spacing
        vtx = x0 + _cdiv(body_w - ver_w, 2)
        vty = y0 + body_h - GLYPH_H - 2
        self._draw_text(self.version, vtx, vty, spacing, LOGO_VERSION_TEXT,
                        shadow=False, opaque=False)

        if self.logo_glow_enabled:
            self._paint_glow()

    # -- text --------------------------------------------------------------

    def set_color(self, fg: int, bg: int) -> None:
        """Select VGA palette indices for text and background."""
        self.fg = fg
        self.bg = bg

    def _draw_glyph(self, code: int, gx: int, gy: int) -> None:
        fg, bg = self._fg_rgb, self._bg_rgb
        for row, bits in enumerate(render_glyph(code)):
            for col, on in enumerate(bits):
                self._put(gx + col, gy + row, fg if on else bg)

    def _scroll_if_needed(self) -> None:
        if (self.cursor_y + 1) * GLYPH_H <= self.height:
            return
        target = self._target
        line_bytes = self.pitch * GLYPH_H
        self._clear_logo_area()
        copy_bytes = self.pitch * (self.height - GLYPH_H)
        target[0:copy_bytes] = target[line_bytes : line_bytes + copy_bytes]
        self._draw_block(0, self.height - GLYPH_H, self.width, GLYPH_H, 0x000000)
        self.cursor_y -= 1
        self.draw_logo()
        self._flush_unless_auto()

    def _redraw_cursor_after_move(self) -> None:
        if self.cursor_blink_enabled:
            self._draw_cursor()
            self.cursor_blink_phase = 0

    def putc(self, char: Union[str, int]) -> None:
        """Print one character, handling newline, backspace, wrap and scroll."""
        code = _char_code(char)
        cells_per_row = self.width // GLYPH_W
        if code in (0x0A, 0x08):
            if self.cursor_blink_enabled and self.cursor_blink_phase == 0:
                self._clear_cursor()
            if code == 0x0A:
                self.cursor_x = 0
                self.cursor_y += 1
                self._scroll_if_needed()
            else:
                if self.cursor_x > 0:
                    self.cursor_x -= 1
                elif self.cursor_y > 0:
                    self.cursor_y -= 1
                    self.cursor_x = cells_per_row - 1
                self._draw_block(self.cursor_x * GLYPH_W, self.cursor_y * GLYPH_H,
                                 GLYPH_W, GLYPH_H, self._bg_rgb)
            self._redraw_cursor_after_move()
            self._flush_if_auto()
            return

        if self.cursor_x >= cells_per_row:
            self.cursor_x = 0
            self.cursor_y += 1
            self._scroll_if_needed()
        self._draw_glyph(code, self.cursor_x * GLYPH_W, self.cursor_y * GLYPH_H)
        self.cursor_x += 1
        self._redraw_cursor_after_move()
        if self.cursor_x >= cells_per_row:
            self.cursor_x = 0
            self.cursor_y += 1
            self._scroll_if_needed()
        self._flush_if_auto()

    def write(self, text: str) -> None:
        """Print every character of ``text``."""
        for char in text:
            self.putc(char)

    # -- double buffering --------------------------------------------------

    def enable_dbuf(self) -> None:
        """Draw into a private buffer, copied to the screen on flush."""
        if self._dbuf is not None:
            return
        self._dbuf = bytearray(self.framebuffer.memory[: self._size])

    def disable_dbuf(self) -> None:
        """Flush and stop double buffering."""
        if self._dbuf is None:
            return
        self.flush()
        self._dbuf = None

    def flush(self) -> None:
        """Copy the private buffer to the framebuffer."""
        if self._dbuf is None:
            return
        self.framebuffer.memory[: self._size] = self._dbuf

    def set_dbuf_auto(self, on: bool) -> None:
        """Flush automatically after every character when ``on``."""
        self.dbuf_auto_flush = bool(on)
        if self.dbuf_auto_flush:
            self.flush()