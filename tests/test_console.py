import pytest

from secos.console import (
    LOGO_OUTLINE,
    VGA_PALETTE,
    FramebufferConsole,
    blend,
)
from secos.fb import Framebuffer, FramebufferInfo
from secos.font import render_glyph
from secos.timer import Timer

WIDTH, HEIGHT = 320, 64


def make_console(bpp=32):
    info = FramebufferInfo(width=WIDTH, height=HEIGHT, pitch=WIDTH * 4, bpp=bpp)
    fb = Framebuffer(info)
    return FramebufferConsole(fb), fb


def cell_matches(fb, cx, cy, char, fg, bg):
    mask = render_glyph(char)
    return all(
        fb.getpixel(cx * 8 + col, cy * 16 + row) == (fg if mask[row][col] else bg)
        for row in range(16)
        for col in range(8)
    )


def test_blend_endpoints_and_clamping():
    a, b = 0x003366, 0x00AAFF
    assert blend(a, b, 0.0) == a
    assert blend(a, b, 1.0) == b
    assert blend(a, b, -3.0) == a
    assert blend(a, b, 7.0) == b
    assert blend(0x000000, 0xFFFFFF, 0.5) == 0x7F7F7F


def test_rejects_non_32bpp():
    info = FramebufferInfo(width=WIDTH, height=HEIGHT, pitch=WIDTH * 3, bpp=24)
    with pytest.raises(ValueError):
        FramebufferConsole(Framebuffer(info))


def test_putc_draws_glyph_white_on_black():
    console, fb = make_console()
    console.putc("A")
    assert console.cursor_x == 1 and console.cursor_y == 0
    assert cell_matches(fb, 0, 0, "A", VGA_PALETTE[15], VGA_PALETTE[0])


def test_set_color_uses_palette():
    console, fb = make_console()
    console.set_color(10, 1)
    console.putc("H")
    assert cell_matches(fb, 0, 0, "H", 0x55FF55, 0x0000AA)


def test_newline_moves_to_next_row():
    console, _ = make_console()
    console.write("ab\n")
    assert (console.cursor_x, console.cursor_y) == (0, 1)


def test_backspace_erases_cell():
    console, fb = make_console()
    console.write("A\b")
    assert console.cursor_x == 0
    assert all(fb.getpixel(x, y) == 0 for x in range(8) for y in range(16))


def test_backspace_wraps_to_previous_row():
    console, _ = make_console()
    console.write("x\n\b")
    assert console.cursor_y == 0
    assert console.cursor_x == WIDTH // 8 - 1


def test_wraps_at_end_of_row():
    console, _ = make_console()
    console.write("a" * (WIDTH // 8))
    assert (console.cursor_x, console.cursor_y) == (0, 1)


def test_scroll_moves_text_up():
    console, fb = make_console()
    console.write("A\nB\n\n\n")
    assert console.cursor_y == HEIGHT // 16 - 1
    assert cell_matches(fb, 0, 0, "B", VGA_PALETTE[15], VGA_PALETTE[0])


def test_write_equals_putc_sequence():
    c1, fb1 = make_console()
    c2, fb2 = make_console()
    c1.write("Hi!\n\bz")
    for ch in "Hi!\n\bz":
        c2.putc(ch)
    assert bytes(fb1.memory) == bytes(fb2.memory)
    assert (c1.cursor_x, c1.cursor_y) == (c2.cursor_x, c2.cursor_y)


def test_logo_outline_and_glow():
    console, fb = make_console()
    assert console.logo_x == WIDTH - 120 - 8
    assert fb.getpixel(console.logo_x, console.logo_y) == LOGO_OUTLINE
    assert fb.getpixel(console.logo_x - 3, console.logo_y + 5) == 0x003366


def test_cursor_blink_with_timer():
    console, fb = make_console()
    timer = Timer()
    timer.init(100)
    console.enable_cursor_blink(timer, 100)
    fg = VGA_PALETTE[15]
    assert fb.getpixel(0, 15) == fg and fb.getpixel(7, 14) == fg
    for _ in range(50):
        timer.handle_tick()
    assert fb.getpixel(0, 15) == 0
    assert console.logo_glow_phase == 10
    for _ in range(50):
        timer.handle_tick()
    assert fb.getpixel(0, 15) == fg


def test_cursor_blink_zero_frequency_rejected():
    console, _ = make_console()
    with pytest.raises(ValueError):
        console.enable_cursor_blink(None, 0)


def test_disable_cursor_blink_erases_underline():
    console, fb = make_console()
    console.enable_cursor_blink(None, 10)
    console.disable_cursor_blink()
    assert fb.getpixel(0, 15) == 0
    assert console.cursor_blink_enabled is False


def test_double_buffer_defers_until_flush():
    console, fb = make_console()
    before = bytes(fb.memory)
    console.enable_dbuf()
    console.putc("A")
    assert bytes(fb.memory) == before
    console.flush()
    assert cell_matches(fb, 0, 0, "A", VGA_PALETTE[15], VGA_PALETTE[0])


def test_double_buffer_auto_flush_and_disable():
    console, fb = make_console()
    console.enable_dbuf()
    console.set_dbuf_auto(True)
    console.putc("B")
    assert cell_matches(fb, 0, 0, "B", VGA_PALETTE[15], VGA_PALETTE[0])
    console.set_dbuf_auto(False)
    console.putc("C")
    console.disable_dbuf()
    assert console.dbuf_enabled is False
    assert cell_matches(fb, 1, 0, "C", VGA_PALETTE[15], VGA_PALETTE[0])