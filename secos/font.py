"""The 8x16 console font, CP437 box-drawing shapes and glyph rendering."""

from __future__ import annotations

from typing import Optional, Tuple, Union

GLYPH_W = 8
GLYPH_H = 16
FIRST_CHAR = 32
LAST_CHAR = 126
REPLACEMENT = "?"

Bitmap = Tuple[Tuple[bool, ...], ...]
CharLike = Union[str, int]


def _g(*rows: int) -> Tuple[int, ...]:
    return tuple(rows) + (0,) * (GLYPH_H - len(rows))


# ASCII 32..126; bit 0 of each row is the leftmost pixel.
FONT8X16: Tuple[Tuple[int, ...], ...] = (
    _g(),  # ' '
    _g(0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x00, 0x18, 0x18),  # '!'
    _g(0x36, 0x36, 0x36, 0x12, 0x24),  # '"'
    _g(0x36, 0x36, 0x36, 0x7F, 0x36, 0x7F, 0x36, 0x36, 0x36),  # '#'
    _g(0x0C, 0x3E, 0x03, 0x03, 0x1E, 0x30, 0x30, 0x1F, 0x0C, 0x0C),  # '$'
    _g(0x00, 0x63, 0x73, 0x18, 0x0C, 0x06, 0x67, 0x63),  # '%'
    _g(0x1C, 0x36, 0x36, 0x1C, 0x6E, 0x3B, 0x33, 0x6E),  # '&'
    _g(0x0C, 0x0C, 0x0C, 0x06, 0x06),  # "'"
    _g(0x18, 0x0C, 0x06, 0x06, 0x06, 0x06, 0x06, 0x0C, 0x18),  # '('
    _g(0x06, 0x0C, 0x18, 0x18, 0x18, 0x18, 0x18, 0x0C, 0x06),  # ')'
    _g(0x00, 0x66, 0x3C, 0xFF, 0x3C, 0x66),  # '*'
    _g(0x00, 0x0C, 0x0C, 0x7F, 0x0C, 0x0C),  # '+'
    _g(0, 0, 0, 0, 0, 0, 0, 0x0C, 0x0C, 0x06),  # ','
    _g(0, 0, 0, 0x7F),  # '-'
    _g(0, 0, 0, 0, 0, 0, 0, 0x0C, 0x0C),  # '.'
    _g(0x60, 0x70, 0x18, 0x0C, 0x06, 0x03, 0x01),  # '/'
    _g(0x3E, 0x63, 0x73, 0x7B, 0x6F, 0x67, 0x63, 0x3E),  # '0'
    _g(0x18, 0x1C, 0x18, 0x18, 0x18, 0x18, 0x18, 0x7E),  # '1'
    _g(0x3E, 0x63, 0x60, 0x30, 0x18, 0x0C, 0x06, 0x7F),  # '2'
    _g(0x3E, 0x63, 0x60, 0x3C, 0x60, 0x60, 0x63, 0x3E),  # '3'
    _g(0x30, 0x38, 0x3C, 0x36, 0x33, 0x7F, 0x30, 0x30),  # '4'
    _g(0x7F, 0x03, 0x03, 0x3F, 0x60, 0x60, 0x63, 0x3E),  # '5'
    _g(0x3C, 0x06, 0x03, 0x3F, 0x63, 0x63, 0x63, 0x3E),  # '6'
    _g(0x7F, 0x63, 0x60, 0x30, 0x18, 0x0C, 0x0C, 0x0C),  # '7'
    _g(0x3E, 0x63, 0x63, 0x3E, 0x63, 0x63, 0x63, 0x3E),  # '8'
    _g(0x3E, 0x63, 0x63, 0x7E, 0x60, 0x60, 0x30, 0x1E),  # '9'
    _g(0, 0x0C, 0x0C, 0, 0, 0, 0, 0x0C, 0x0C),  # ':'
    _g(0, 0x0C, 0x0C, 0, 0, 0, 0, 0x0C, 0x0C, 0x06),  # ';'
    _g(0x30, 0x18, 0x0C, 0x06, 0x0C, 0x18, 0x30),  # '<'
    _g(0, 0, 0x7F, 0, 0x7F),  # '='
    _g(0x06, 0x0C, 0x18, 0x30, 0x18, 0x0C, 0x06),  # '>'
    _g(0x3E, 0x63, 0x60, 0x30, 0x18, 0, 0x18, 0x18),  # '?'
    _g(0x3E, 0x41, 0x5D, 0x55, 0x5D, 0x1D, 0x01, 0x3E),  # '@'
    _g(0x18, 0x3C, 0x66, 0x66, 0x7E, 0x66, 0x66, 0x66),  # 'A'
    _g(0x3F, 0x66, 0x66, 0x3E, 0x66, 0x66, 0x66, 0x3F),  # 'B'
    _g(0x3C, 0x66, 0x03, 0x03, 0x03, 0x03, 0x66, 0x3C),  # 'C'
    _g(0x1F, 0x36, 0x66, 0x66, 0x66, 0x66, 0x36, 0x1F),  # 'D'
    _g(0x7F, 0x46, 0x16, 0x1E, 0x16, 0x46, 0x46, 0x7F),  # 'E'
    _g(0x7F, 0x46, 0x16, 0x1E, 0x16, 0x06, 0x06, 0x0F),  # 'F'
    _g(0x3C, 0x66, 0x03, 0x03, 0x73, 0x63, 0x66, 0x7C),  # 'G'
    _g(0x63, 0x63, 0x63, 0x7F, 0x63, 0x63, 0x63, 0x63),  # 'H'
    _g(0x3C, 0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x3C),  # 'I'
    _g(0x78, 0x30, 0x30, 0x30, 0x30, 0x33, 0x33, 0x1E),  # 'J'
    _g(0x67, 0x66, 0x36, 0x1E, 0x1E, 0x36, 0x66, 0x67),  # 'K'
    _g(0x0F, 0x06, 0x06, 0x06, 0x06, 0x46, 0x66, 0x7F),  # 'L'
    _g(0x41, 0x63, 0x77, 0x7F, 0x6B, 0x63, 0x63, 0x63),  # 'M'
    _g(0x63, 0x63, 0x67, 0x6F, 0x7B, 0x73, 0x63, 0x63),  # 'N'
    _g(0x3E, 0x63, 0x63, 0x63, 0x63, 0x63, 0x63, 0x3E),  # 'O'
    _g(0x3F, 0x66, 0x66, 0x66, 0x3E, 0x06, 0x06, 0x0F),  # 'P'
    _g(0x3E, 0x63, 0x63, 0x63, 0x63, 0x6B, 0x73, 0x5E),  # 'Q'
    _g(0x3F, 0x66, 0x66, 0x3E, 0x1E, 0x36, 0x66, 0x67),  # 'R'
    _g(0x3C, 0x66, 0x06, 0x1C, 0x30, 0x60, 0x66, 0x3C),  # 'S'
    _g(0x7E, 0x5A, 0x18, 0x18, 0x18, 0x18, 0x18, 0x3C),  # 'T'
    _g(0x63, 0x63, 0x63, 0x63, 0x63, 0x63, 0x63, 0x3E),  # 'U'
    _g(0x63, 0x63, 0x63, 0x63, 0x63, 0x36, 0x1C, 0x08),  # 'V'
    _g(0x63, 0x63, 0x63, 0x6B, 0x7F, 0x7F, 0x77, 0x63),  # 'W'
    _g(0x63, 0x63, 0x36, 0x1C, 0x1C, 0x36, 0x63, 0x63),  # 'X'
    _g(0x66, 0x66, 0x66, 0x3C, 0x18, 0x18, 0x18, 0x3C),  # 'Y'
    _g(0x7F, 0x63, 0x31, 0x18, 0x0C, 0x46, 0x63, 0x7F),  # 'Z'
    _g(0x1E, 0x06, 0x06, 0x06, 0x06, 0x06, 0x06, 0x1E),  # '['
    _g(0x03, 0x06, 0x0C, 0x18, 0x30, 0x60, 0x40),  # '\\'
    _g(0x1E, 0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x1E),  # ']'
    _g(0x08, 0x1C, 0x36, 0x63),  # '^'
    _g(0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0xFF),  # '_'
    _g(0x0C, 0x0C, 0x18),  # '`'
    _g(0, 0, 0x3C, 0x60, 0x7C, 0x66, 0x66, 0x7C),  # 'a'
    _g(0x07, 0x06, 0x06, 0x3E, 0x66, 0x66, 0x66, 0x3E),  # 'b'
    _g(0, 0, 0x3C, 0x66, 0x06, 0x06, 0x66, 0x3C),  # 'c'
    _g(0x70, 0x60, 0x60, 0x7C, 0x66, 0x66, 0x66, 0x7C),  # 'd'
    _g(0, 0, 0x3C, 0x66, 0x7E, 0x06, 0x66, 0x3C),  # 'e'
    _g(0x38, 0x0C, 0x0C, 0x3E, 0x0C, 0x0C, 0x0C, 0x1E),  # 'f'
    _g(0, 0, 0x3C, 0x66, 0x66, 0x66, 0x3C, 0x60, 0x3C),  # 'g'
    _g(0x07, 0x06, 0x06, 0x3E, 0x66, 0x66, 0x66, 0x66),  # 'h'
    _g(0x18, 0, 0x1C, 0x18, 0x18, 0x18, 0x18, 0x3C),  # 'i'
    _g(0x30, 0, 0x38, 0x30, 0x30, 0x30, 0x30, 0x33, 0x1E),  # 'j'
    _g(0x07, 0x06, 0x66, 0x36, 0x1E, 0x36, 0x66, 0x67),  # 'k'
    _g(0x1C, 0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x3C),  # 'l'
    _g(0, 0, 0x63, 0x77, 0x7F, 0x6B, 0x63, 0x63),  # 'm'
    _g(0, 0, 0x3E, 0x66, 0x66, 0x66, 0x66, 0x66),  # 'n'
    _g(0, 0, 0x3C, 0x66, 0x66, 0x66, 0x66, 0x3C),  # 'o'
    _g(0, 0, 0x3E, 0x66, 0x66, 0x66, 0x3E, 0x06, 0x0F),  # 'p'
    _g(0, 0, 0x7C, 0x66, 0x66, 0x66, 0x7C, 0x60, 0x78),  # 'q'
    _g(0, 0, 0x36, 0x1E, 0x06, 0x06, 0x06, 0x0F),  # 'r'
    _g(0, 0, 0x3C, 0x06, 0x1C, 0x30, 0x06, 0x3C),  # 's'
    _g(0x08, 0x0C, 0x3E, 0x0C, 0x0C, 0x0C, 0x2C, 0x18),  # 't'
    _g(0, 0, 0x66, 0x66, 0x66, 0x66, 0x66, 0x3E),  # 'u'
    _g(0, 0, 0x66, 0x66, 0x66, 0x66, 0x3C, 0x18),  # 'v'
    _g(0, 0, 0x63, 0x63, 0x6B, 0x7F, 0x7F, 0x36),  # 'w'
    _g(0, 0, 0x66, 0x3C, 0x18, 0x3C, 0x66, 0x66),  # 'x'
    _g(0, 0, 0x66, 0x66, 0x66, 0x66, 0x3C, 0x18, 0x30),  # 'y'
    _g(0, 0, 0x7E, 0x30, 0x18, 0x0C, 0x06, 0x7E),  # 'z'
    _g(0x38, 0x0C, 0x0C, 0x06, 0x0C, 0x0C, 0x38),  # '{'
    _g(0x18, 0x18, 0x18, 0x00, 0x18, 0x18, 0x18),  # '|'
    _g(0x07, 0x0C, 0x0C, 0x18, 0x0C, 0x0C, 0x07),  # '}'
    _g(0x00, 0, 0x32, 0x4C),  # '~'
)

# Stroke placement for CP437 box-drawing characters:
# (horizontal span, vertical span), each "full", "first" half, "second" half or None.
_BOX_SHAPES = {
    0xC4: ("full", None),  # ─
    0xB3: (None, "full"),  # │
    0xDA: ("first", "first"),  # ┌
    0xBF: ("second", "first"),  # ┐
    0xC0: ("first", "second"),  # └
    0xD9: ("second", "second"),  # ┘
    0xC3: ("second", "full"),  # ├
    0xB4: ("first", "full"),  # ┤
    0xC2: ("full", "first"),  # ┬
    0xC1: ("full", "second"),  # ┴
    0xC5: ("full", "full"),  # ┼
}
_BOX_FIRST = 0xB3
_H_ROWS = (7, 8)
_V_COLS = (3, 4)


def _code(char: CharLike) -> int:
    if isinstance(char, int):
        return char & 0xFF
    if isinstance(char, str) and len(char) == 1:
        return ord(char)
    raise TypeError(f"expected a single character or a byte, got {char!r}")


def _printable(code: int) -> int:
    return code if FIRST_CHAR <= code <= LAST_CHAR else ord(REPLACEMENT)


def glyph(char: CharLike) -> Tuple[int, ...]:
    """Return the 16 row bytes for ``char``; unprintable ones give '?'."""
    return FONT8X16[_printable(_code(char)) - FIRST_CHAR]


def glyph_is_empty(char: CharLike) -> bool:
    """True when a non-space character has no pixels in the font."""
    code = _printable(_code(char))
    if code == ord(" "):
        return False
    return not any(FONT8X16[code - FIRST_CHAR])


def _in_span(pos: int, span: Optional[str], size: int) -> bool:
    if span == "full":
        return True
    if span == "first":
        return pos < size // 2
    if span == "second":
        return pos >= size // 2
    return False


def box_drawing_mask(code: int) -> Optional[Bitmap]:
    """Return the pixel mask of a CP437 box-drawing byte, or None."""
    shape = _BOX_SHAPES.get(code)
    if shape is None:
        return None
    h_span, v_span = shape
    return tuple(
        tuple(
            (row in _H_ROWS and _in_span(col, h_span, GLYPH_W))
            or (col in _V_COLS and _in_span(row, v_span, GLYPH_H))
            for col in range(GLYPH_W)
        )
        for row in range(GLYPH_H)
    )


def _placeholder_box() -> Bitmap:
    return tuple(
        tuple(
            row in (0, GLYPH_H - 1) or col in (0, GLYPH_W - 1)
            for col in range(GLYPH_W)
        )
        for row in range(GLYPH_H)
    )


def render_glyph(char: CharLike) -> Bitmap:
    """Return the 16x8 foreground mask drawn for ``char``.

    Box-drawing bytes get their line shapes, unprintable characters are
    drawn as '?', and a glyph missing from the font becomes a bordered box.
    """
    code = _code(char)
    if code >= _BOX_FIRST:
        mask = box_drawing_mask(code)
        if mask is not None:
            return mask
    if glyph_is_empty(code):
        return _placeholder_box()
    return tuple(
        tuple(bool((line >> col) & 1) for col in range(GLYPH_W))
        for line in glyph(code)
    )


def fontdump(char: CharLike) -> str:
    """Describe the glyph of a printable character: its hex rows and bits."""
    code = _code(char)
    if not FIRST_CHAR <= code <= LAST_CHAR:
        raise ValueError("fontdump: range 32-126")
    rows = FONT8X16[code - FIRST_CHAR]
    hex_part = "".join(f" 0x{byte:02X}" for byte in rows)
    bits = "".join(
        "".join("#" if (line >> col) & 1 else "." for col in range(GLYPH_W)) + "\n"
        for line in rows
    )
    return f"Glyph {chr(code)}\nHex:{hex_part}\nBits:\n{bits}"