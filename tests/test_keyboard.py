import threading

import pytest

from secos.keyboard import BUFFER_SIZE, Keyboard, translate_scancode

A, Q, ONE, ENTER, BACKSPACE, SPACE = 0x1E, 0x10, 0x02, 0x1C, 0x0E, 0x39
LSHIFT, RSHIFT, CAPS = 0x2A, 0x36, 0x3A


def test_translate_basic():
    assert translate_scancode(A) == "a"
    assert translate_scancode(A, shift=True) == "A"
    assert translate_scancode(A, caps_lock=True) == "A"
    assert translate_scancode(ENTER) == "\n"
    assert translate_scancode(SPACE) == " "


def test_translate_caps_ignores_digits():
    assert translate_scancode(ONE, caps_lock=True) == translate_scancode(ONE)
    assert translate_scancode(ONE, shift=True) == "!"


def test_translate_unmapped():
    assert translate_scancode(0x00) is None
    assert translate_scancode(0x1D) is None
    assert translate_scancode(0x3B) is None


def test_every_letter_uppercases_with_shift():
    for code in range(0x3A):
        low = translate_scancode(code)
        if low is not None and low.isalpha():
            assert translate_scancode(code, shift=True) == low.upper()


def test_shift_press_and_release():
    kb = Keyboard()
    kb.handle_scancode(LSHIFT)
    kb.handle_scancode(A)
    kb.handle_scancode(LSHIFT | 0x80)
    kb.handle_scancode(A)
    assert kb.getchar(0) + kb.getchar(0) == "Aa"


def test_right_shift():
    kb = Keyboard()
    kb.handle_scancode(RSHIFT)
    assert kb.shift_pressed is True
    kb.handle_scancode(RSHIFT | 0x80)
    assert kb.shift_pressed is False


def test_caps_lock_toggles():
    kb = Keyboard()
    kb.handle_scancode(CAPS)
    kb.handle_scancode(Q)
    kb.handle_scancode(CAPS)
    kb.handle_scancode(Q)
    assert kb.readline(3, timeout=0) == "Qq"


def test_release_produces_nothing():
    kb = Keyboard()
    kb.handle_scancode(A | 0x80)
    assert kb.has_char() is False


def test_getchar_timeout():
    with pytest.raises(TimeoutError):
        Keyboard().getchar(timeout=0.01)


def test_readline_with_backspace():
    kb = Keyboard()
    for code in (A, Q, BACKSPACE, ONE, ENTER):
        kb.handle_scancode(code)
    assert kb.readline(16, timeout=0) == "a1"
    assert kb.has_char() is False


def test_readline_stops_at_max_len():
    kb = Keyboard()
    for _ in range(5):
        kb.handle_scancode(A)
    assert kb.readline(3, timeout=0) == "aa"
    assert kb.has_char() is True


def test_buffer_bounded():
    kb = Keyboard()
    for _ in range(BUFFER_SIZE + 10):
        kb.handle_scancode(A)
    line = kb.readline(BUFFER_SIZE + 20, timeout=0.01) if False else None
    count = 0
    while kb.has_char():
        kb.getchar(0)
        count += 1
    assert count == BUFFER_SIZE - 1
    assert line is None


def test_reset_clears_state():
    kb = Keyboard()
    kb.handle_scancode(CAPS)
    kb.handle_scancode(LSHIFT)
    kb.handle_scancode(A)
    kb.reset()
    assert (kb.has_char(), kb.caps_lock, kb.shift_pressed) == (False, False, False)


def test_getchar_wakes_on_key_from_other_thread():
    kb = Keyboard()
    timer = threading.Timer(0.05, kb.handle_scancode, args=(A,))
    timer.start()
    try:
        assert kb.getchar(timeout=2) == "a"
    finally:
        timer.cancel()