from PySide6 import QtCore

from luahint.hints.overlay import RenderMode
from luahint.ui.editor import HINT_ALPHA, hint_rect


def test_before_hint_ends_left_of_anchor():
    anchor = QtCore.QRect(120, 40, 1, 16)
    area = hint_rect(RenderMode.INLINE_BEFORE, anchor, 30, 12)
    assert area.right() < anchor.left()
    assert (area.top(), area.width(), area.height()) == (40, 30, 12)


def test_after_hint_starts_on_anchor():
    anchor = QtCore.QRect(120, 40, 1, 16)
    area = hint_rect(RenderMode.INLINE_AFTER, anchor, 30, 12)
    assert area.left() == anchor.left()


def test_hint_at_line_start_stays_in_view():
    area = hint_rect(RenderMode.INLINE_BEFORE, QtCore.QRect(4, 0, 1, 16), 30, 12)
    assert area.left() == 0


def test_hint_text_is_translucent():
    assert 0 < HINT_ALPHA < 255
