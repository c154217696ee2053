# keymap.py
# Python 3.x, PyQt5
# 키보드/버튼 입력 -> KeyEvent 변환 (키패드별)

from typing import Optional

from PyQt5.QtCore import Qt

from .accumulator import KeyClass, KeyEvent
from .numeric import OperatorKind

_OPERATOR_TEXT = {
    '+': OperatorKind.ADD,
    '-': OperatorKind.SUBTRACT,
    '*': OperatorKind.MULTIPLY,
    'x': OperatorKind.MULTIPLY,
    'X': OperatorKind.MULTIPLY,
    '/': OperatorKind.DIVIDE,
}

# 버튼 라벨(UI 기호)
_OPERATOR_LABEL = {
    '+': OperatorKind.ADD,
    '−': OperatorKind.SUBTRACT,
    '×': OperatorKind.MULTIPLY,
    '÷': OperatorKind.DIVIDE,
}


def _entry_event(key: int, text: str) -> Optional[KeyEvent]:
    """두 키패드가 공유하는 숫자/소수점/지우기 키"""
    # 숫자패드도 같은 키 코드(+ KeypadModifier)로 들어온다
    if Qt.Key_0 <= key <= Qt.Key_9:
        return KeyEvent.of_digit(key - Qt.Key_0)
    if len(text) == 1 and text.isdigit() and text.isascii():
        return KeyEvent.of_digit(int(text))
    if key in (Qt.Key_Period, Qt.Key_Comma) or text in ('.', ','):
        return KeyEvent.of(KeyClass.DECIMAL_POINT)
    if key == Qt.Key_Backspace:
        return KeyEvent.of(KeyClass.BACKSPACE)
    if key == Qt.Key_Escape:
        return KeyEvent.of(KeyClass.CLEAR_ALL)
    return None


def key_event_for(key: int, text: str = '') -> Optional[KeyEvent]:
    """계산기 키패드. 매핑되지 않는 키는 None"""
    event = _entry_event(key, text)
    if event is not None:
        return event
    if key in (Qt.Key_Return, Qt.Key_Enter) or text == '=':
        return KeyEvent.of(KeyClass.EQUALS)
    if text in _OPERATOR_TEXT:
        return KeyEvent.of_operator(_OPERATOR_TEXT[text])
    if text == '%':
        return KeyEvent.of(KeyClass.PERCENT)
    return None


def currency_key_event_for(key: int, text: str = '') -> Optional[KeyEvent]:
    """환율 키패드: 연산자 없음, +/- 키는 부호 전환"""
    event = _entry_event(key, text)
    if event is not None:
        return event
    if text in ('+', '-'):
        return KeyEvent.of(KeyClass.TOGGLE_SIGN)
    return None


def button_event(label: str) -> Optional[KeyEvent]:
    if label == 'AC':
        return KeyEvent.of(KeyClass.CLEAR_ALL)
    if label == '+/-':
        return KeyEvent.of(KeyClass.TOGGLE_SIGN)
    if label == '%':
        return KeyEvent.of(KeyClass.PERCENT)
    if label == '=':
        return KeyEvent.of(KeyClass.EQUALS)
    if label == '⌫':
        return KeyEvent.of(KeyClass.BACKSPACE)
    if label == '.':
        return KeyEvent.of(KeyClass.DECIMAL_POINT)
    if label in _OPERATOR_LABEL:
        return KeyEvent.of_operator(_OPERATOR_LABEL[label])
    if len(label) == 1 and label.isdigit():
        return KeyEvent.of_digit(int(label))
    return None
