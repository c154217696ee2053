# accumulator.py
# Python 3.x
# 키패드 누산기 상태 머신: 순수 전이 함수 + 얇은 가변 래퍼

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, FrozenSet, Iterable, List, Optional, Tuple

from .numeric import (
    OperatorKind,
    apply_operator,
    numeral,
    parse_number,
    round_result,
)

logger = logging.getLogger(__name__)

INITIAL_ENTRY = '0'


class KeyClass(Enum):
    DIGIT = 'digit'
    DECIMAL_POINT = 'decimal_point'
    BACKSPACE = 'backspace'
    TOGGLE_SIGN = 'toggle_sign'
    PERCENT = 'percent'
    OPERATOR = 'operator'
    EQUALS = 'equals'
    CLEAR_ALL = 'clear_all'


@dataclass(frozen=True)
class KeyEvent:
    """키 입력 한 번. digit/operator 는 해당 키 종류일 때만 채운다"""

    key_class: KeyClass
    digit: Optional[int] = None
    operator: Optional[OperatorKind] = None

    def __post_init__(self) -> None:
        # 어댑터 계층의 계약 위반은 assert 로 막는다
        if self.key_class is KeyClass.DIGIT:
            assert isinstance(self.digit, int) and 0 <= self.digit <= 9, \
                'digit key needs 0-9, got {!r}'.format(self.digit)
        else:
            assert self.digit is None, 'only digit keys carry a digit'
        if self.key_class is KeyClass.OPERATOR:
            assert isinstance(self.operator, OperatorKind), \
                'operator key needs an OperatorKind, got {!r}'.format(self.operator)
        else:
            assert self.operator is None, 'only operator keys carry an operator'

    @classmethod
    def of_digit(cls, d: int) -> 'KeyEvent':
        return cls(KeyClass.DIGIT, digit=d)

    @classmethod
    def of_operator(cls, op: OperatorKind) -> 'KeyEvent':
        return cls(KeyClass.OPERATOR, operator=op)

    @classmethod
    def of(cls, key_class: KeyClass) -> 'KeyEvent':
        return cls(key_class)


@dataclass(frozen=True)
class AccumulatorState:
    entry_text: str = INITIAL_ENTRY
    pending_operand: Optional[float] = None
    pending_operator: Optional[OperatorKind] = None
    awaiting_fresh_entry: bool = False

    @property
    def value(self) -> float:
        return parse_number(self.entry_text)


def initial_state() -> AccumulatorState:
    return AccumulatorState()


@dataclass(frozen=True)
class Rendering:
    """렌더 표면으로 보내는 값: (entry_text, pending_operand, pending_operator)"""

    entry_text: str
    pending_operand: Optional[float]
    pending_operator: Optional[OperatorKind]

    @classmethod
    def of(cls, state: AccumulatorState) -> 'Rendering':
        return cls(state.entry_text, state.pending_operand, state.pending_operator)

    def indicator(self) -> str:
        """'이전 피연산자 + 연산자' 줄. 대기 연산이 없으면 빈 문자열"""
        if self.pending_operand is None or self.pending_operator is None:
            return ''
        return '{} {}'.format(numeral(self.pending_operand), self.pending_operator.symbol)


# 전이 함수: 모두 새 상태를 돌려준다

def _is_typed(text: str) -> bool:
    """직접 입력한 형태의 숫자인가 (지수 표기/Infinity/NaN 제외)"""
    return 'e' not in text and math.isfinite(parse_number(text))


def press_digit(state: AccumulatorState, d: int) -> AccumulatorState:
    if state.awaiting_fresh_entry or not _is_typed(state.entry_text):
        return replace(state, entry_text=str(d), awaiting_fresh_entry=False)
    if state.entry_text == '0':
        return replace(state, entry_text=str(d))
    return replace(state, entry_text=state.entry_text + str(d))


def press_decimal_point(state: AccumulatorState) -> AccumulatorState:
    if state.awaiting_fresh_entry or not _is_typed(state.entry_text):
        return replace(state, entry_text='0.', awaiting_fresh_entry=False)
    if '.' in state.entry_text:
        return state
    return replace(state, entry_text=state.entry_text + '.')


def press_backspace(state: AccumulatorState) -> AccumulatorState:
    if state.awaiting_fresh_entry:
        return state
    if not _is_typed(state.entry_text):
        # 지수 표기, 'Infinity' / 'NaN' 은 한 글자씩 지울 수 없다
        return replace(state, entry_text=INITIAL_ENTRY)
    text = state.entry_text[:-1]
    if text in ('', '-'):
        text = INITIAL_ENTRY
    return replace(state, entry_text=text)


def press_toggle_sign(state: AccumulatorState) -> AccumulatorState:
    # 반올림하지 않음 (연산자/= 경계에서만 반올림)
    return replace(state, entry_text=numeral(-state.value))


def press_percent(state: AccumulatorState) -> AccumulatorState:
    return replace(state, entry_text=numeral(state.value / 100))


def _evaluate(op: OperatorKind, left: float, right: float) -> float:
    return round_result(apply_operator(op, left, right))


def press_operator(state: AccumulatorState, op: OperatorKind) -> AccumulatorState:
    x = state.value
    if state.pending_operand is None:
        state = replace(state, pending_operand=x)
    elif state.pending_operator is not None:
        # 왼쪽부터 차례로: 직전 연산을 먼저 끝낸다
        result = _evaluate(state.pending_operator, state.pending_operand, x)
        state = replace(state, entry_text=numeral(result), pending_operand=result)
    return replace(state, pending_operator=op, awaiting_fresh_entry=True)


def press_equals(state: AccumulatorState) -> AccumulatorState:
    if state.pending_operand is None or state.pending_operator is None:
        return state
    result = _evaluate(state.pending_operator, state.pending_operand, state.value)
    return AccumulatorState(
        entry_text=numeral(result),
        pending_operand=None,
        pending_operator=None,
        awaiting_fresh_entry=True,
    )


def press_clear_all(state: AccumulatorState) -> AccumulatorState:
    return initial_state()


def transition(state: AccumulatorState, event: KeyEvent) -> Tuple[AccumulatorState, str]:
    """키 하나를 처리하고 (다음 상태, 표시 문자열)을 돌려준다"""
    kc = event.key_class
    if kc is KeyClass.DIGIT:
        state = press_digit(state, event.digit)
    elif kc is KeyClass.DECIMAL_POINT:
        state = press_decimal_point(state)
    elif kc is KeyClass.BACKSPACE:
        state = press_backspace(state)
    elif kc is KeyClass.TOGGLE_SIGN:
        state = press_toggle_sign(state)
    elif kc is KeyClass.PERCENT:
        state = press_percent(state)
    elif kc is KeyClass.OPERATOR:
        state = press_operator(state, event.operator)
    elif kc is KeyClass.EQUALS:
        state = press_equals(state)
    elif kc is KeyClass.CLEAR_ALL:
        state = press_clear_all(state)
    return state, state.entry_text


CALCULATOR_KEYS: FrozenSet[KeyClass] = frozenset(KeyClass)
CURRENCY_KEYS: FrozenSet[KeyClass] = frozenset({
    KeyClass.DIGIT,
    KeyClass.DECIMAL_POINT,
    KeyClass.TOGGLE_SIGN,
    KeyClass.BACKSPACE,
    KeyClass.CLEAR_ALL,
})

Listener = Callable[[Rendering], None]


class Accumulator:
    """키패드 하나가 소유하는 상태 머신 인스턴스"""

    def __init__(self, enabled: Iterable[KeyClass] = CALCULATOR_KEYS,
                 initial_entry: str = INITIAL_ENTRY, name: str = 'keypad') -> None:
        self.enabled = frozenset(enabled)
        self.name = name
        self._listeners: List[Listener] = []
        self.state = replace(initial_state(), entry_text=initial_entry)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def accepts(self, key_class: KeyClass) -> bool:
        return key_class in self.enabled

    def handle(self, event: KeyEvent) -> str:
        if not self.accepts(event.key_class):
            logger.debug('[%s] 비활성 키 무시: %s', self.name, event.key_class.value)
            return self.state.entry_text
        self.state, display = transition(self.state, event)
        logger.debug('[%s] %s -> %r (대기=%s %s)', self.name, event.key_class.value,
                     display, self.state.pending_operand, self.state.pending_operator)
        self._emit()
        return display

    def reset(self) -> None:
        self.state = initial_state()
        self._emit()

    # 키 종류별 진입점
    def input_digit(self, d: int) -> str:
        return self.handle(KeyEvent.of_digit(d))

    def input_dot(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.DECIMAL_POINT))

    def backspace(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.BACKSPACE))

    def negative_positive(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.TOGGLE_SIGN))

    def percent(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.PERCENT))

    def set_operator(self, op: OperatorKind) -> str:
        return self.handle(KeyEvent.of_operator(op))

    def equal(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.EQUALS))

    def clear_all(self) -> str:
        return self.handle(KeyEvent.of(KeyClass.CLEAR_ALL))

    @property
    def value(self) -> float:
        return self.state.value

    def rendering(self) -> Rendering:
        return Rendering.of(self.state)

    def display_text(self) -> str:
        return self.state.entry_text

    def _emit(self) -> None:
        rendering = self.rendering()
        for listener in list(self._listeners):
            listener(rendering)
