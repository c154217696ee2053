"""키패드 누산기(사칙연산 계산기 + 환율 입력)"""

from .accumulator import (
    CALCULATOR_KEYS,
    CURRENCY_KEYS,
    Accumulator,
    AccumulatorState,
    KeyClass,
    KeyEvent,
    Rendering,
    initial_state,
    transition,
)
from .numeric import OperatorKind, numeral, parse_number

__version__ = '0.1.0'
