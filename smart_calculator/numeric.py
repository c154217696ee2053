# numeric.py
# Python 3.x
# 숫자 파싱/표시 문자열/반올림/사칙연산 유틸

import math
import re
from decimal import Decimal
from enum import Enum

RESULT_PLACES = 8  # 연산 결과 소수 자릿수


class OperatorKind(Enum):
    """이항 연산자. 값은 표시 기호"""

    ADD = '+'
    SUBTRACT = '−'
    MULTIPLY = '×'
    DIVIDE = '÷'
    MODULO = '%'

    @property
    def symbol(self) -> str:
        return self.value

_NUMBER_PREFIX = re.compile(
    r'\s*([+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))'
)


def parse_number(text: str) -> float:
    """앞부분의 숫자만 읽는다. 읽을 수 없으면 NaN (예외 없음)"""
    m = _NUMBER_PREFIX.match(text)
    if not m:
        return math.nan
    token = m.group(1)
    if token.endswith('Infinity'):
        return -math.inf if token.startswith('-') else math.inf
    return float(token)


def numeral(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        # -0 도 '0'
        return '0'

    sign = '-' if value < 0 else ''
    # repr 은 최단 왕복 자릿수를 준다
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = ''.join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent  # 소수점 위치

    if k <= n <= 21:
        return sign + digits + '0' * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + '.' + digits[n:]
    if -6 < n <= 0:
        return sign + '0.' + '0' * (-n) + digits

    e = n - 1
    e_text = ('e+' if e >= 0 else 'e-') + str(abs(e))
    if k == 1:
        return sign + digits + e_text
    return sign + digits[0] + '.' + digits[1:] + e_text


def round_result(value: float, places: int = RESULT_PLACES) -> float:
    if not math.isfinite(value):
        return value
    return round(value, places)


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        # 부호 규칙: a / (+0) -> +inf, a / (-0) -> -inf
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    return math.fmod(a, b)


def apply_operator(op: OperatorKind, a: float, b: float) -> float:
    """0 나누기 포함 어떤 경우에도 예외를 던지지 않는다"""
    if op is OperatorKind.ADD:
        return a + b
    if op is OperatorKind.SUBTRACT:
        return a - b
    if op is OperatorKind.MULTIPLY:
        return a * b
    if op is OperatorKind.DIVIDE:
        return _divide(a, b)
    if op is OperatorKind.MODULO:
        return _remainder(a, b)
    return b


def format_amount(value: float, places: int = 4) -> str:
    """환산 금액 표시용 고정 소수점 문자열"""
    if not math.isfinite(value) or abs(value) >= 1e21:
        # 이 범위는 지수 표기
        return numeral(value)
    return '{:.{}f}'.format(value, places)
