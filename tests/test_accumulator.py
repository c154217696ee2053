"""Tests for the keypad accumulator state machine."""

import math

import pytest

from smart_calculator.accumulator import (
    CALCULATOR_KEYS,
    CURRENCY_KEYS,
    Accumulator,
    AccumulatorState,
    KeyClass,
    KeyEvent,
    Rendering,
    initial_state,
    press_backspace,
    press_decimal_point,
    press_digit,
    transition,
)
from smart_calculator.numeric import OperatorKind

ADD = OperatorKind.ADD
SUB = OperatorKind.SUBTRACT
MUL = OperatorKind.MULTIPLY
DIV = OperatorKind.DIVIDE
MOD = OperatorKind.MODULO


def run(keys, engine=None):
    """'12+3=' 같은 문자열을 키 입력으로 흘려 넣는다"""
    engine = engine or Accumulator()
    ops = {'+': ADD, '-': SUB, '*': MUL, '/': DIV, '%': MOD}
    for ch in keys:
        if ch.isdigit():
            engine.input_digit(int(ch))
        elif ch == '.':
            engine.input_dot()
        elif ch == '=':
            engine.equal()
        elif ch == '<':
            engine.backspace()
        elif ch == '~':
            engine.negative_positive()
        elif ch == 'p':
            engine.percent()
        elif ch == 'C':
            engine.clear_all()
        else:
            engine.set_operator(ops[ch])
    return engine


class TestInitialState:

    def test_fields(self):
        state = initial_state()
        assert state == AccumulatorState('0', None, None, False)
        assert state.value == 0

    def test_custom_initial_entry(self):
        engine = Accumulator(CURRENCY_KEYS, initial_entry='1')
        assert engine.display_text() == '1'


class TestDigits:

    def test_concatenates_and_collapses_leading_zeros(self):
        assert run('005').display_text() == '5'
        assert run('1203').display_text() == '1203'

    def test_zero_stays_single(self):
        assert run('000').display_text() == '0'

    def test_fresh_entry_replaces(self):
        state = AccumulatorState('42', 1.0, ADD, True)
        state = press_digit(state, 7)
        assert state.entry_text == '7'
        assert not state.awaiting_fresh_entry

    def test_no_length_limit(self):
        assert run('1' * 30).display_text() == '1' * 30

    def test_exponent_entry_starts_fresh(self):
        engine = run('1' * 23 + '~')
        assert 'e' in engine.display_text()
        engine.input_digit(5)
        assert engine.display_text() == '5'

    def test_non_finite_entry_starts_fresh(self):
        assert press_digit(AccumulatorState('Infinity'), 3).entry_text == '3'


class TestDecimalPoint:

    def test_appends_once(self):
        assert run('1.5').display_text() == '1.5'

    def test_idempotent(self):
        once = press_decimal_point(AccumulatorState('3'))
        twice = press_decimal_point(once)
        assert once.entry_text == '3.'
        assert twice == once

    def test_second_point_later_ignored(self):
        assert run('1.2.3').display_text() == '1.23'

    def test_exponent_entry_starts_at_zero_point(self):
        assert press_decimal_point(AccumulatorState('1e-8')).entry_text == '0.'

    def test_fresh_entry_starts_at_zero_point(self):
        engine = run('9+.')
        assert engine.display_text() == '0.'
        assert not engine.state.awaiting_fresh_entry


class TestBackspace:

    def test_removes_last_character(self):
        assert run('123<').display_text() == '12'

    def test_empty_resets_to_zero(self):
        assert run('7<').display_text() == '0'
        assert run('<<').display_text() == '0'

    def test_lone_minus_resets_to_zero(self):
        assert run('5~<').display_text() == '0'

    def test_noop_after_operator(self):
        engine = run('12+')
        before = engine.state
        engine.backspace()
        assert engine.state == before

    def test_noop_after_equals(self):
        engine = run('12+3=')
        before = engine.state
        engine.backspace()
        assert engine.state == before
        assert engine.display_text() == '15'

    def test_non_finite_entry_resets(self):
        state = AccumulatorState('Infinity')
        assert press_backspace(state).entry_text == '0'

    @pytest.mark.parametrize('text', ['1e-8', '-1e+22'])
    def test_exponent_entry_resets(self, text):
        assert press_backspace(AccumulatorState(text)).entry_text == '0'

    def test_after_small_percent(self):
        engine = run('0.000001p')
        assert engine.display_text() == '1e-8'
        engine.backspace()
        assert engine.display_text() == '0'
        assert engine.value == 0


class TestToggleSign:

    def test_zero_stays_zero(self):
        assert run('~').display_text() == '0'

    def test_double_toggle_restores(self):
        engine = run('5~')
        assert engine.display_text() == '-5'
        engine.negative_positive()
        assert engine.display_text() == '5'

    def test_keeps_fresh_entry_flag(self):
        engine = run('4+~')
        assert engine.display_text() == '-4'
        assert engine.state.awaiting_fresh_entry

    def test_renders_as_numeral(self):
        assert run('5.~').display_text() == '-5'


class TestPercent:

    def test_divides_by_hundred(self):
        assert run('50p').display_text() == '0.5'

    def test_not_rounded(self):
        assert run('1p').display_text() == '0.01'
        assert run('12.5p').display_text() == '0.125'


class TestOperators:

    def test_first_operator_captures_operand(self):
        engine = run('12+')
        assert engine.state.pending_operand == 12
        assert engine.state.pending_operator is ADD
        assert engine.state.awaiting_fresh_entry
        assert engine.display_text() == '12'

    def test_chain_evaluates_left_to_right(self):
        engine = run('2+3*')
        assert engine.display_text() == '5'
        assert engine.state.pending_operand == 5
        engine = run('4=', engine)
        assert engine.display_text() == '20'

    @pytest.mark.parametrize('keys, expected', [
        ('2+3*4=', '20'),
        ('10-4/3=', '2'),
        ('8/2-1=', '3'),
        ('7%3=', '1'),
    ])
    def test_chaining_law(self, keys, expected):
        assert run(keys).display_text() == expected

    def test_operator_replaces_pending_operator_only_by_evaluating(self):
        # 연산자를 연달아 누르면 현재 입력으로 한 번 계산된다
        engine = run('6+*')
        assert engine.display_text() == '12'
        assert engine.state.pending_operator is MUL


class TestEquals:

    def test_noop_without_pending(self):
        engine = run('42')
        before = engine.state
        engine.equal()
        assert engine.state == before

    def test_clears_pending_and_waits(self):
        engine = run('9-4=')
        assert engine.state == AccumulatorState('5', None, None, True)

    def test_next_digit_starts_fresh(self):
        assert run('9-4=7').display_text() == '7'

    def test_rounding_law(self):
        assert run('0.1+0.2=').display_text() == '0.3'

    def test_result_rounded_to_eight_places(self):
        assert run('1/3=').display_text() == '0.33333333'

    def test_division_by_zero(self):
        engine = run('7/0=')
        assert engine.display_text() == 'Infinity'
        assert math.isinf(engine.value)

    def test_zero_by_zero(self):
        assert run('0/0=').display_text() == 'NaN'

    def test_chain_after_infinity(self):
        engine = run('7/0=+1=')
        assert engine.display_text() == 'Infinity'


class TestClearAll:

    @pytest.mark.parametrize('keys', ['', '12', '1.5+', '2+3*', '7/0=', '5~p'])
    def test_returns_initial_state(self, keys):
        engine = run(keys + 'C')
        assert engine.state == initial_state()

    def test_reset_ignores_enabled_set(self):
        engine = Accumulator(enabled=[KeyClass.DIGIT])
        engine.input_digit(3)
        engine.reset()
        assert engine.state == initial_state()


class TestTransition:

    def test_returns_state_and_display(self):
        state, display = transition(initial_state(), KeyEvent.of_digit(8))
        assert display == '8'
        assert state.entry_text == '8'

    def test_does_not_mutate_input_state(self):
        start = initial_state()
        transition(start, KeyEvent.of_digit(8))
        assert start == initial_state()


class TestKeyEventContract:

    def test_digit_out_of_range(self):
        with pytest.raises(AssertionError):
            KeyEvent.of_digit(12)

    def test_digit_must_be_int(self):
        with pytest.raises(AssertionError):
            KeyEvent(KeyClass.DIGIT, digit='x')

    def test_operator_needs_kind(self):
        with pytest.raises(AssertionError):
            KeyEvent(KeyClass.OPERATOR)

    def test_payload_on_wrong_class(self):
        with pytest.raises(AssertionError):
            KeyEvent(KeyClass.EQUALS, digit=1)


class TestAccumulatorWrapper:

    def test_emits_rendering_on_every_key(self):
        seen = []
        engine = Accumulator()
        engine.subscribe(seen.append)
        run('2+3', engine)
        assert [r.entry_text for r in seen] == ['2', '2', '3']
        assert seen[-1] == Rendering('3', 2.0, ADD)

    def test_unsubscribe(self):
        seen = []
        engine = Accumulator()
        engine.subscribe(seen.append)
        engine.unsubscribe(seen.append)
        engine.input_digit(1)
        assert seen == []

    def test_disabled_keys_are_ignored(self):
        engine = Accumulator(CURRENCY_KEYS, initial_entry='1')
        run('5+2=p', engine)
        assert engine.display_text() == '152'
        assert engine.state.pending_operator is None

    def test_calculator_enables_everything(self):
        assert CALCULATOR_KEYS == frozenset(KeyClass)
        assert KeyClass.OPERATOR not in CURRENCY_KEYS

    def test_instances_are_independent(self):
        a, b = Accumulator(), Accumulator()
        a.input_digit(4)
        assert b.display_text() == '0'


class TestIndicator:

    def test_empty_without_pending(self):
        assert Rendering('5', None, None).indicator() == ''

    def test_operand_and_symbol(self):
        assert run('12*').rendering().indicator() == '12 ×'
        assert run('3-').rendering().indicator() == '3 −'
