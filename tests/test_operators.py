# tests/test_operators.py
"""
Tests for the concrete 32-bit operator semantics.
"""

import logging

import pytest

from constprop import (
    NAC_VALUE,
    UNDEF,
    ArithmeticOp,
    BitwiseOp,
    ComparisonOp,
    ConditionOp,
    Constant,
    ShiftOp,
    calculate,
    to_int32,
)

INT_MAX = 2147483647
INT_MIN = -2147483648


class TestToInt32:

    @pytest.mark.parametrize("n,expected", [
        (0, 0),
        (INT_MAX, INT_MAX),
        (INT_MAX + 1, INT_MIN),
        (INT_MIN - 1, INT_MAX),
        (1 << 32, 0),
        (0xFFFFFFFF, -1),
    ])
    def test_wrap(self, n, expected):
        assert to_int32(n) == expected


class TestArithmetic:

    @pytest.mark.parametrize("op,x,y,expected", [
        (ArithmeticOp.ADD, 3, 4, 7),
        (ArithmeticOp.ADD, INT_MAX, 1, INT_MIN),
        (ArithmeticOp.SUB, INT_MIN, 1, INT_MAX),
        (ArithmeticOp.MUL, 7, 2, 14),
        (ArithmeticOp.MUL, 65536, 65536, 0),
        (ArithmeticOp.MUL, INT_MAX, 2, -2),
        (ArithmeticOp.DIV, 7, 2, 3),
        (ArithmeticOp.DIV, -7, 2, -3),
        (ArithmeticOp.DIV, 7, -2, -3),
        (ArithmeticOp.DIV, INT_MIN, -1, INT_MIN),
        (ArithmeticOp.REM, 7, 3, 1),
        (ArithmeticOp.REM, -7, 3, -1),
        (ArithmeticOp.REM, 7, -3, 1),
        (ArithmeticOp.REM, INT_MIN, -1, 0),
    ])
    def test_table(self, op, x, y, expected):
        assert calculate(op, x, y) == Constant(expected)

    @pytest.mark.parametrize("op", [ArithmeticOp.DIV, ArithmeticOp.REM])
    def test_by_zero_is_undef(self, op):
        assert calculate(op, 10, 0) is UNDEF


class TestBitwise:

    @pytest.mark.parametrize("op,x,y,expected", [
        (BitwiseOp.OR, 0b1010, 0b0101, 0b1111),
        (BitwiseOp.AND, 0b1100, 0b1010, 0b1000),
        (BitwiseOp.XOR, 0b1100, 0b1010, 0b0110),
        (BitwiseOp.AND, -1, INT_MIN, INT_MIN),
        (BitwiseOp.XOR, -1, 0, -1),
    ])
    def test_table(self, op, x, y, expected):
        assert calculate(op, x, y) == Constant(expected)


class TestShift:

    @pytest.mark.parametrize("op,x,y,expected", [
        (ShiftOp.SHL, 1, 4, 16),
        (ShiftOp.SHL, 1, 31, INT_MIN),
        (ShiftOp.SHL, 1, 32, 1),
        (ShiftOp.SHL, 1, 33, 2),
        (ShiftOp.SHR, -16, 2, -4),
        (ShiftOp.SHR, INT_MIN, 31, -1),
        (ShiftOp.USHR, -1, 28, 15),
        (ShiftOp.USHR, -16, 0, -16),
        (ShiftOp.USHR, -1, 32, -1),
        (ShiftOp.SHR, 8, -1, 0),
    ])
    def test_table(self, op, x, y, expected):
        assert calculate(op, x, y) == Constant(expected)


class TestCondition:

    @pytest.mark.parametrize("op,x,y,expected", [
        (ConditionOp.EQ, 3, 3, 1),
        (ConditionOp.EQ, 3, 4, 0),
        (ConditionOp.NE, 3, 4, 1),
        (ConditionOp.GT, 4, 3, 1),
        (ConditionOp.GE, 3, 3, 1),
        (ConditionOp.LT, -1, 0, 1),
        (ConditionOp.LE, 1, 0, 0),
    ])
    def test_table(self, op, x, y, expected):
        assert calculate(op, x, y) == Constant(expected)


class TestUnsupported:

    def test_comparison_category_is_nac(self, caplog):
        with caplog.at_level(logging.WARNING, logger="constprop.operators"):
            assert calculate(ComparisonOp.CMP, 1, 2) is NAC_VALUE
        assert "Unsupported operator category" in caplog.text
