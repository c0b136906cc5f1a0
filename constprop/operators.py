"""
constprop/operators.py
══════════════════════

Concrete semantics of the binary operators on two known 32-bit ints.

Python integers are unbounded, so every result is folded back into the
signed 32-bit range with :func:`to_int32`.  Division truncates toward
zero and the remainder takes the sign of the dividend, as on the JVM.
Division or remainder by zero yields ``UNDEF``: the program point is
unreachable in a real execution.

    ┌──────────────┬──────────────────────┬────────────────────────────┐
    │ Category     │ Operators            │ Result                     │
    ├──────────────┼──────────────────────┼────────────────────────────┤
    │ ArithmeticOp │ + - * / %            │ wraparound; /0, %0 → UNDEF │
    │ BitwiseOp    │ | & ^                │ on 32-bit representation   │
    │ ShiftOp      │ << >> >>>            │ shift amount & 31          │
    │ ConditionOp  │ == != > >= < <=      │ Constant(1) / Constant(0)  │
    │ ComparisonOp │ cmp cmpl cmpg        │ NAC (long/float only)      │
    └──────────────┴──────────────────────┴────────────────────────────┘
"""

from __future__ import annotations

import logging
import operator as op
from typing import Callable, Dict

from constprop.ir import (
    ArithmeticOp,
    BinaryOp,
    BitwiseOp,
    ComparisonOp,
    ConditionOp,
    ShiftOp,
)
from constprop.lattice import NAC_VALUE, UNDEF, Value, make_constant

_log = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF
_SIGN32 = 0x80000000


def to_int32(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 32-bit range."""
    n &= _MASK32
    return n - (1 << 32) if n & _SIGN32 else n


def java_div(x: int, y: int) -> int:
    q = abs(x) // abs(y)
    return to_int32(-q if (x < 0) != (y < 0) else q)


def java_rem(x: int, y: int) -> int:
    r = abs(x) % abs(y)
    return -r if x < 0 else r


def _ushr(x: int, s: int) -> int:
    return (x & _MASK32) >> s


_ARITHMETIC: Dict[ArithmeticOp, Callable[[int, int], int]] = {
    ArithmeticOp.ADD: op.add,
    ArithmeticOp.SUB: op.sub,
    ArithmeticOp.MUL: op.mul,
    ArithmeticOp.DIV: java_div,
    ArithmeticOp.REM: java_rem,
}

_BITWISE: Dict[BitwiseOp, Callable[[int, int], int]] = {
    BitwiseOp.OR: op.or_,
    BitwiseOp.AND: op.and_,
    BitwiseOp.XOR: op.xor,
}

_SHIFT: Dict[ShiftOp, Callable[[int, int], int]] = {
    ShiftOp.SHL: op.lshift,
    ShiftOp.SHR: op.rshift,
    ShiftOp.USHR: _ushr,
}

_CONDITION: Dict[ConditionOp, Callable[[int, int], bool]] = {
    ConditionOp.EQ: op.eq,
    ConditionOp.NE: op.ne,
    ConditionOp.GT: op.gt,
    ConditionOp.GE: op.ge,
    ConditionOp.LT: op.lt,
    ConditionOp.LE: op.le,
}


def calculate(binop: BinaryOp, x: int, y: int) -> Value:
    """Apply ``binop`` to the known operands ``x`` and ``y``."""
    if isinstance(binop, ArithmeticOp):
        if binop in (ArithmeticOp.DIV, ArithmeticOp.REM) and y == 0:
            return UNDEF
        return make_constant(to_int32(_ARITHMETIC[binop](x, y)))
    if isinstance(binop, BitwiseOp):
        return make_constant(to_int32(_BITWISE[binop](x, y)))
    if isinstance(binop, ShiftOp):
        return make_constant(to_int32(_SHIFT[binop](x, y & 31)))
    if isinstance(binop, ConditionOp):
        return make_constant(1 if _CONDITION[binop](x, y) else 0)
    if isinstance(binop, ComparisonOp):
        _log.warning("Unsupported operator category in calculate: %s", binop)
        return NAC_VALUE
    _log.warning("Unknown binary operator %r in calculate", binop)
    return NAC_VALUE
