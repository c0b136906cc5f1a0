# tests/conftest.py
"""
Shared IR builders and fixtures for the constprop test-suite.
"""

from typing import Optional, Sequence

import pytest

from constprop import (
    IR,
    AnalysisConfig,
    ArithmeticOp,
    AssignStmt,
    BinaryExp,
    CPFact,
    ConstantPropagation,
    IntLiteral,
    PrimitiveType,
    ReferenceType,
    Var,
    build_cfg,
    solve,
)


def ivar(name: str) -> Var:
    return Var(name, PrimitiveType.INT)


def bvar(name: str) -> Var:
    return Var(name, PrimitiveType.BOOLEAN)


def rvar(name: str, cls: str = "java.lang.String") -> Var:
    return Var(name, ReferenceType(cls))


def lit(n: int) -> IntLiteral:
    return IntLiteral(n)


def binop(op, a, b) -> BinaryExp:
    return BinaryExp(op, a, b)


def assign(lhs, rhs) -> AssignStmt:
    return AssignStmt(lhs, rhs)


def add(a, b) -> BinaryExp:
    return BinaryExp(ArithmeticOp.ADD, a, b)


def mul(a, b) -> BinaryExp:
    return BinaryExp(ArithmeticOp.MUL, a, b)


def fact_of(**bindings) -> CPFact:
    """``fact_of(x=Constant(1))`` builds a fact over int vars by name."""
    return CPFact({ivar(name): value for name, value in bindings.items()})


def run(stmts: Sequence, params: Sequence[Var] = (),
        config: Optional[AnalysisConfig] = None):
    ir = IR("test", params=list(params), stmts=list(stmts))
    cfg = build_cfg(ir)
    result = solve(ConstantPropagation(config), cfg, config)
    return cfg, result


@pytest.fixture
def cp():
    return ConstantPropagation()
