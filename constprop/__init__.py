"""
constprop — Intraprocedural Constant Propagation
================================================

A forward dataflow analysis over a statement-level CFG that computes,
for each program point, which int-like locals hold a single known
32-bit value (``Constant``), which are not yet determined (``UNDEF``)
and which cannot be known statically (``NAC``).

Core modules
------------
lattice
    The flat constant lattice ``UNDEF ⊑ Constant(c) ⊑ NAC`` and its meet.
fact
    ``CPFact``, the abstract store ``Var → Value`` at one program point.
operators
    32-bit wraparound semantics of arithmetic, bitwise, shift and
    relational operators.
analysis
    The ``DataflowAnalysis`` contract, ``ConstantPropagation`` and the
    expression evaluator.

Collaborators
-------------
ir
    Three-address IR: types, variables, expressions, statements.
cfg
    Statement-level CFG with synthetic entry/exit nodes.
solver
    Worklist fixpoint driver.
config
    ``AnalysisConfig`` and logging setup.

Quick start
-----------
>>> from constprop import *
>>> a, b = Var("a", PrimitiveType.INT), Var("b", PrimitiveType.INT)
>>> s1 = AssignStmt(a, IntLiteral(3))
>>> s2 = AssignStmt(b, BinaryExp(ArithmeticOp.ADD, a, IntLiteral(4)))
>>> cfg = build_cfg(IR("m", stmts=[s1, s2]))
>>> result = solve(ConstantPropagation(), cfg)
>>> result.out_fact(s2)
{a=3, b=7}
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from constprop.analysis import (  # noqa: E402
    ConstantPropagation,
    DataflowAnalysis,
    can_hold_int,
    evaluate,
)
from constprop.cfg import CFG, build_cfg  # noqa: E402
from constprop.config import AnalysisConfig, WorklistStrategy, configure_logging  # noqa: E402
from constprop.errors import (  # noqa: E402
    CFGError,
    ConfigError,
    ConstPropError,
    ConvergenceError,
    LatticeInvariantError,
)
from constprop.fact import CPFact  # noqa: E402
from constprop.ir import (  # noqa: E402
    IR,
    ArithmeticOp,
    ArrayAccess,
    AssignStmt,
    BinaryExp,
    BitwiseOp,
    CastExp,
    ComparisonOp,
    ConditionOp,
    FieldAccess,
    Goto,
    If,
    IntLiteral,
    Invoke,
    InvokeExp,
    NegExp,
    NewExp,
    Nop,
    PrimitiveType,
    ReferenceType,
    Return,
    ShiftOp,
    Var,
)
from constprop.lattice import (  # noqa: E402
    NAC,
    NAC_VALUE,
    UNDEF,
    Constant,
    Undef,
    Value,
    get_nac,
    get_undef,
    make_constant,
    meet_value,
)
from constprop.operators import calculate, to_int32  # noqa: E402
from constprop.solver import DataflowResult, WorklistSolver, solve  # noqa: E402

__all__: List[str] = [
    # analysis
    "ConstantPropagation", "DataflowAnalysis", "can_hold_int", "evaluate",
    # cfg
    "CFG", "build_cfg",
    # config
    "AnalysisConfig", "WorklistStrategy", "configure_logging",
    # errors
    "CFGError", "ConfigError", "ConstPropError", "ConvergenceError",
    "LatticeInvariantError",
    # fact
    "CPFact",
    # ir
    "IR", "ArithmeticOp", "ArrayAccess", "AssignStmt", "BinaryExp",
    "BitwiseOp", "CastExp", "ComparisonOp", "ConditionOp", "FieldAccess",
    "Goto", "If", "IntLiteral", "Invoke", "InvokeExp", "NegExp", "NewExp",
    "Nop", "PrimitiveType", "ReferenceType", "Return", "ShiftOp", "Var",
    # lattice
    "NAC", "NAC_VALUE", "UNDEF", "Constant", "Undef", "Value",
    "get_nac", "get_undef", "make_constant", "meet_value",
    # operators
    "calculate", "to_int32",
    # solver
    "DataflowResult", "WorklistSolver", "solve",
]
