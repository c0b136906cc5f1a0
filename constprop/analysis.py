"""
constprop/analysis.py
═════════════════════

The dataflow-analysis contract and the constant-propagation analysis.

A :class:`DataflowAnalysis` supplies the per-node operations a fixpoint
driver (see :mod:`constprop.solver`) invokes until no fact changes:

  - ``is_forward()``                 — direction of propagation
  - ``new_boundary_fact(cfg)``       — fact at the entry (forward) / exit node
  - ``new_initial_fact()``           — fact at every other node before iteration
  - ``meet_into(fact, target)``      — accumulate ``fact`` into ``target``
  - ``transfer_node(node, in, out)`` — recompute ``out``; report a change

:class:`ConstantPropagation` instantiates the contract over the flat
constant lattice (:mod:`constprop.lattice`).

Direction:   FORWARD
Confluence:  MEET (flat lattice meet, NAC absorbing)
Lattice:     Var → Value  (CPFact)
Transfer:    strong update of the defined variable, everything else kept
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from constprop.config import AnalysisConfig
from constprop.errors import LatticeInvariantError
from constprop.fact import CPFact
from constprop.ir import (
    ArithmeticOp,
    BinaryExp,
    Exp,
    IntLiteral,
    PrimitiveType,
    Stmt,
    Var,
)
from constprop.lattice import (
    NAC_VALUE,
    UNDEF,
    Constant,
    Value,
    make_constant,
    meet_value,
)
from constprop.operators import calculate

if TYPE_CHECKING:
    from constprop.cfg import CFG
    from constprop.solver import DataflowResult

_log = logging.getLogger(__name__)

F = TypeVar("F")  # Fact type

_INT_LIKE = frozenset({
    PrimitiveType.BYTE,
    PrimitiveType.SHORT,
    PrimitiveType.INT,
    PrimitiveType.CHAR,
    PrimitiveType.BOOLEAN,
})


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — ANALYSIS CONTRACT
# ═════════════════════════════════════════════════════════════════════════

class DataflowAnalysis(ABC, Generic[F]):
    """Abstract base for analyses driven by :class:`WorklistSolver`."""

    ID: str = ""

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config if config is not None else AnalysisConfig(analysis_id=self.ID)

    @abstractmethod
    def is_forward(self) -> bool:
        ...

    @abstractmethod
    def new_boundary_fact(self, cfg: CFG) -> F:
        """Fact at the entry (forward) or exit (backward) node."""
        ...

    @abstractmethod
    def new_initial_fact(self) -> F:
        """Fact at all other nodes before the first iteration."""
        ...

    @abstractmethod
    def meet_into(self, fact: F, target: F) -> None:
        """Meet ``fact`` into ``target`` in place."""
        ...

    @abstractmethod
    def transfer_node(self, node: Stmt, in_fact: F, out_fact: F) -> bool:
        """Recompute the node's output; return whether it changed."""
        ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — CONSTANT PROPAGATION
# ═════════════════════════════════════════════════════════════════════════

class ConstantPropagation(DataflowAnalysis[CPFact]):
    """
    Intraprocedural constant propagation over int-like locals.

    After solving (``solve(ConstantPropagation(), cfg)``), use
    ``constant_at(result, stmt, var)`` to query a single variable.
    """

    ID = "constprop"

    def is_forward(self) -> bool:
        return True

    def new_boundary_fact(self, cfg: CFG) -> CPFact:
        # Parameters are unknown inputs
        fact = CPFact()
        for param in cfg.ir.params:
            if can_hold_int(param):
                fact.update(param, NAC_VALUE)
        return fact

    def new_initial_fact(self) -> CPFact:
        return CPFact()

    def meet_into(self, fact: CPFact, target: CPFact) -> None:
        store = target.raise_to if self.config.check_invariants else target.update
        for var, value in fact.items():
            store(var, meet_value(value, target.get(var)))

    def meet_value(self, v1: Value, v2: Value) -> Value:
        return meet_value(v1, v2)

    def transfer_node(self, stmt: Stmt, in_fact: CPFact, out_fact: CPFact) -> bool:
        result = in_fact.copy()
        pair = stmt.def_pair()
        if pair is not None:
            lvalue, rvalue = pair
            # field and array stores fall through unchanged
            if isinstance(lvalue, Var) and can_hold_int(lvalue):
                result.update(lvalue, evaluate(rvalue, result))
        changed = out_fact.copy_from(result)
        if changed:
            _log.debug("OUT[%r] = %r", stmt, out_fact)
        return changed

    @staticmethod
    def constant_at(result: DataflowResult[CPFact], stmt: Stmt, var: Var) -> Optional[int]:
        """The known value of ``var`` right after ``stmt``, or ``None``."""
        return result.out_fact(stmt).get(var).concrete_value()


def can_hold_int(var: Var) -> bool:
    """Whether ``var`` has an int-like primitive type."""
    return var.type in _INT_LIKE


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — EXPRESSION EVALUATION
# ═════════════════════════════════════════════════════════════════════════

def evaluate(exp: Exp, fact: CPFact) -> Value:
    """Abstract value of ``exp`` under ``fact``.

    Shapes the domain cannot model (calls, field and array loads, casts,
    allocations, negations) evaluate to NAC.
    """
    if isinstance(exp, IntLiteral):
        return make_constant(exp.value)
    if isinstance(exp, Var):
        return fact.get(exp)
    if isinstance(exp, BinaryExp):
        op1 = evaluate(exp.operand1, fact)
        op2 = evaluate(exp.operand2, fact)
        if isinstance(op1, Constant) and isinstance(op2, Constant):
            return _combine_constants(exp, op1, op2)
        if op1.is_nac() or op2.is_nac():
            # x / 0 is unreachable even when x is unknown
            if (
                op1.is_nac()
                and isinstance(op2, Constant)
                and op2.value == 0
                and exp.op in (ArithmeticOp.DIV, ArithmeticOp.REM)
            ):
                return UNDEF
            return NAC_VALUE
        return UNDEF
    return NAC_VALUE


def _combine_constants(exp: BinaryExp, op1: Value, op2: Value) -> Value:
    if not (isinstance(op1, Constant) and isinstance(op2, Constant)):
        raise LatticeInvariantError(
            f"non-constant operands {op1!r}, {op2!r} for {exp!r}"
        )
    return calculate(exp.op, op1.value, op2.value)
