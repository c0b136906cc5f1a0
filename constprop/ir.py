"""
constprop/ir.py
═══════════════

A small three-address intermediate representation for one method body.

Only the shapes the analysis distinguishes are modelled precisely:

    Exp
    ├── IntLiteral          — 32-bit integer constant
    ├── Var                 — local variable / parameter
    ├── BinaryExp           — ``operand1 op operand2``, ``op`` from a closed enum
    └── opaque shapes       — FieldAccess, ArrayAccess, InvokeExp, CastExp,
                              NewExp, NegExp (never tracked)

    Stmt
    ├── AssignStmt          — ``lvalue = rvalue`` (definition)
    ├── Invoke              — ``[result =] call`` (definition when ``result``)
    ├── If / Goto           — jumps, targets are statement indices
    ├── Return
    └── Nop

Operator categories are separate enums so the evaluator can dispatch on
the category first and the operator second.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from constprop.errors import LatticeInvariantError

INT_MIN = -(1 << 31)
INT_MAX = (1 << 31) - 1


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — TYPES
# ═══════════════════════════════════════════════════════════════════════════

class PrimitiveType(enum.Enum):
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    CHAR = "char"
    BOOLEAN = "boolean"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ReferenceType:
    """A class or array type, identified by name only."""
    name: str

    def __str__(self) -> str:
        return self.name


Type = Union[PrimitiveType, ReferenceType]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — OPERATORS
# ═══════════════════════════════════════════════════════════════════════════

class ArithmeticOp(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"


class BitwiseOp(enum.Enum):
    OR = "|"
    AND = "&"
    XOR = "^"


class ShiftOp(enum.Enum):
    SHL = "<<"
    SHR = ">>"
    USHR = ">>>"


class ConditionOp(enum.Enum):
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="


class ComparisonOp(enum.Enum):
    """``lcmp``/``fcmpl``/``fcmpg`` style three-way comparisons.

    These only occur on long and floating-point operands, which the
    constant domain does not model.
    """
    CMP = "cmp"
    CMPL = "cmpl"
    CMPG = "cmpg"


BinaryOp = Union[ArithmeticOp, BitwiseOp, ShiftOp, ConditionOp, ComparisonOp]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Var:
    """A local variable or parameter.  Identity is ``(name, type)``."""
    name: str
    type: Type

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class IntLiteral:
    value: int

    def __post_init__(self) -> None:
        if not INT_MIN <= self.value <= INT_MAX:
            raise LatticeInvariantError(
                f"int literal {self.value} outside 32-bit range"
            )

    def __repr__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BinaryExp:
    op: BinaryOp
    operand1: Exp
    operand2: Exp

    def __repr__(self) -> str:
        return f"{self.operand1!r} {self.op.value} {self.operand2!r}"


@dataclass(frozen=True, slots=True)
class NegExp:
    operand: Exp

    def __repr__(self) -> str:
        return f"-{self.operand!r}"


@dataclass(frozen=True, slots=True)
class CastExp:
    cast_type: Type
    operand: Exp

    def __repr__(self) -> str:
        return f"({self.cast_type}) {self.operand!r}"


@dataclass(frozen=True, slots=True)
class FieldAccess:
    """``base.field`` or, with ``base=None``, a static field."""
    field_name: str
    base: Optional[Var] = None

    def __repr__(self) -> str:
        owner = repr(self.base) if self.base is not None else "<static>"
        return f"{owner}.{self.field_name}"


@dataclass(frozen=True, slots=True)
class ArrayAccess:
    base: Var
    index: Exp

    def __repr__(self) -> str:
        return f"{self.base!r}[{self.index!r}]"


@dataclass(frozen=True, slots=True)
class InvokeExp:
    method: str
    args: Tuple[Exp, ...] = ()

    def __repr__(self) -> str:
        return f"{self.method}({', '.join(map(repr, self.args))})"


@dataclass(frozen=True, slots=True)
class NewExp:
    type: Type

    def __repr__(self) -> str:
        return f"new {self.type}"


Exp = Union[
    IntLiteral, Var, BinaryExp, NegExp, CastExp,
    FieldAccess, ArrayAccess, InvokeExp, NewExp,
]
LValue = Union[Var, FieldAccess, ArrayAccess]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — STATEMENTS
# ═══════════════════════════════════════════════════════════════════════════
#
#  Statements compare by identity: two ``x = 1`` lines in a method are
#  distinct CFG nodes.
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(eq=False)
class AssignStmt:
    lvalue: LValue
    rvalue: Exp

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        return self.lvalue, self.rvalue

    def __repr__(self) -> str:
        return f"{self.lvalue!r} = {self.rvalue!r};"


@dataclass(eq=False)
class Invoke:
    call: InvokeExp
    result: Optional[Var] = None

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        if self.result is None:
            return None
        return self.result, self.call

    def __repr__(self) -> str:
        if self.result is None:
            return f"{self.call!r};"
        return f"{self.result!r} = {self.call!r};"


@dataclass(eq=False)
class If:
    condition: BinaryExp
    target: int

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        return None

    def __repr__(self) -> str:
        return f"if ({self.condition!r}) goto {self.target};"


@dataclass(eq=False)
class Goto:
    target: int

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        return None

    def __repr__(self) -> str:
        return f"goto {self.target};"


@dataclass(eq=False)
class Return:
    value: Optional[Exp] = None

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        return None

    def __repr__(self) -> str:
        return "return;" if self.value is None else f"return {self.value!r};"


@dataclass(eq=False)
class Nop:
    label: str = "nop"

    def def_pair(self) -> Optional[Tuple[LValue, Exp]]:
        return None

    def __repr__(self) -> str:
        return f"<{self.label}>"


Stmt = Union[AssignStmt, Invoke, If, Goto, Return, Nop]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 5 — METHOD BODY
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class IR:
    """The IR of one method: parameters plus an indexed statement list."""

    method: str
    params: List[Var] = field(default_factory=list)
    stmts: List[Stmt] = field(default_factory=list)
    _index: Dict[int, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = {id(s): i for i, s in enumerate(self.stmts)}

    def index_of(self, stmt: Stmt) -> int:
        """Position of ``stmt`` in this method, ``-1`` if foreign."""
        return self._index.get(id(stmt), -1)

    @property
    def vars(self) -> List[Var]:
        """Parameters followed by every variable defined or used, in order."""
        seen: Dict[Var, None] = dict.fromkeys(self.params)
        for stmt in self.stmts:
            for exp in _stmt_exps(stmt):
                for v in _vars_in(exp):
                    seen.setdefault(v)
        return list(seen)

    def __iter__(self):
        return iter(self.stmts)

    def __len__(self) -> int:
        return len(self.stmts)


def _stmt_exps(stmt: Stmt) -> List[Exp]:
    pair = stmt.def_pair()
    if pair is not None:
        return [pair[0], pair[1]]
    if isinstance(stmt, Invoke):
        return [stmt.call]
    if isinstance(stmt, If):
        return [stmt.condition]
    if isinstance(stmt, Return) and stmt.value is not None:
        return [stmt.value]
    return []


def _vars_in(exp: Exp) -> List[Var]:
    if isinstance(exp, Var):
        return [exp]
    if isinstance(exp, BinaryExp):
        return _vars_in(exp.operand1) + _vars_in(exp.operand2)
    if isinstance(exp, (NegExp, CastExp)):
        return _vars_in(exp.operand)
    if isinstance(exp, FieldAccess):
        return [exp.base] if exp.base is not None else []
    if isinstance(exp, ArrayAccess):
        return [exp.base] + _vars_in(exp.index)
    if isinstance(exp, InvokeExp):
        return [v for a in exp.args for v in _vars_in(a)]
    return []
