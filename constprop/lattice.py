"""
constprop/lattice.py
════════════════════

The flat constant lattice over 32-bit integers.

            NAC                 (top: any value is possible)
      / | ... | \\
    …  -1  0  1  2  …           (Constant(c): exactly c)
      \\ | ... | /
           UNDEF                (bottom: no information yet)

Height = 3, so fixpoint iteration over it always terminates.

``Value`` is the closed union ``Undef | Constant | NAC``.  Consumers
dispatch with an ``isinstance`` chain ending in ``assert_never`` so that
a type checker flags any dispatch that forgets a variant.

Examples
--------
>>> meet_value(make_constant(5), make_constant(5))
5
>>> meet_value(make_constant(5), make_constant(7))
NAC
>>> meet_value(get_undef(), make_constant(7))
7
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Final, Optional, Union, assert_never

from constprop.errors import LatticeInvariantError
from constprop.ir import INT_MAX, INT_MIN


class _Singleton:
    _instance: ClassVar[Optional[_Singleton]] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __reduce__(self):
        return (type(self), ())


class _ValueOps:
    """Variant queries shared by all three lattice values."""

    __slots__ = ()

    def is_undef(self) -> bool:
        return isinstance(self, Undef)

    def is_constant(self) -> bool:
        return isinstance(self, Constant)

    def is_nac(self) -> bool:
        return isinstance(self, NAC)

    def get_constant(self) -> int:
        if not isinstance(self, Constant):
            raise LatticeInvariantError(f"{self!r} is not a constant")
        return self.value

    def concrete_value(self) -> Optional[int]:
        return self.value if isinstance(self, Constant) else None

    def leq(self, other: Value) -> bool:
        """``self ⊑ other``."""
        return leq(self, other)  # type: ignore[arg-type]

    def meet(self, other: Value) -> Value:
        return meet_value(self, other)  # type: ignore[arg-type]


class Undef(_Singleton, _ValueOps):
    """⊥ — no definition has reached this point yet."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNDEF"


class NAC(_Singleton, _ValueOps):
    """⊤ — not a constant."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NAC"


@dataclass(frozen=True, slots=True)
class Constant(_ValueOps):
    """Exactly one known 32-bit signed integer."""
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise LatticeInvariantError(f"constant must be an int, got {self.value!r}")
        if not INT_MIN <= self.value <= INT_MAX:
            raise LatticeInvariantError(
                f"constant {self.value} outside 32-bit range"
            )

    def __repr__(self) -> str:
        return str(self.value)


Value = Union[Undef, Constant, NAC]

UNDEF: Final = Undef()
NAC_VALUE: Final = NAC()


def get_undef() -> Undef:
    return UNDEF


def get_nac() -> NAC:
    return NAC_VALUE


def make_constant(c: int) -> Constant:
    return Constant(c)


def leq(a: Value, b: Value) -> bool:
    """Partial order: ``UNDEF ⊑ Constant(c) ⊑ NAC``; constants are
    comparable only to themselves."""
    if isinstance(a, Undef):
        return True
    if isinstance(a, NAC):
        return isinstance(b, NAC)
    if isinstance(a, Constant):
        return isinstance(b, NAC) or a == b
    assert_never(a)


def meet_value(v1: Value, v2: Value) -> Value:
    """Meet two values (the merge at control-flow joins).

    NAC absorbs everything, UNDEF is the identity, and two constants
    survive only if they agree.
    """
    if isinstance(v1, NAC) or isinstance(v2, NAC):
        return NAC_VALUE
    if isinstance(v1, Undef):
        return v2
    if isinstance(v2, Undef):
        return v1
    if isinstance(v1, Constant):
        if isinstance(v2, Constant):
            return v1 if v1.value == v2.value else NAC_VALUE
        assert_never(v2)
    assert_never(v1)
