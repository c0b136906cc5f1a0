"""
constprop/fact.py
═════════════════

``CPFact`` — the abstract store at one program point: ``Var → Value``.

Variables that were never written read as ``UNDEF``.  Two mutation
paths exist:

* :meth:`CPFact.update` is a strong update.  The transfer function uses
  it on its private copy of the ``in`` fact, where ``x = 3`` may replace
  ``x ↦ NAC``.
* :meth:`CPFact.raise_to` is the monotone update used while merging
  predecessor facts.  A value may only move up the lattice there; a
  downward move is an internal bug and raises.

Keys are never removed once inserted.
"""

from __future__ import annotations

from typing import Dict, ItemsView, Iterator, KeysView, Optional

from constprop.errors import LatticeInvariantError
from constprop.ir import Var
from constprop.lattice import UNDEF, Constant, Value, leq


class CPFact:
    """Mutable mapping from variables to lattice values."""

    __slots__ = ("_map",)

    def __init__(self, mapping: Optional[Dict[Var, Value]] = None) -> None:
        self._map: Dict[Var, Value] = dict(mapping) if mapping else {}

    # ---- Queries ---------------------------------------------------------

    def get(self, var: Var) -> Value:
        return self._map.get(var, UNDEF)

    def keys(self) -> KeysView[Var]:
        return self._map.keys()

    def items(self) -> ItemsView[Var, Value]:
        return self._map.items()

    def constants(self) -> Dict[str, int]:
        """Variables currently bound to a ``Constant``, by name."""
        return {
            var.name: value.value
            for var, value in self._map.items()
            if isinstance(value, Constant)
        }

    def leq(self, other: CPFact) -> bool:
        """Pointwise ``⊑``."""
        return all(leq(v, other.get(k)) for k, v in self._map.items())

    # ---- Mutation --------------------------------------------------------

    def update(self, var: Var, value: Value) -> bool:
        """Bind ``var`` to ``value``; return whether the binding changed."""
        old = self._map.get(var)
        self._map[var] = value
        return old != value and not (old is None and value is UNDEF)

    def raise_to(self, var: Var, value: Value) -> bool:
        """Like :meth:`update` but only permits upward moves."""
        old = self.get(var)
        if not leq(old, value):
            raise LatticeInvariantError(
                f"non-monotone update of {var!r}: {old!r} -> {value!r}"
            )
        return self.update(var, value)

    def copy(self) -> CPFact:
        return CPFact(self._map)

    def copy_from(self, other: CPFact) -> bool:
        """Overwrite this fact with every binding of ``other``.

        Returns ``True`` iff some value changed.  Bindings of ``self``
        absent from ``other`` are kept.
        """
        changed = False
        for var, value in other._map.items():
            changed |= self.update(var, value)
        return changed

    # ---- Dunder protocol -------------------------------------------------

    def __contains__(self, var: object) -> bool:
        return var in self._map

    def __iter__(self) -> Iterator[Var]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CPFact):
            return NotImplemented
        for var in self._map.keys() | other._map.keys():
            if self.get(var) != other.get(var):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(
            f"{var.name}={value!r}"
            for var, value in sorted(self._map.items(), key=lambda kv: kv[0].name)
        )
        return "{" + body + "}"
