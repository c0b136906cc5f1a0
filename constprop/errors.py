"""
constprop/errors.py
═══════════════════

Exception types raised by the constant-propagation package.

    ConstPropError (base)
    ├── LatticeInvariantError   - internal bug: a lattice/evaluator invariant broke
    ├── CFGError                - malformed IR handed to ``build_cfg``
    ├── ConvergenceError        - solver iteration bound exceeded
    └── ConfigError             - invalid ``AnalysisConfig`` option

Unsupported IR shapes are *not* errors; the analysis resolves them to
``NAC`` or leaves the fact untouched.
"""

from __future__ import annotations


class ConstPropError(Exception):
    """Base class for every error raised by :mod:`constprop`."""
    pass


class LatticeInvariantError(ConstPropError, AssertionError):
    """Raised when a lattice or evaluator invariant is violated.

    These signal a programming error, never bad input data.
    """
    pass


class CFGError(ConstPropError):
    """Raised on malformed IR (dangling jump target, foreign statement)."""
    pass


class ConvergenceError(ConstPropError):
    """Raised when the worklist solver exceeds its iteration bound."""

    def __init__(self, iterations: int, pending: int) -> None:
        super().__init__(
            f"Dataflow analysis did not converge in {iterations} iterations "
            f"({pending} nodes still pending)"
        )
        self.iterations = iterations
        self.pending = pending


class ConfigError(ConstPropError, ValueError):
    """Raised on an invalid analysis configuration option."""
    pass
