"""
constprop/config.py
═══════════════════

Analysis configuration and logging setup.

``AnalysisConfig`` carries the options the worklist solver and the
analysis read.  It is immutable; build variants with
:func:`dataclasses.replace` or :meth:`AnalysisConfig.from_dict`.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass, fields
from typing import Any, Mapping

from constprop.errors import ConfigError

_log = logging.getLogger(__name__)


class WorklistStrategy(enum.Enum):
    """Order in which the solver seeds and drains its worklist."""
    FIFO = "fifo"
    RPO = "rpo"         # Reverse post-order (best for forward)


@dataclass(frozen=True)
class AnalysisConfig:
    """Options for one analysis run.

    Attributes
    ----------
    analysis_id : str
        Identifier of the analysis the options belong to.
    max_iterations : int
        Safety bound on worklist iterations.  The lattice has height 3,
        so a well-formed run needs at most ``3 * nodes * vars`` rounds.
    strategy : WorklistStrategy
        Worklist iteration order.
    check_invariants : bool
        When set, ``meet_into`` asserts that facts only move upward.
    """
    analysis_id: str = "constprop"
    max_iterations: int = 1_000_000
    strategy: WorklistStrategy = WorklistStrategy.RPO
    check_invariants: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.max_iterations, int) or self.max_iterations <= 0:
            raise ConfigError(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}"
            )
        if not isinstance(self.strategy, WorklistStrategy):
            raise ConfigError(f"invalid worklist strategy {self.strategy!r}")

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> AnalysisConfig:
        """Build a config from a plain mapping (e.g. parsed JSON/YAML).

        ``strategy`` may be given as a :class:`WorklistStrategy` or by
        its string value.  Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"unknown analysis option(s): {', '.join(unknown)}")

        kwargs = dict(options)
        strategy = kwargs.get("strategy")
        if isinstance(strategy, str):
            try:
                kwargs["strategy"] = WorklistStrategy(strategy.lower())
            except ValueError:
                raise ConfigError(f"invalid worklist strategy {strategy!r}") from None
        config = cls(**kwargs)
        _log.debug("Loaded analysis config %s", config)
        return config


def configure_logging(verbosity: int) -> None:
    """Set up the ``constprop`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("constprop")
    root.setLevel(level)
    root.addHandler(handler)
