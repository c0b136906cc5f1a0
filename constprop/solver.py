"""
constprop/solver.py
═══════════════════

Worklist fixpoint driver for :class:`~constprop.analysis.DataflowAnalysis`.

Forward analyses
    ``OUT[entry] = boundary``; for every other node
    ``IN[n] = ⊓ OUT[p]`` over predecessors ``p`` and ``OUT[n] = f(IN[n])``.
Backward analyses
    ``IN[exit] = boundary``; ``OUT[n] = ⊓ IN[s]`` over successors ``s`` and
    ``IN[n] = f(OUT[n])``.  The solver hands the analysis the fact flowing
    *into* the node along the analysis direction first, so
    ``transfer_node(node, OUT[n], IN[n])`` for backward problems.

A node's successors (predecessors, backward) are revisited only when its
transfer reports a change.  Termination follows from the finite height of
the lattice; ``AnalysisConfig.max_iterations`` bounds the loop anyway.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Generic, List, Optional, Set, TypeVar

from constprop.analysis import DataflowAnalysis
from constprop.cfg import CFG
from constprop.config import AnalysisConfig, WorklistStrategy
from constprop.errors import ConvergenceError
from constprop.ir import Stmt

_log = logging.getLogger(__name__)

F = TypeVar("F")


@dataclass
class DataflowResult(Generic[F]):
    """Container for dataflow analysis results.

    Attributes
    ----------
    facts_in : dict
        Map from CFG node → fact before the node.
    facts_out : dict
        Map from CFG node → fact after the node.
    iterations : int
        Number of worklist iterations performed.
    converged : bool
        Whether the analysis reached a fixpoint.
    elapsed_seconds : float
        Wall-clock time.
    """
    facts_in: Dict[Stmt, F] = field(default_factory=dict)
    facts_out: Dict[Stmt, F] = field(default_factory=dict)
    iterations: int = 0
    converged: bool = False
    elapsed_seconds: float = 0.0

    def in_fact(self, node: Stmt) -> F:
        return self.facts_in[node]

    def out_fact(self, node: Stmt) -> F:
        return self.facts_out[node]


class WorklistSolver(Generic[F]):
    """Fixpoint engine for one analysis over one CFG.

    Parameters
    ----------
    analysis : DataflowAnalysis
        Supplies direction, boundary/initial facts, meet and transfer.
    config : AnalysisConfig, optional
        Iteration bound and worklist order.  Defaults to the analysis'
        own config.
    """

    def __init__(
        self,
        analysis: DataflowAnalysis[F],
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.analysis = analysis
        self.config = config if config is not None else analysis.config

    def solve(self, cfg: CFG) -> DataflowResult[F]:
        t0 = time.monotonic()
        analysis = self.analysis
        forward = analysis.is_forward()
        boundary = cfg.entry if forward else cfg.exit

        result: DataflowResult[F] = DataflowResult()
        for node in cfg:
            result.facts_in[node] = analysis.new_initial_fact()
            result.facts_out[node] = analysis.new_initial_fact()
        if forward:
            result.facts_out[boundary] = analysis.new_boundary_fact(cfg)
            before, after = result.facts_in, result.facts_out
            sources, targets = cfg.predecessors_of, cfg.successors_of
        else:
            result.facts_in[boundary] = analysis.new_boundary_fact(cfg)
            before, after = result.facts_out, result.facts_in
            sources, targets = cfg.successors_of, cfg.predecessors_of

        worklist = self._initial_worklist(cfg, forward, boundary)
        pending: Set[Stmt] = set(worklist)
        iterations = 0

        while worklist:
            if iterations >= self.config.max_iterations:
                raise ConvergenceError(iterations, len(worklist))
            node = worklist.popleft()
            pending.discard(node)
            iterations += 1

            fact = before[node]
            for src in sources(node):
                analysis.meet_into(after[src], fact)
            if analysis.transfer_node(node, fact, after[node]):
                for succ in targets(node):
                    if succ is not boundary and succ not in pending:
                        worklist.append(succ)
                        pending.add(succ)

        result.iterations = iterations
        result.converged = True
        result.elapsed_seconds = time.monotonic() - t0
        _log.info(
            "%s on %s converged in %d iterations (%d nodes)",
            self.config.analysis_id, cfg.ir.method, iterations, len(cfg),
        )
        return result

    def _initial_worklist(self, cfg: CFG, forward: bool, boundary: Stmt) -> Deque[Stmt]:
        if self.config.strategy is WorklistStrategy.RPO:
            order: List[Stmt] = cfg.reverse_postorder()
            if not forward:
                order.reverse()
        else:
            order = cfg.nodes
        return deque(n for n in order if n is not boundary)


def solve(
    analysis: DataflowAnalysis[F],
    cfg: CFG,
    config: Optional[AnalysisConfig] = None,
) -> DataflowResult[F]:
    """Convenience wrapper: ``WorklistSolver(analysis, config).solve(cfg)``."""
    return WorklistSolver(analysis, config).solve(cfg)
