"""
constprop/cfg.py
════════════════

Statement-level control-flow graph over one :class:`~constprop.ir.IR`.

Every statement is a node.  Two synthetic ``Nop`` nodes, ``entry`` and
``exit``, bracket the method so that a forward analysis has a single
boundary node.  Edges encode fall-through, ``Goto``/``If`` jumps and
``Return`` → exit.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Set

from constprop.errors import CFGError
from constprop.ir import IR, Goto, If, Nop, Return, Stmt

_log = logging.getLogger(__name__)


class CFG:
    """
    Control-flow graph of one method.

    Attributes
    ----------
    ir : IR
        The method body the graph was built from.
    entry, exit : Nop
        Synthetic boundary nodes.
    """

    def __init__(self, ir: IR) -> None:
        self.ir = ir
        self.entry = Nop("entry")
        self.exit = Nop("exit")
        self._succs: Dict[Stmt, List[Stmt]] = {self.entry: [], self.exit: []}
        self._preds: Dict[Stmt, List[Stmt]] = {self.entry: [], self.exit: []}
        for stmt in ir.stmts:
            self._succs[stmt] = []
            self._preds[stmt] = []

    # ---- Construction ----------------------------------------------------

    def add_edge(self, src: Stmt, dst: Stmt) -> None:
        if src not in self._succs or dst not in self._succs:
            raise CFGError(f"edge {src!r} -> {dst!r} leaves the CFG")
        if dst in self._succs[src]:
            return
        self._succs[src].append(dst)
        self._preds[dst].append(src)

    # ---- Queries ---------------------------------------------------------

    @property
    def nodes(self) -> List[Stmt]:
        return list(self._succs)

    def successors_of(self, node: Stmt) -> List[Stmt]:
        return list(self._succs[node])

    def predecessors_of(self, node: Stmt) -> List[Stmt]:
        return list(self._preds[node])

    def is_entry(self, node: Stmt) -> bool:
        return node is self.entry

    def is_exit(self, node: Stmt) -> bool:
        return node is self.exit

    def reverse_postorder(self) -> List[Stmt]:
        """Reverse post-order from ``entry``, then any unreachable nodes."""
        visited: Set[Stmt] = {self.entry}
        order: List[Stmt] = []
        stack = [(self.entry, iter(self._succs[self.entry]))]
        while stack:
            node, it = stack[-1]
            for succ in it:
                if succ not in visited:
                    visited.add(succ)
                    stack.append((succ, iter(self._succs[succ])))
                    break
            else:
                stack.pop()
                order.append(node)
        order.reverse()
        order.extend(n for n in self._succs if n not in visited)
        return order

    def __iter__(self) -> Iterator[Stmt]:
        return iter(self._succs)

    def __len__(self) -> int:
        return len(self._succs)

    def __repr__(self) -> str:
        edges = sum(len(s) for s in self._succs.values())
        return f"CFG({self.ir.method}, {len(self)} nodes, {edges} edges)"


def build_cfg(ir: IR) -> CFG:
    """Build the statement-level CFG of ``ir``."""
    cfg = CFG(ir)
    stmts = ir.stmts
    if not stmts:
        cfg.add_edge(cfg.entry, cfg.exit)
        return cfg

    def _at(index: int, origin: Stmt) -> Stmt:
        if not 0 <= index < len(stmts):
            raise CFGError(f"{origin!r}: jump target {index} out of range")
        return stmts[index]

    cfg.add_edge(cfg.entry, stmts[0])
    for i, stmt in enumerate(stmts):
        fall_through = stmts[i + 1] if i + 1 < len(stmts) else cfg.exit
        if isinstance(stmt, Goto):
            cfg.add_edge(stmt, _at(stmt.target, stmt))
        elif isinstance(stmt, If):
            cfg.add_edge(stmt, _at(stmt.target, stmt))
            cfg.add_edge(stmt, fall_through)
        elif isinstance(stmt, Return):
            cfg.add_edge(stmt, cfg.exit)
        else:
            cfg.add_edge(stmt, fall_through)

    _log.debug("Built %r", cfg)
    return cfg
