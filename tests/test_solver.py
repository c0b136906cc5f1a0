# tests/test_solver.py
"""
End-to-end tests: the worklist solver driving ConstantPropagation over
straight-line code, branches and loops.
"""

import logging

import pytest

from constprop import (
    IR,
    NAC_VALUE,
    UNDEF,
    AnalysisConfig,
    ArithmeticOp,
    BinaryExp,
    ConditionOp,
    Constant,
    ConvergenceError,
    DataflowAnalysis,
    Goto,
    If,
    Return,
    Var,
    WorklistStrategy,
    build_cfg,
    solve,
)
from tests.conftest import add, assign, binop, ivar, lit, mul, run

a, b, c, x, y, i, p = (ivar(n) for n in "abcxyip")


def diamond(then_value: int, else_value: int):
    # if (p > 0) { x = else } else { x = then }; y = x
    stmts = [
        If(binop(ConditionOp.GT, p, lit(0)), 3),
        assign(x, lit(then_value)),
        Goto(4),
        assign(x, lit(else_value)),
        assign(y, x),
        Return(y),
    ]
    return stmts


class TestStraightLine:

    def test_three_assignments(self):
        s1 = assign(a, lit(3))
        s2 = assign(b, add(a, lit(4)))
        s3 = assign(c, mul(b, lit(2)))
        cfg, result = run([s1, s2, s3])
        out = result.out_fact(s3)
        assert out.get(a) == Constant(3)
        assert out.get(b) == Constant(7)
        assert out.get(c) == Constant(14)
        assert result.converged
        assert result.out_fact(cfg.exit) == out

    def test_in_fact_is_predecessor_out(self):
        s1 = assign(a, lit(3))
        s2 = assign(b, a)
        _, result = run([s1, s2])
        assert result.in_fact(s2) == result.out_fact(s1)

    def test_parameters_are_nac(self):
        s1 = assign(a, add(p, lit(1)))
        _, result = run([s1], params=[p])
        assert result.out_fact(s1).get(a) is NAC_VALUE

    def test_reassignment_with_constant_recovers(self):
        s1 = assign(a, p)
        s2 = assign(a, lit(1))
        _, result = run([s1, s2], params=[p])
        assert result.out_fact(s1).get(a) is NAC_VALUE
        assert result.out_fact(s2).get(a) == Constant(1)

    def test_division_by_zero_constant(self):
        s1 = assign(a, binop(ArithmeticOp.DIV, p, lit(0)))
        _, result = run([s1], params=[p])
        assert result.out_fact(s1).get(a) is UNDEF

    def test_empty_method(self):
        cfg, result = run([])
        assert len(result.out_fact(cfg.exit)) == 0


class TestMerge:

    def test_disagreeing_branches(self):
        stmts = diamond(5, 7)
        _, result = run(stmts, params=[p])
        assert result.in_fact(stmts[4]).get(x) is NAC_VALUE
        assert result.out_fact(stmts[4]).get(y) is NAC_VALUE

    def test_agreeing_branches(self):
        stmts = diamond(5, 5)
        _, result = run(stmts, params=[p])
        assert result.out_fact(stmts[4]).get(y) == Constant(5)

    def test_variable_defined_on_one_path(self):
        stmts = [
            If(binop(ConditionOp.EQ, p, lit(0)), 2),
            assign(x, lit(1)),
            assign(y, x),
        ]
        _, result = run(stmts, params=[p])
        assert result.out_fact(stmts[2]).get(y) == Constant(1)


class TestLoops:

    def loop(self):
        # i = 0; k = 2; while (i < 10) { i = i + 1; } return i
        k = ivar("k")
        return k, [
            assign(i, lit(0)),
            assign(k, lit(2)),
            If(binop(ConditionOp.GE, i, lit(10)), 5),
            assign(i, add(i, lit(1))),
            Goto(2),
            Return(i),
        ]

    @pytest.mark.parametrize("strategy", list(WorklistStrategy))
    def test_loop_counter_is_nac(self, strategy):
        k, stmts = self.loop()
        _, result = run(stmts, config=AnalysisConfig(strategy=strategy))
        out = result.out_fact(stmts[5])
        assert out.get(i) is NAC_VALUE
        assert out.get(k) == Constant(2)

    def test_strategies_agree(self):
        _, stmts = self.loop()
        _, fifo = run(stmts, config=AnalysisConfig(strategy=WorklistStrategy.FIFO))
        _, rpo = run(stmts, config=AnalysisConfig(strategy=WorklistStrategy.RPO))
        for stmt in stmts:
            assert fifo.out_fact(stmt) == rpo.out_fact(stmt)

    def test_iteration_bound(self):
        _, stmts = self.loop()
        ir = IR("loop", stmts=stmts)
        cfg = build_cfg(ir)
        from constprop import ConstantPropagation

        result = solve(ConstantPropagation(), cfg)
        edges = sum(len(cfg.successors_of(n)) for n in cfg)
        assert result.iterations <= len(cfg) + edges * 2 * len(ir.vars)

    def test_iteration_limit_raises(self):
        _, stmts = self.loop()
        with pytest.raises(ConvergenceError) as info:
            run(stmts, config=AnalysisConfig(max_iterations=2))
        assert info.value.iterations == 2


class TestLogging:

    def test_summary_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="constprop.solver"):
            run([assign(a, lit(1))])
        assert "converged" in caplog.text


class _LiveVariables(DataflowAnalysis[set]):
    """Minimal backward analysis used to exercise the backward solver path."""

    ID = "livevar"

    def is_forward(self):
        return False

    def new_boundary_fact(self, cfg):
        return set()

    def new_initial_fact(self):
        return set()

    def meet_into(self, fact, target):
        target |= fact

    def transfer_node(self, node, out_fact, in_fact):
        live = set(out_fact)
        pair = node.def_pair()
        uses = []
        if pair is not None:
            live.discard(pair[0])
            uses.append(pair[1])
        if isinstance(node, Return) and node.value is not None:
            uses.append(node.value)
        while uses:
            e = uses.pop()
            if isinstance(e, Var):
                live.add(e)
            elif isinstance(e, BinaryExp):
                uses += [e.operand1, e.operand2]
        if live == in_fact:
            return False
        in_fact.clear()
        in_fact.update(live)
        return True


class TestBackward:

    def test_live_variables(self):
        s1 = assign(a, lit(1))
        s2 = assign(b, add(a, lit(1)))
        s3 = Return(b)
        cfg = build_cfg(IR("m", stmts=[s1, s2, s3]))
        result = solve(_LiveVariables(), cfg)
        assert result.in_fact(s3) == {b}
        assert result.in_fact(s2) == {a}
        assert result.in_fact(s1) == set()
        assert result.out_fact(s1) == {a}
