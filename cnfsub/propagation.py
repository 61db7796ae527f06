"""Formulas decided by unit propagation: 2-CNF (Krom) and renamable Horn formulas."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from .dag import Assignment, DagContext, lit_sign, lit_var, readable_lit


def _required(lit: int) -> Assignment:
    return Assignment.FALSE if lit_sign(lit) else Assignment.TRUE


def _state_of(ctx: DagContext, lit: int) -> Assignment:
    value = ctx.fixed_value[lit_var(lit)]
    if value == Assignment.NOT_ASSIGNED:
        return Assignment.NOT_ASSIGNED
    return Assignment.TRUE if value == _required(lit) else Assignment.FALSE


class _PropagationFormula:
    """Shared state: clauses, extra unit literals and a stamped satisfiability cache."""

    def __init__(self, ctx: DagContext) -> None:
        self.ctx = ctx
        ctx.nb_nodes += 1
        self.clauses: list[tuple[int, ...]] = []
        self.unit: list[int] = []
        self.stamp = 0
        self.save_decision = False

    def _units_falsified(self) -> bool:
        return any(_state_of(self.ctx, u) == Assignment.FALSE for u in self.unit)


class KromFormula(_PropagationFormula):
    """A set of binary clauses, checked by repeated propagation passes."""

    def __init__(self, ctx: DagContext, clauses: Iterable[Sequence[int]] = ()) -> None:
        super().__init__(ctx)
        for clause in clauses:
            self.clauses.append(self._checked(clause))

    @staticmethod
    def _checked(clause: Sequence[int]) -> tuple[int, int]:
        lits = tuple(clause)
        if len(lits) != 2:
            raise ValueError("a Krom clause must hold exactly two literals")
        return lits  # type: ignore[return-value]

    def add_clause(self, clause: Sequence[int]) -> None:
        self.clauses.append(self._checked(clause))
        self.ctx.nb_edges += 3

    def add_unit_lit(self, lit: int) -> None:
        self.unit.append(lit)

    def state_lit(self, lit: int) -> Assignment:
        """Value of ``lit`` under the context's fixed values."""
        return _state_of(self.ctx, lit)

    def is_sat(self) -> bool:
        ctx = self.ctx
        if self.stamp == ctx.global_stamp:
            return self.save_decision
        self.stamp = ctx.global_stamp
        if self._units_falsified():
            self.save_decision = False
            return False

        fixed = ctx.fixed_value
        propagated: list[int] = []
        ok = True
        try:
            while True:
                pos = len(propagated)
                for first, second in self.clauses:
                    if not ok:
                        break
                    s1, s2 = self.state_lit(first), self.state_lit(second)
                    if s1 == Assignment.FALSE and s2 == Assignment.NOT_ASSIGNED:
                        fixed[lit_var(second)] = _required(second)
                        propagated.append(second)
                    elif s2 == Assignment.FALSE and s1 == Assignment.NOT_ASSIGNED:
                        fixed[lit_var(first)] = _required(first)
                        propagated.append(first)
                    elif s1 == Assignment.FALSE and s2 == Assignment.FALSE:
                        ok = False
                if not ok or pos >= len(propagated):
                    break
        finally:
            for lit in propagated:
                fixed[lit_var(lit)] = Assignment.NOT_ASSIGNED
        self.save_decision = ok
        return ok

    def __str__(self) -> str:
        body = "".join(
            "@".join(str(readable_lit(lit)) for lit in clause) + ", " for clause in self.clauses
        )
        return f"({body})"


class RenamableHornFormula(_PropagationFormula):
    """A set of clauses whose satisfiability is decided by unit propagation."""

    def __init__(self, ctx: DagContext, clauses: Iterable[Sequence[int]] = ()) -> None:
        super().__init__(ctx)
        self._occurrence: defaultdict[int, list[int]] = defaultdict(list)
        for clause in clauses:
            self.add_clause(clause)

    def add_clause(self, clause: Sequence[int]) -> None:
        lits = tuple(clause)
        position = len(self.clauses)
        self.clauses.append(lits)
        self.ctx.nb_edges += 1 + len(lits)
        for lit in lits:
            self._occurrence[lit].append(position)

    def add_unit_lit(self, lit: int) -> None:
        self.unit.append(lit)

    def state_lit(self, lit: int) -> Assignment:
        """Value of ``lit`` under the context's fixed values."""
        return _state_of(self.ctx, lit)

    def _first_not_false(self, clause: Sequence[int]) -> int | None:
        return next((lit for lit in clause if self.state_lit(lit) != Assignment.FALSE), None)

    def is_sat(self) -> bool:
        ctx = self.ctx
        if self.stamp == ctx.global_stamp:
            return self.save_decision
        self.stamp = ctx.global_stamp
        if self._units_falsified():
            self.save_decision = False
            return False

        fixed = ctx.fixed_value
        satisfied = [False] * len(self.clauses)
        nb_false = [0] * len(self.clauses)
        stack: list[int] = []
        ok = True

        for i, clause in enumerate(self.clauses):
            if not ok:
                break
            for lit in clause:
                if satisfied[i]:
                    break
                state = self.state_lit(lit)
                if state == Assignment.TRUE:
                    satisfied[i] = True
                elif state == Assignment.FALSE:
                    nb_false[i] += 1
            if nb_false[i] == len(clause):
                ok = False
            if not satisfied[i] and nb_false[i] == len(clause) - 1:
                pending = self._first_not_false(clause)
                if pending is not None:
                    stack.append(pending)

        pos = 0
        try:
            while ok and pos < len(stack):
                lit = stack[pos]
                pos += 1
                state = self.state_lit(lit)
                if state == Assignment.FALSE:
                    ok = False
                    break
                if state != Assignment.NOT_ASSIGNED:
                    continue
                fixed[lit_var(lit)] = _required(lit)
                for idx in self._occurrence.get(lit, ()):
                    satisfied[idx] = True
                for idx in self._occurrence.get(lit ^ 1, ()):
                    if satisfied[idx]:
                        continue
                    nb_false[idx] += 1
                    size = len(self.clauses[idx])
                    if size == nb_false[idx]:
                        ok = False
                    if size - 1 == nb_false[idx]:
                        pending = self._first_not_false(self.clauses[idx])
                        if pending is None:
                            ok = False
                        else:
                            stack.append(pending)
        finally:
            for lit in stack:
                fixed[lit_var(lit)] = Assignment.NOT_ASSIGNED
        self.save_decision = ok
        return ok

    def __str__(self) -> str:
        body = ", ".join(
            " ".join(str(readable_lit(lit)) for lit in clause) for clause in self.clauses
        )
        return f"({body})"