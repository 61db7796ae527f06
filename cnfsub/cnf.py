"""CNF formulas in DIMACS form: literals, clauses and simplification passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator


@dataclass(frozen=True, order=True)
class Variable:
    """A propositional variable, stored as a zero-based index."""

    index: int

    @classmethod
    def from_int(cls, i: int) -> Variable:
        """Build from a DIMACS number (sign ignored)."""
        return cls(abs(i) - 1)

    @classmethod
    def from_literal(cls, literal: Literal) -> Variable:
        return cls(literal.code >> 1)

    def to_int(self) -> int:
        return self.index + 1

    def __str__(self) -> str:
        return str(self.to_int())


@dataclass(frozen=True, order=True)
class Literal:
    """A literal encoded as ``2 * var + negated``, so that p and ~p sort next to each other."""

    code: int

    @classmethod
    def from_int(cls, i: int) -> Literal:
        """Build from a DIMACS literal such as ``3`` or ``-3``."""
        return cls(((abs(i) - 1) << 1) ^ (1 if i < 0 else 0))

    @classmethod
    def from_variable(cls, variable: Variable, sign: int = 1) -> Literal:
        """Build the literal of ``variable``, negated when ``sign`` is negative."""
        return cls((variable.index << 1) | (1 if sign < 0 else 0))

    @property
    def variable(self) -> Variable:
        return Variable.from_literal(self)

    def sign(self) -> int:
        return -1 if self.code & 1 else 1

    def to_int(self) -> int:
        return self.sign() * ((self.code >> 1) + 1)

    def __invert__(self) -> Literal:
        return Literal(self.code ^ 1)

    def __str__(self) -> str:
        return str(self.to_int())


class Clause:
    """A disjunction of distinct literals, kept in insertion order."""

    def __init__(self, literals: Iterable[Literal] = ()) -> None:
        self._lits: list[Literal] = []
        for lit in literals:
            self.push(lit)

    def push(self, literal: Literal) -> None:
        """Append ``literal`` unless it is already present."""
        if literal not in self._lits:
            self._lits.append(literal)

    def remove(self, literal: Literal) -> None:
        self._lits = [lit for lit in self._lits if lit != literal]

    def remove_variable(self, variable: Variable) -> None:
        self._lits = [lit for lit in self._lits if lit.variable != variable]

    def contains(self, literal: Literal) -> bool:
        return literal in self._lits

    def contains_clause(self, other: Clause) -> bool:
        """True when every literal of ``other`` is in this clause."""
        return all(self.contains(lit) for lit in other)

    def copy(self) -> Clause:
        return Clause(self._lits)

    def __iter__(self) -> Iterator[Literal]:
        return iter(self._lits)

    def __len__(self) -> int:
        return len(self._lits)

    def __getitem__(self, index: int) -> Literal:
        return self._lits[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Clause):
            return NotImplemented
        return self._lits == other._lits

    def __repr__(self) -> str:
        return f"Clause([{', '.join(str(lit) for lit in self._lits)}])"

    def __str__(self) -> str:
        return "".join(f"{lit} " for lit in self._lits) + "0"


def _leading_ints(tokens: Iterable[str]) -> Iterator[int]:
    """Yield integers from ``tokens`` until one fails to parse."""
    for token in tokens:
        try:
            yield int(token)
        except ValueError:
            return


@dataclass
class CNF:
    """A CNF formula with per-clause activity flags and a literal occurrence index."""

    clauses: list[Clause] = field(default_factory=list)
    active: list[bool] = field(default_factory=list)
    units: set[Literal] = field(default_factory=set)
    free: set[Variable] = field(default_factory=set)
    vars: set[Variable] = field(default_factory=set)
    independent: set[Variable] = field(default_factory=set)

    def __init__(self, nb_vars: int = 0) -> None:
        self.clauses = []
        self.active = []
        self.units = set()
        self.free = set()
        self.vars = {Variable(i) for i in range(nb_vars)}
        self.independent = set()
        self._idx: list[set[int]] = [set() for _ in range(2 * nb_vars)]
        self._nb_active = 0

    @classmethod
    def from_file(cls, path: str | Path) -> CNF:
        with open(path, encoding="utf-8") as f:
            return cls.parse(f.read())

    @classmethod
    def parse(cls, text: str) -> CNF:
        """Parse DIMACS text; ``c ind`` lines name the independent variables."""
        cnf = cls()
        for line in text.splitlines():
            if line.startswith("p cnf "):
                tokens = line.split()
                try:
                    nb_vars = int(tokens[2])
                except (IndexError, ValueError) as exc:
                    raise ValueError(f"malformed header line: {line!r}") from exc
                for i in range(nb_vars):
                    cnf.vars.add(Variable(i))
                    cnf._idx.extend((set(), set()))
            elif line.startswith("c ind "):
                for v in _leading_ints(line.split()[2:]):
                    if v != 0:
                        cnf.independent.add(Variable.from_int(v))
            elif line[:1] not in ("c", "p"):
                clause = Clause()
                position = len(cnf.clauses)
                for v in _leading_ints(line.split()):
                    if v == 0:
                        continue
                    lit = Literal.from_int(v)
                    if lit.code >= len(cnf._idx):
                        raise ValueError(f"literal {v} outside the declared variables")
                    clause.push(lit)
                    cnf._idx[lit.code].add(position)
                cnf.clauses.append(clause)
                cnf.active.append(True)
        cnf._nb_active = len(cnf.active)
        return cnf

    def add_clause(self, clause: Clause) -> None:
        position = len(self.clauses)
        self.clauses.append(clause.copy())
        self.active.append(True)
        self._nb_active += 1
        for lit in clause:
            self._idx[lit.code].add(position)

    def set_active(self, index: int, value: bool) -> None:
        if self.active[index] != value:
            self._nb_active += 1 if value else -1
            self.active[index] = value

    def _active_clauses(self) -> Iterator[tuple[int, Clause]]:
        return ((i, c) for i, c in enumerate(self.clauses) if self.active[i])

    def _deactivate(self, index: int) -> None:
        if self.active[index]:
            self._nb_active -= 1
        self.active[index] = False

    def simplify(self) -> None:
        """Run unit propagation until no unit clause is left active."""
        while True:
            found: set[Literal] = set()
            for i, clause in self._active_clauses():
                if len(clause) == 1:
                    found.add(clause[0])
            for lit in found:
                self.units.add(lit)
            for i, clause in enumerate(self.clauses):
                if self.active[i] and len(clause) == 1:
                    self._deactivate(i)
            if not found:
                return
            for lit in sorted(found):
                neg = ~lit
                for i in self._idx[lit.code]:
                    self._deactivate(i)
                    for other in self.clauses[i]:
                        if other != lit:
                            self._idx[other.code].discard(i)
                self._idx[lit.code].clear()
                for i in self._idx[neg.code]:
                    self.clauses[i].remove(neg)
                self._idx[neg.code].clear()

    def subsumption(self) -> None:
        """Deactivate every clause that contains another active clause."""
        for i, clause in enumerate(self.clauses):
            if not self.active[i] or len(clause) == 0:
                continue
            pivot = min(clause, key=lambda lit: len(self._idx[lit.code]))
            for other in sorted(self._idx[pivot.code]):
                if self.active[other] and other != i and self.clauses[other].contains_clause(clause):
                    self._deactivate(other)
                    for lit in self.clauses[other]:
                        self._idx[lit.code].discard(other)

    def compute_free_vars(self) -> None:
        """Collect the variables that appear in no active clause and no unit."""
        free = set(self.vars)
        for _, clause in self._active_clauses():
            free.difference_update(lit.variable for lit in clause)
        free.difference_update(lit.variable for lit in self.units)
        self.free = free

    def rename_vars(self) -> CNF:
        """Return the active non-unit clauses over variables renumbered by first occurrence."""
        mapping: dict[Variable, Variable] = {}
        kept = [c for _, c in self._active_clauses() if len(c) > 1]
        for clause in kept:
            for lit in clause:
                mapping.setdefault(lit.variable, Variable(len(mapping)))
        result = CNF(len(mapping))
        for clause in kept:
            result.add_clause(
                Clause(Literal.from_variable(mapping[lit.variable], lit.sign()) for lit in clause)
            )
        return result

    def nb_by_clause_len(self) -> list[int]:
        """Count active clauses by length; slot 1 also counts the units."""
        counts = [0, len(self.units)]
        for _, clause in self._active_clauses():
            while len(clause) >= len(counts):
                counts.append(0)
            counts[len(clause)] += 1
        return counts

    def vars_by_clause_len(self) -> list[set[Variable]]:
        """Variables by length of the clauses they occur in; slot 0 holds all of them."""
        groups: list[set[Variable]] = [set(), {lit.variable for lit in self.units}]
        for _, clause in self._active_clauses():
            while len(clause) >= len(groups):
                groups.append(set())
            for lit in clause:
                groups[len(clause)].add(lit.variable)
                groups[0].add(lit.variable)
        return groups

    def nb_vars(self) -> int:
        return len(self.vars)

    def nb_free_vars(self) -> int:
        return len(self.free)

    def nb_units(self) -> int:
        return len(self.units)

    def nb_c_vars(self) -> int:
        return self.nb_vars() - self.nb_free_vars()

    def nb_clauses(self) -> int:
        return len(self.clauses)

    def nb_active_clauses(self) -> int:
        return self._nb_active

    def __str__(self) -> str:
        lines = [f"p cnf {len(self.vars)} {self._nb_active + len(self.units)}"]
        lines.extend(str(c) for _, c in self._active_clauses())
        lines.extend(f"{lit} 0" for lit in sorted(self.units))
        lines.extend(f"c {v}" for v in sorted(self.free))
        return "\n".join(lines)