"""Decision-DNNF graph nodes: shared context, branches, constants and the root."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Iterable, Sequence, TextIO


def make_lit(var: int, negative: bool = False) -> int:
    """Encode the literal of ``var`` as ``2 * var + negative``."""
    return (var << 1) | int(bool(negative))


def lit_var(lit: int) -> int:
    return lit >> 1


def lit_sign(lit: int) -> bool:
    """True when the literal is negative."""
    return bool(lit & 1)


def readable_lit(lit: int) -> int:
    """DIMACS form of a literal: one-based, negative when negated."""
    number = lit_var(lit) + 1
    return -number if lit_sign(lit) else number


class Assignment(IntEnum):
    """Value fixed for a variable while conditioning."""

    NOT_ASSIGNED = 0
    TRUE = 1
    FALSE = 2


def _required(lit: int) -> Assignment:
    """The value a variable must take for ``lit`` to hold."""
    return Assignment.FALSE if lit_sign(lit) else Assignment.TRUE


class DagContext:
    """State shared by every node of one graph: stamps, counters, storage and weights."""

    def __init__(self) -> None:
        self.weights: list = []
        self.weights_var: list = []
        self.var_projected: list[bool] = []
        self.assums_value: list[Assignment] = []
        self.reset()

    def reset(self) -> None:
        """Forget stored literals, counters and fixed values; weights are kept."""
        self.global_stamp = 1
        self.nb_nodes = 0
        self.nb_edges = 0
        self.idx_output_struct = 0
        self._unit_lits: list[tuple[int, ...]] = [()]
        self._free_vars: list[tuple[int, ...]] = [()]
        self.fixed_value: list[Assignment] = []

    def save_unit_lits(self, lits: Iterable[int]) -> int:
        """Store a list of unit literals and return its position."""
        stored = tuple(lits)
        self._unit_lits.append(stored)
        self.nb_nodes += len(stored)
        self.nb_edges += len(stored)
        return len(self._unit_lits) - 1

    def save_free_vars(self, variables: Iterable[int]) -> int:
        """Store a list of free variables and return its position (0 when empty)."""
        stored = tuple(variables)
        if not stored:
            return 0
        self._free_vars.append(stored)
        return len(self._free_vars) - 1

    def unit_lits_at(self, index: int) -> tuple[int, ...]:
        return self._unit_lits[index]

    def free_vars_at(self, index: int) -> tuple[int, ...]:
        return self._free_vars[index]

    def init_size_vector(self, nb_vars: int) -> None:
        """Make room for the conditioning values of ``nb_vars`` more variables."""
        self.fixed_value.extend([Assignment.NOT_ASSIGNED] * nb_vars)

    def set_weights(self, weights: Sequence, projected: Sequence[bool]) -> None:
        """Set literal weights (indexed by literal code) and the projected variables."""
        if len(weights) % 2:
            raise ValueError("weights must hold one value per literal")
        self.weights = list(weights)
        self.var_projected = list(projected)
        self.weights_var = [
            self.weights[v << 1] + self.weights[(v << 1) | 1]
            for v in range(len(self.weights) >> 1)
        ]


class Node(ABC):
    """A node of the compiled graph."""

    def __init__(self, ctx: DagContext) -> None:
        self.ctx = ctx
        self.stamp = 0
        ctx.nb_nodes += 1

    def get_size(self) -> int:
        self.ctx.global_stamp += 1
        return self.get_size_()

    def get_size_(self) -> int:
        return 1

    def get_idx(self) -> int:
        """Output number given to this node by the print in progress."""
        if self.stamp < self.ctx.global_stamp:
            raise ValueError("node has not been printed")
        return self.stamp - self.ctx.global_stamp

    def _claim_index(self) -> int | None:
        """Number this node for output, or return None if already printed."""
        ctx = self.ctx
        if self.stamp >= ctx.global_stamp:
            return None
        self.stamp = ctx.global_stamp + ctx.idx_output_struct + 1
        ctx.idx_output_struct += 1
        return ctx.idx_output_struct

    @abstractmethod
    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        """Write this node and its descendants in NNF text form."""

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        return False

    @abstractmethod
    def compute_nb_models(self):
        """Weighted model count of the sub-graph under the fixed values."""

    def compute_nb_models_conditioning(self, lits: Iterable[int]):
        """Model count with every literal of ``lits`` fixed to true."""
        lits = list(lits)
        fixed = self.ctx.fixed_value
        for lit in lits:
            fixed[lit_var(lit)] = _required(lit)
        try:
            return self.compute_nb_models()
        finally:
            for lit in lits:
                fixed[lit_var(lit)] = Assignment.NOT_ASSIGNED


class Branch:
    """An edge to a child node, carrying unit literals and free variables."""

    def __init__(
        self,
        ctx: DagContext,
        node: Node,
        units: Iterable[int] | None = None,
        free_vars: Iterable[int] | None = None,
    ) -> None:
        if node is None:
            raise ValueError("a branch needs a target node")
        self.ctx = ctx
        self.node = node
        if units is None and free_vars is None:
            self.idx_unit_lit = self.idx_free_var = 0
        else:
            self.idx_unit_lit = ctx.save_unit_lits(units or ())
            self.idx_free_var = ctx.save_free_vars(free_vars or ())

    def units(self) -> tuple[int, ...]:
        return self.ctx.unit_lits_at(self.idx_unit_lit)

    def free_vars(self) -> tuple[int, ...]:
        return self.ctx.free_vars_at(self.idx_free_var)

    def nb_unit(self) -> int:
        return len(self.units())

    def nb_free(self) -> int:
        return len(self.free_vars())

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        self.node.print_nnf(out, certif)

    def _edge_line(self, parent: int, tag: str | None = None) -> str:
        parts = [str(parent), str(self.node.get_idx())]
        if tag is not None:
            parts.append(tag)
        parts.extend(str(readable_lit(lit)) for lit in self.units())
        parts.append("0")
        return " ".join(parts) + "\n"

    def is_sat(self, units_lit_branches: list[int]) -> bool:
        fixed = self.ctx.fixed_value
        units = self.units()
        for lit in units:
            value = fixed[lit_var(lit)]
            if value and value != _required(lit):
                return False
        before = len(units_lit_branches)
        units_lit_branches.extend(lit for lit in units if not fixed[lit_var(lit)])
        try:
            return self.node.is_sat(units_lit_branches)
        finally:
            del units_lit_branches[before:]

    def compute_nb_models(self):
        ctx = self.ctx
        weight = 1
        for lit in self.units():
            v = lit_var(lit)
            if not ctx.var_projected[v]:
                continue
            value = ctx.fixed_value[v]
            if value and value != _required(lit):
                return 0
            weight *= ctx.weights[lit]
        count = self.node.compute_nb_models()
        for v in self.free_vars():
            if not ctx.var_projected[v]:
                continue
            value = ctx.fixed_value[v]
            if value == Assignment.FALSE:
                weight *= ctx.weights[make_lit(v, True)]
            elif value == Assignment.TRUE:
                weight *= ctx.weights[make_lit(v, False)]
            else:
                weight *= ctx.weights_var[v]
        return count * weight


class TrueNode(Node):
    """The constant true."""

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is not None:
            out.write(f"t {idx} 0\n")

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        return True

    def compute_nb_models(self):
        return 1


class FalseNode(Node):
    """The constant false."""

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is not None:
            out.write(f"f {idx} 0\n")

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        return False

    def compute_nb_models(self):
        return 0


class ConstantNode(Node):
    """A leaf standing for a fixed model count."""

    def __init__(self, ctx: DagContext, nb_models) -> None:
        super().__init__(ctx)
        self.nb_models = nb_models

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        raise TypeError("a constant node has no NNF form")

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        return self.nb_models > 0

    def compute_nb_models(self):
        return self.nb_models


class RootNode(Node):
    """Entry point of a graph; creating one resets the shared context."""

    def __init__(self, ctx: DagContext, nb_vars: int) -> None:
        super().__init__(ctx)
        ctx.reset()
        self.nb_variable = nb_vars
        self.branch: Branch | None = None
        self.reasons: list[int] = []
        self.from_cache = False

    def assign(
        self,
        units: Iterable[int],
        node: Node,
        from_cache: bool = False,
        free_vars: Iterable[int] = (),
        reasons: Iterable[int] = (),
    ) -> None:
        self.branch = Branch(self.ctx, node, units, free_vars)
        self.reasons = list(reasons)
        self.from_cache = from_cache

    def _require_branch(self) -> Branch:
        if self.branch is None:
            raise RuntimeError("root node has not been assigned")
        return self.branch

    def get_size_(self) -> int:
        return 1 + self._require_branch().node.get_size_()

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        branch = self._require_branch()
        ctx = self.ctx
        ctx.idx_output_struct = 0
        self.stamp = ctx.global_stamp + 1
        ctx.idx_output_struct += 1
        idx = ctx.idx_output_struct
        if certif:
            reasons = "".join(f"{r} " for r in self.reasons)
            out.write(f"o {idx} 1 {reasons}0\n")
        else:
            out.write(f"o {idx} 0\n")
        branch.print_nnf(out, certif)
        tag = ("1" if self.from_cache else "2") if certif else None
        out.write(branch._edge_line(idx, tag))
        ctx.global_stamp += ctx.idx_output_struct + 1

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        branch = self._require_branch()
        self.ctx.global_stamp += 1
        return branch.is_sat(units_lit_branches if units_lit_branches is not None else [])

    def compute_nb_models(self):
        branch = self._require_branch()
        self.ctx.global_stamp += 1
        return branch.compute_nb_models()