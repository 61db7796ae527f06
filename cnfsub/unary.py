"""Unary nodes: a single branch carrying unit literals and free variables."""

from __future__ import annotations

from typing import Iterable, TextIO

from .dag import Branch, DagContext, Node


class UnaryNode(Node):
    """A node with one branch, used to attach unit literals to a sub-graph."""

    def __init__(
        self,
        ctx: DagContext,
        node: Node,
        units: Iterable[int] | None = None,
        free_vars: Iterable[int] | None = None,
    ) -> None:
        super().__init__(ctx)
        if units is None and free_vars is None:
            self.branch = Branch(ctx, node)
        else:
            self.branch = Branch(ctx, node, units or (), free_vars or ())
            ctx.nb_edges += 1
        self.nb_models = 0
        self.save_decision = False

    def get_size_(self) -> int:
        if self.stamp == self.ctx.global_stamp:
            return 0
        self.stamp = self.ctx.global_stamp
        return self.branch.node.get_size_()

    def _header(self, idx: int) -> str:
        return f"o {idx} 0\n"

    def _edge_tag(self) -> str | None:
        return None

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is None:
            return
        out.write(self._header(idx))
        self.branch.print_nnf(out, certif)
        out.write(self.branch._edge_line(idx, self._edge_tag()))

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        if self.stamp == self.ctx.global_stamp:
            return self.save_decision
        units = units_lit_branches if units_lit_branches is not None else []
        self.save_decision = self.branch.is_sat(units)
        self.stamp = self.ctx.global_stamp
        return self.save_decision

    def compute_nb_models(self):
        if self.stamp == self.ctx.global_stamp:
            return self.nb_models
        self.nb_models = self.branch.compute_nb_models()
        self.stamp = self.ctx.global_stamp
        return self.nb_models


class UnaryNodeCertified(UnaryNode):
    """A unary node that also records unit reasons and whether the child came from the cache."""

    def __init__(
        self,
        ctx: DagContext,
        node: Node,
        units: Iterable[int] | None = None,
        from_cache: bool = False,
        reasons: Iterable[int] = (),
        free_vars: Iterable[int] | None = None,
    ) -> None:
        super().__init__(ctx, node, units, free_vars)
        self.from_cache = from_cache
        self.reasons = list(reasons)

    def _header(self, idx: int) -> str:
        reasons = "".join(f"{r} " for r in self.reasons)
        return f"o {idx} 1 {reasons}0\n"

    def _edge_tag(self) -> str | None:
        return "1" if self.from_cache else "2"

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        super().print_nnf(out, certif)