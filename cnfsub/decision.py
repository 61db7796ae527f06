"""Decision (deterministic or) and decomposable and nodes of the compiled graph."""

from __future__ import annotations

from typing import Iterable, Sequence, TextIO

from .dag import Branch, DagContext, Node


def _make_branch(
    ctx: DagContext,
    node: Node,
    units: Iterable[int] | None,
    free_vars: Iterable[int] | None,
) -> Branch:
    """Build a branch; one that carries units or free variables counts as an edge."""
    branch = Branch(ctx, node, units, free_vars)
    if units is not None or free_vars is not None:
        ctx.nb_edges += 1
    return branch


class DeterministicOrNode(Node):
    """An or node over any number of mutually exclusive branches."""

    def __init__(self, ctx: DagContext) -> None:
        super().__init__(ctx)
        self.sons: list[Branch] = []
        self.nb_models = 0
        self.save_decision = False

    def add_branch(
        self,
        node: Node,
        units: Iterable[int] | None = None,
        free_vars: Iterable[int] | None = None,
    ) -> Branch:
        """Append a branch towards ``node`` and return it."""
        if units is None and free_vars is None:
            branch = Branch(self.ctx, node)
        else:
            branch = Branch(self.ctx, node, units or (), free_vars or ())
        self.ctx.nb_edges += 1
        self.sons.append(branch)
        return branch

    def get_size_(self) -> int:
        if self.stamp == self.ctx.global_stamp:
            return 0
        self.stamp = self.ctx.global_stamp
        return 1 + sum(son.node.get_size_() for son in self.sons)

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is None:
            return
        out.write(f"o {idx}\n")
        for son in self.sons:
            son.print_nnf(out, certif)
            out.write(son._edge_line(idx))

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        units = units_lit_branches if units_lit_branches is not None else []
        self.save_decision = any(son.is_sat(units) for son in self.sons)
        self.stamp = self.ctx.global_stamp
        return self.save_decision

    def compute_nb_models(self):
        if self.stamp == self.ctx.global_stamp:
            return self.nb_models
        total = 0
        for son in self.sons:
            total += son.compute_nb_models()
        self.nb_models = total
        self.stamp = self.ctx.global_stamp
        return total


class BinaryDeterministicOrNode(Node):
    """A decision node with exactly two branches."""

    def __init__(
        self,
        ctx: DagContext,
        left: Node,
        units_left: Iterable[int] | None = None,
        free_left: Iterable[int] | None = None,
        right: Node | None = None,
        units_right: Iterable[int] | None = None,
        free_right: Iterable[int] | None = None,
    ) -> None:
        super().__init__(ctx)
        if right is None:
            raise ValueError("a binary decision node needs two children")
        self.first_branch = _make_branch(ctx, left, units_left, free_left)
        self.second_branch = _make_branch(ctx, right, units_right, free_right)
        self.nb_models = 0
        self.save_decision = False

    @property
    def branches(self) -> tuple[Branch, Branch]:
        return self.first_branch, self.second_branch

    def get_size_(self) -> int:
        if self.stamp == self.ctx.global_stamp:
            return 0
        self.stamp = self.ctx.global_stamp
        return self.first_branch.node.get_size_() + self.second_branch.node.get_size_()

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is None:
            return
        out.write(f"o {idx} 0\n")
        self._print_children_and_edges(out, certif, idx)

    def _print_children_and_edges(
        self, out: TextIO, certif: bool, idx: int, tags: Sequence[str | None] = (None, None)
    ) -> None:
        self.first_branch.print_nnf(out, certif)
        self.second_branch.print_nnf(out, certif)
        for branch, tag in zip(self.branches, tags):
            out.write(branch._edge_line(idx, tag))

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        if self.stamp == self.ctx.global_stamp:
            return self.save_decision
        self.stamp = self.ctx.global_stamp
        units = units_lit_branches if units_lit_branches is not None else []
        self.save_decision = self.first_branch.is_sat(units) or self.second_branch.is_sat(units)
        return self.save_decision

    def compute_nb_models(self):
        if self.stamp == self.ctx.global_stamp:
            return self.nb_models
        self.nb_models = (
            self.first_branch.compute_nb_models() + self.second_branch.compute_nb_models()
        )
        self.stamp = self.ctx.global_stamp
        return self.nb_models


class BinaryDeterministicOrNodeCertified(BinaryDeterministicOrNode):
    """A binary decision node that also records unit reasons and cache origins."""

    def __init__(
        self,
        ctx: DagContext,
        left: Node,
        units_left: Iterable[int] | None = None,
        free_left: Iterable[int] | None = None,
        from_cache_left: bool = False,
        right: Node | None = None,
        units_right: Iterable[int] | None = None,
        free_right: Iterable[int] | None = None,
        from_cache_right: bool = False,
        reasons: Iterable[int] = (),
    ) -> None:
        super().__init__(ctx, left, units_left, free_left, right, units_right, free_right)
        self.from_cache_left = from_cache_left
        self.from_cache_right = from_cache_right
        self.reasons = list(reasons)

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is None:
            return
        reasons = "".join(f"{r} " for r in self.reasons)
        out.write(f"o {idx} 2 {reasons}0\n")
        tags = ("1" if self.from_cache_left else "2", "1" if self.from_cache_right else "2")
        self._print_children_and_edges(out, certif, idx, tags)


class DecomposableAndNode(Node):
    """A conjunction of children over disjoint sets of variables."""

    def __init__(self, ctx: DagContext, children: Iterable[Node]) -> None:
        super().__init__(ctx)
        self.children: list[Node] = list(children)
        ctx.nb_edges += len(self.children)

    def get_size_(self) -> int:
        return 1 + sum(child.get_size_() for child in self.children)

    def _header(self, idx: int) -> str:
        return f"a {idx} 0\n"

    def _edge(self, idx: int, position: int, child: Node) -> str:
        return f"{idx} {child.get_idx()} 0\n"

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        idx = self._claim_index()
        if idx is None:
            return
        out.write(self._header(idx))
        for position, child in enumerate(self.children):
            child.print_nnf(out, certif)
            out.write(self._edge(idx, position, child))

    def is_sat(self, units_lit_branches: list[int] | None = None) -> bool:
        units = units_lit_branches if units_lit_branches is not None else []
        return all(child.is_sat(units) for child in self.children)

    def compute_nb_models(self):
        product = 1
        for child in self.children:
            product *= child.compute_nb_models()
        return product


class DecomposableAndNodeCertified(DecomposableAndNode):
    """A decomposable and node that records whether each child came from the cache."""

    def __init__(
        self, ctx: DagContext, children: Iterable[Node], from_cache: Iterable[bool]
    ) -> None:
        children = list(children)
        flags = list(from_cache)
        if len(flags) != len(children):
            raise ValueError("one cache flag is needed per child")
        super().__init__(ctx, children)
        self.from_cache = flags

    def _header(self, idx: int) -> str:
        return f"a {idx} {len(self.children)} 0\n"

    def _edge(self, idx: int, position: int, child: Node) -> str:
        tag = "1" if self.from_cache[position] else "2"
        return f"{idx} {child.get_idx()} {tag} 0\n"

    def print_nnf(self, out: TextIO, certif: bool = False) -> None:
        super().print_nnf(out, certif)