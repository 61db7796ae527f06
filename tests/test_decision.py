import io

import pytest

from cnfsub.dag import Assignment, DagContext, FalseNode, RootNode, TrueNode, make_lit
from cnfsub.decision import (
    BinaryDeterministicOrNode,
    BinaryDeterministicOrNodeCertified,
    DecomposableAndNode,
    DecomposableAndNodeCertified,
    DeterministicOrNode,
)

POS = make_lit(0)
NEG = make_lit(0, True)


@pytest.fixture
def ctx():
    context = DagContext()
    context.init_size_vector(3)
    context.set_weights([1] * 6, [True] * 3)
    return context


def _print(node, certif=False):
    out = io.StringIO()
    node.print_nnf(out, certif)
    return out.getvalue()


def test_binary_or_print(ctx):
    node = BinaryDeterministicOrNode(ctx, TrueNode(ctx), [POS], [], FalseNode(ctx), [NEG], [])
    assert _print(node) == "o 1 0\nt 2 0\nf 3 0\n1 2 1 0\n1 3 -1 0\n"


def test_binary_or_certified_print(ctx):
    node = BinaryDeterministicOrNodeCertified(
        ctx, TrueNode(ctx), [POS], [], True, FalseNode(ctx), [NEG], [], False, [4, 7]
    )
    assert _print(node, True) == "o 1 2 4 7 0\nt 2 0\nf 3 0\n1 2 1 1 0\n1 3 2 -1 0\n"


def test_binary_or_shared_child_printed_once(ctx):
    leaf = TrueNode(ctx)
    node = BinaryDeterministicOrNode(ctx, leaf, [POS], [], leaf, [NEG], [])
    assert _print(node) == "o 1 0\nt 2 0\n1 2 1 0\n1 2 -1 0\n"
    assert leaf.get_idx() == 2


def test_binary_or_requires_right_child(ctx):
    with pytest.raises(ValueError):
        BinaryDeterministicOrNode(ctx, TrueNode(ctx))


def test_binary_or_edges_counted_only_with_units(ctx):
    left, right = TrueNode(ctx), FalseNode(ctx)
    before = ctx.nb_edges
    BinaryDeterministicOrNode(ctx, left, None, None, right)
    assert ctx.nb_edges == before
    BinaryDeterministicOrNode(ctx, left, [POS], [], right, [NEG], [])
    assert ctx.nb_edges == before + 4


def test_binary_or_count_matches_conditioning(ctx):
    root = RootNode(ctx, 3)
    ctx.init_size_vector(3)
    node = BinaryDeterministicOrNode(ctx, TrueNode(ctx), [POS], [], FalseNode(ctx), [NEG], [])
    root.assign([], node)
    total = root.compute_nb_models()
    with_pos = root.compute_nb_models_conditioning([POS])
    with_neg = root.compute_nb_models_conditioning([NEG])
    assert total == with_pos + with_neg
    assert with_neg == FalseNode(ctx).compute_nb_models()
    assert with_pos == total


def test_binary_or_count_is_cached_until_stamp_changes(ctx):
    left, right = TrueNode(ctx), TrueNode(ctx)
    node = BinaryDeterministicOrNode(ctx, left, [POS], [], right, [NEG], [])
    ctx.global_stamp += 1
    first = node.compute_nb_models()
    ctx.set_weights([2, 3, 1, 1, 1, 1], [True] * 3)
    assert node.compute_nb_models() == first
    ctx.global_stamp += 1
    fresh = BinaryDeterministicOrNode(ctx, left, [POS], [], right, [NEG], [])
    assert node.compute_nb_models() == fresh.compute_nb_models()
    assert node.compute_nb_models() == ctx.weights_var[0]


def test_binary_or_is_sat(ctx):
    ctx.global_stamp += 1
    sat = BinaryDeterministicOrNode(ctx, FalseNode(ctx), [POS], [], TrueNode(ctx), [NEG], [])
    units = []
    assert sat.is_sat(units) is True
    assert units == []
    unsat = BinaryDeterministicOrNode(ctx, FalseNode(ctx), [POS], [], FalseNode(ctx), [NEG], [])
    assert unsat.is_sat([]) is False


def test_or_is_sat_respects_fixed_values(ctx):
    ctx.fixed_value[0] = Assignment.TRUE
    node = DeterministicOrNode(ctx)
    node.add_branch(TrueNode(ctx), [NEG])
    assert node.is_sat([]) is False
    node.add_branch(TrueNode(ctx), [POS])
    assert node.is_sat([]) is True


def test_deterministic_or_print(ctx):
    node = DeterministicOrNode(ctx)
    node.add_branch(TrueNode(ctx), [POS])
    node.add_branch(FalseNode(ctx), [NEG])
    assert _print(node) == "o 1\nt 2 0\n1 2 1 0\nf 3 0\n1 3 -1 0\n"


def test_deterministic_or_count_is_sum_of_branches(ctx):
    node = DeterministicOrNode(ctx)
    branches = [
        node.add_branch(TrueNode(ctx), [POS]),
        node.add_branch(TrueNode(ctx), [NEG], [1]),
        node.add_branch(FalseNode(ctx)),
    ]
    ctx.global_stamp += 1
    expected = sum(b.compute_nb_models() for b in branches)
    assert node.compute_nb_models() == expected
    assert len(node.sons) == len(branches)


def test_deterministic_or_edges_and_size(ctx):
    before = ctx.nb_edges
    node = DeterministicOrNode(ctx)
    node.add_branch(TrueNode(ctx))
    node.add_branch(FalseNode(ctx))
    assert ctx.nb_edges == before + 2
    assert node.get_size() == 3
    assert node.get_size() == node.get_size()


def test_decomposable_and_print(ctx):
    node = DecomposableAndNode(ctx, [TrueNode(ctx), FalseNode(ctx)])
    assert _print(node) == "a 1 0\nt 2 0\n1 2 0\nf 3 0\n1 3 0\n"


def test_decomposable_and_certified_print(ctx):
    node = DecomposableAndNodeCertified(ctx, [TrueNode(ctx), FalseNode(ctx)], [True, False])
    assert _print(node, True) == "a 1 2 0\nt 2 0\n1 2 1 0\nf 3 0\n1 3 2 0\n"


def test_decomposable_and_certified_flag_mismatch(ctx):
    with pytest.raises(ValueError):
        DecomposableAndNodeCertified(ctx, [TrueNode(ctx)], [True, False])


def test_decomposable_and_count_is_product(ctx):
    or_node = DeterministicOrNode(ctx)
    or_node.add_branch(TrueNode(ctx), [POS])
    or_node.add_branch(TrueNode(ctx), [NEG])
    and_node = DecomposableAndNode(ctx, [TrueNode(ctx), or_node])
    ctx.global_stamp += 1
    assert and_node.compute_nb_models() == or_node.compute_nb_models()
    with_false = DecomposableAndNode(ctx, [or_node, FalseNode(ctx)])
    assert with_false.compute_nb_models() == FalseNode(ctx).compute_nb_models()


def test_decomposable_and_is_sat_and_edges(ctx):
    before = ctx.nb_edges
    sat = DecomposableAndNode(ctx, [TrueNode(ctx), TrueNode(ctx)])
    assert ctx.nb_edges == before + 2
    assert sat.is_sat([]) is True
    unsat = DecomposableAndNode(ctx, [TrueNode(ctx), FalseNode(ctx)])
    assert unsat.is_sat([]) is False


def test_decomposable_and_size_counts_every_child(ctx):
    node = DecomposableAndNode(ctx, [TrueNode(ctx), FalseNode(ctx)])
    assert node.get_size() == 1 + TrueNode(ctx).get_size_() + FalseNode(ctx).get_size_()


def test_root_print_with_decision_node(ctx):
    root = RootNode(ctx, 3)
    ctx.init_size_vector(3)
    node = BinaryDeterministicOrNode(ctx, TrueNode(ctx), [POS], [], FalseNode(ctx), [NEG], [])
    root.assign([], node)
    text = _print(root)
    assert text.splitlines()[0] == "o 1 0"
    assert text.splitlines()[-1] == "1 2 0"
    assert "o 2 0" in text.splitlines()