import pytest

from cnfsub.dag import Assignment, DagContext, make_lit
from cnfsub.propagation import KromFormula, RenamableHornFormula


@pytest.fixture
def ctx():
    context = DagContext()
    context.init_size_vector(4)
    return context


def fresh(ctx):
    ctx.global_stamp += 1


def test_state_lit(ctx):
    formula = KromFormula(ctx)
    ctx.fixed_value[0] = Assignment.TRUE
    assert formula.state_lit(make_lit(0)) == Assignment.TRUE
    assert formula.state_lit(make_lit(0, True)) == Assignment.FALSE
    assert formula.state_lit(make_lit(1)) == Assignment.NOT_ASSIGNED


def test_krom_str(ctx):
    formula = KromFormula(ctx, [[make_lit(0, True), make_lit(1)]])
    assert str(formula) == "(-1@2, )"


def test_krom_rejects_non_binary(ctx):
    with pytest.raises(ValueError):
        KromFormula(ctx, [[make_lit(0)]])


def test_krom_add_clause_counts_edges(ctx):
    formula = KromFormula(ctx)
    before = ctx.nb_edges
    formula.add_clause([make_lit(0), make_lit(1)])
    assert ctx.nb_edges == before + 3


def test_krom_satisfiable_without_assignment(ctx):
    formula = KromFormula(ctx, [[make_lit(0, True), make_lit(1)]])
    assert formula.is_sat() is True


def test_krom_direct_conflict(ctx):
    formula = KromFormula(ctx, [[make_lit(0, True), make_lit(1)]])
    ctx.fixed_value[0] = Assignment.TRUE
    ctx.fixed_value[1] = Assignment.FALSE
    assert formula.is_sat() is False


def test_krom_chain_conflict_and_restore(ctx):
    formula = KromFormula(
        ctx,
        [[make_lit(0, True), make_lit(1)], [make_lit(1, True), make_lit(2)]],
    )
    ctx.fixed_value[0] = Assignment.TRUE
    ctx.fixed_value[2] = Assignment.FALSE
    assert formula.is_sat() is False
    assert ctx.fixed_value[1] == Assignment.NOT_ASSIGNED


def test_krom_propagation_restored(ctx):
    formula = KromFormula(ctx, [[make_lit(0, True), make_lit(1)]])
    ctx.fixed_value[0] = Assignment.TRUE
    assert formula.is_sat() is True
    assert ctx.fixed_value[1] == Assignment.NOT_ASSIGNED


def test_krom_unit_falsified(ctx):
    formula = KromFormula(ctx)
    formula.add_unit_lit(make_lit(3))
    ctx.fixed_value[3] = Assignment.FALSE
    assert formula.is_sat() is False


def test_krom_cached_by_stamp(ctx):
    formula = KromFormula(ctx, [[make_lit(0, True), make_lit(1)]])
    assert formula.is_sat() is True
    ctx.fixed_value[0] = Assignment.TRUE
    ctx.fixed_value[1] = Assignment.FALSE
    assert formula.is_sat() is True
    fresh(ctx)
    assert formula.is_sat() is False


def test_horn_str(ctx):
    formula = RenamableHornFormula(
        ctx, [[make_lit(0, True), make_lit(1, True), make_lit(2)], [make_lit(1)]]
    )
    assert str(formula) == "(-1 -2 3, 2)"


def test_horn_add_clause_counts_edges(ctx):
    formula = RenamableHornFormula(ctx)
    before = ctx.nb_edges
    formula.add_clause([make_lit(0), make_lit(1), make_lit(2)])
    assert ctx.nb_edges == before + 4


def test_horn_all_false(ctx):
    formula = RenamableHornFormula(ctx, [[make_lit(0, True), make_lit(1, True), make_lit(2)]])
    ctx.fixed_value[0] = Assignment.TRUE
    ctx.fixed_value[1] = Assignment.TRUE
    ctx.fixed_value[2] = Assignment.FALSE
    assert formula.is_sat() is False


def test_horn_propagates_and_restores(ctx):
    formula = RenamableHornFormula(ctx, [[make_lit(0, True), make_lit(1, True), make_lit(2)]])
    ctx.fixed_value[0] = Assignment.TRUE
    ctx.fixed_value[1] = Assignment.TRUE
    assert formula.is_sat() is True
    assert ctx.fixed_value[2] == Assignment.NOT_ASSIGNED


def test_horn_unit_chain_conflict(ctx):
    formula = RenamableHornFormula(
        ctx,
        [[make_lit(0)], [make_lit(0, True), make_lit(1)], [make_lit(1, True)]],
    )
    assert formula.is_sat() is False
    assert ctx.fixed_value[:2] == [Assignment.NOT_ASSIGNED, Assignment.NOT_ASSIGNED]


def test_horn_unit_chain_satisfiable(ctx):
    formula = RenamableHornFormula(
        ctx, [[make_lit(0)], [make_lit(0, True), make_lit(1)], [make_lit(1, True), make_lit(2)]]
    )
    assert formula.is_sat() is True


def test_horn_empty_clause(ctx):
    formula = RenamableHornFormula(ctx, [[]])
    assert formula.is_sat() is False


def test_horn_unit_literal_falsified(ctx):
    formula = RenamableHornFormula(ctx, [[make_lit(0), make_lit(1)]])
    formula.add_unit_lit(make_lit(2, True))
    ctx.fixed_value[2] = Assignment.TRUE
    assert formula.is_sat() is False
    fresh(ctx)
    ctx.fixed_value[2] = Assignment.NOT_ASSIGNED
    assert formula.is_sat() is True