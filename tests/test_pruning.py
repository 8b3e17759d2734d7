import pytest

from lodestar.pruning import (
    Wdl,
    clamp_reduction,
    draw_score,
    late_move_pruning_count,
    lmr_reduction,
    mate_distance_bounds,
    noisy_reduction,
    null_move_reduction,
    quiet_reduction,
    see_margins,
    singular_extension,
    tablebase_score,
)
from lodestar.thread import SEE_NOISY_MARGIN, SEE_QUIET_MARGIN
from lodestar.transposition import Bound
from lodestar.types import MATE, TBWIN


def test_lmr_zero_row_and_column():
    assert lmr_reduction(0, 10) == 0
    assert lmr_reduction(10, 0) == 0


def test_lmr_monotonic():
    for depth in range(1, 63):
        for played in range(1, 63):
            assert lmr_reduction(depth + 1, played) >= lmr_reduction(depth, played)
            assert lmr_reduction(depth, played + 1) >= lmr_reduction(depth, played)


def test_lmr_clamps_large_indices():
    assert lmr_reduction(500, 500) == lmr_reduction(63, 63)
    assert lmr_reduction(200, 5) == lmr_reduction(63, 5)


def test_lmr_rejects_negative():
    with pytest.raises(ValueError):
        lmr_reduction(-1, 3)


def test_lmp_counts_ordering():
    assert late_move_pruning_count(False, 0) == 0
    for depth in range(1, 11):
        assert late_move_pruning_count(True, depth) >= late_move_pruning_count(False, depth)
    for depth in range(1, 10):
        assert late_move_pruning_count(False, depth + 1) > late_move_pruning_count(False, depth)


def test_lmp_rejects_out_of_range():
    with pytest.raises(ValueError):
        late_move_pruning_count(True, 11)


def test_draw_score_variance():
    scores = {draw_score(n) for n in range(16)}
    assert scores == {1, -1}
    for n in range(32):
        assert draw_score(n) == draw_score(n + 4)


def test_mate_distance_bounds_wide_window():
    assert mate_distance_bounds(-MATE, MATE, 5) == (-MATE + 5, MATE - 6)


def test_mate_distance_bounds_narrow_window_unchanged():
    assert mate_distance_bounds(-50, 50, 5) == (-50, 50)


def test_tablebase_scores():
    assert tablebase_score(Wdl.WIN, 7) == (TBWIN - 7, Bound.LOWER)
    assert tablebase_score(Wdl.LOSS, 7) == (-TBWIN + 7, Bound.UPPER)
    for wdl in (Wdl.BLESSED_LOSS, Wdl.DRAW, Wdl.CURSED_WIN):
        value, bound = tablebase_score(wdl, 7)
        assert value == 0
        assert bound == Bound.EXACT


def test_tablebase_score_rejects_unknown():
    with pytest.raises(ValueError):
        tablebase_score(9, 1)


def test_null_move_reduction_caps_eval_term():
    assert null_move_reduction(10, 1000, 0, False) == null_move_reduction(10, 100000, 0, False)


def test_null_move_reduction_tactical_adds_one():
    assert null_move_reduction(8, 300, 0, True) == null_move_reduction(8, 300, 0, False) + 1


def test_null_move_reduction_grows_with_depth():
    assert null_move_reduction(20, 0, 0, False) > null_move_reduction(4, 0, 0, False)


def test_quiet_reduction_neutral_equals_base():
    assert quiet_reduction(12, 9, True, True, False, False, 0) == lmr_reduction(12, 9)


def test_quiet_reduction_adjustments():
    base = quiet_reduction(12, 9, True, True, False, False, 0)
    assert quiet_reduction(12, 9, False, False, False, False, 0) == base + 2
    assert quiet_reduction(12, 9, True, True, True, False, 0) == base + 1
    assert quiet_reduction(12, 9, True, True, False, True, 0) == base - 1
    assert quiet_reduction(12, 9, True, True, False, False, 6167) == base - 1
    assert quiet_reduction(12, 9, True, True, False, False, -6167) == base + 1


def test_noisy_reduction():
    assert noisy_reduction(0, False) == 3
    assert noisy_reduction(0, True) == noisy_reduction(0, False) - 1
    assert noisy_reduction(4952, False) == noisy_reduction(0, False) - 1
    assert noisy_reduction(4951, False) == noisy_reduction(0, False)


def test_clamp_reduction_range():
    for depth in range(3, 20):
        for reduction in range(-10, 30):
            clamped = clamp_reduction(reduction, depth)
            assert 1 <= clamped <= depth - 1


def test_clamp_reduction_passthrough():
    assert clamp_reduction(4, 10) == 4


def test_singular_double_extension_only_outside_pv():
    assert singular_extension(0, 100, 100, -50, 50, False, 0) == 2
    assert singular_extension(0, 100, 100, -50, 50, True, 0) == 1
    assert singular_extension(0, 100, 100, -50, 50, False, 7) == 1


def test_singular_negative_and_neutral():
    assert singular_extension(200, 100, 300, -50, 50, False, 0) == -1
    assert singular_extension(200, 100, -60, -50, 50, False, 0) == -1
    assert singular_extension(200, 100, 10, -50, 50, False, 0) == 0


def test_see_margins():
    assert see_margins(0) == (0, 0)
    noisy, quiet = see_margins(3)
    assert noisy == SEE_NOISY_MARGIN * 9
    assert quiet == SEE_QUIET_MARGIN * 3
    assert see_margins(4)[1] == 2 * see_margins(2)[1]