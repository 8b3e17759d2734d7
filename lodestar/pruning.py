"""Reduction, pruning and extension rules that shape the alpha-beta search."""

from __future__ import annotations

import math
from enum import IntEnum

from lodestar.thread import SEE_NOISY_MARGIN, SEE_QUIET_MARGIN
from lodestar.transposition import Bound
from lodestar.types import MATE, TBWIN

_LMR_SIZE = 64
_LMP_MAX_DEPTH = 10

_QUIET_HISTORY_DIVISOR = 6167
_NOISY_HISTORY_DIVISOR = 4952
_NULL_MOVE_EVAL_DIVISOR = 191
_DOUBLE_EXTENSION_MARGIN = 16
_MAX_DOUBLE_EXTENSIONS = 6


class Wdl(IntEnum):
    """Win/draw/loss outcome of a tablebase probe, from the side to move."""

    LOSS = 0
    BLESSED_LOSS = 1
    DRAW = 2
    CURSED_WIN = 3
    WIN = 4


def _cdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _build_lmr_table() -> tuple[tuple[int, ...], ...]:
    table = [[0] * _LMR_SIZE for _ in range(_LMR_SIZE)]
    for depth in range(1, _LMR_SIZE):
        for played in range(1, _LMR_SIZE):
            table[depth][played] = int(
                0.7844 + math.log(depth) * math.log(played) / 2.4696
            )
    return tuple(tuple(row) for row in table)


def _build_lmp_table() -> tuple[tuple[int, ...], tuple[int, ...]]:
    not_improving = [0] * (_LMP_MAX_DEPTH + 1)
    improving = [0] * (_LMP_MAX_DEPTH + 1)
    for depth in range(1, _LMP_MAX_DEPTH + 1):
        not_improving[depth] = int(2.0767 + 0.3743 * depth * depth)
        improving[depth] = int(3.8733 + 0.7124 * depth * depth)
    return tuple(not_improving), tuple(improving)


LMR_TABLE = _build_lmr_table()
LATE_MOVE_PRUNING_COUNTS = _build_lmp_table()


def lmr_reduction(depth: int, played: int) -> int:
    """Base late move reduction for a depth and number of moves played."""
    if depth < 0 or played < 0:
        raise ValueError(f"depth and played must not be negative: {depth}, {played}")
    return LMR_TABLE[min(depth, _LMR_SIZE - 1)][min(played, _LMR_SIZE - 1)]


def late_move_pruning_count(improving: bool, depth: int) -> int:
    """Number of moves after which remaining quiets are skipped."""
    if not 0 <= depth <= _LMP_MAX_DEPTH:
        raise ValueError(f"depth must lie in 0..{_LMP_MAX_DEPTH}, got {depth}")
    return LATE_MOVE_PRUNING_COUNTS[1 if improving else 0][depth]


def draw_score(nodes: int) -> int:
    """Draw score with slight variance, to avoid blindness to repetition lines."""
    return 1 - (nodes & 2)


def mate_distance_bounds(alpha: int, beta: int, height: int) -> tuple[int, int]:
    """Narrow the window by the fastest possible mate; prune when alpha >= beta."""
    return max(alpha, -MATE + height), min(beta, MATE - height - 1)


def tablebase_score(wdl: Wdl | int, height: int) -> tuple[int, Bound]:
    """Convert a tablebase outcome into a score and the bound it carries."""
    wdl = Wdl(wdl)
    if wdl == Wdl.LOSS:
        return -TBWIN + height, Bound.UPPER
    if wdl == Wdl.WIN:
        return TBWIN - height, Bound.LOWER
    # Blessed losses and cursed wins count as draws
    return 0, Bound.EXACT


def null_move_reduction(depth: int, eval_: int, beta: int, tactical: bool) -> int:
    """Depth reduction for a null move search, from depth, eval margin and tactics."""
    return (
        4
        + _cdiv(depth, 5)
        + min(3, _cdiv(eval_ - beta, _NULL_MOVE_EVAL_DIVISOR))
        + int(bool(tactical))
    )


def quiet_reduction(
    depth: int,
    played: int,
    pv_node: bool,
    improving: bool,
    king_evasion: bool,
    is_killer_or_counter: bool,
    hist: int,
) -> int:
    """Unclamped late move reduction for a quiet move."""
    reduction = lmr_reduction(depth, played)
    reduction += int(not pv_node) + int(not improving)
    reduction += int(bool(king_evasion))
    reduction -= int(bool(is_killer_or_counter))
    reduction -= _cdiv(hist, _QUIET_HISTORY_DIVISOR)
    return reduction


def noisy_reduction(hist: int, gives_check: bool) -> int:
    """Unclamped late move reduction for a tactical move."""
    return 3 - _cdiv(hist, _NOISY_HISTORY_DIVISOR) - int(bool(gives_check))


def clamp_reduction(reduction: int, depth: int) -> int:
    """Keep a reduction from extending or from dropping into quiescence."""
    return min(depth - 1, max(reduction, 1))


def singular_extension(
    value: int,
    r_beta: int,
    tt_value: int,
    alpha: int,
    beta: int,
    pv_node: bool,
    parent_dextensions: int,
) -> int:
    """Extension for a table move given the result of the exclusion search."""
    if (
        not pv_node
        and value < r_beta - _DOUBLE_EXTENSION_MARGIN
        and parent_dextensions <= _MAX_DOUBLE_EXTENSIONS
    ):
        return 2
    if value < r_beta:
        return 1
    if tt_value >= beta:
        return -1
    if tt_value <= alpha:
        return -1
    return 0


def see_margins(depth: int) -> tuple[int, int]:
    """Static exchange thresholds for (noisy, quiet) moves at this depth."""
    return SEE_NOISY_MARGIN * depth * depth, SEE_QUIET_MARGIN * depth