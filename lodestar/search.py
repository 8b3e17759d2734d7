"""Result bookkeeping for iterative deepening: best lines, MultiPV and aspiration windows."""

from __future__ import annotations

from typing import Callable, Optional

from lodestar.thread import (
    WINDOW_DEPTH,
    WINDOW_SIZE,
    WINDOW_TIMER_MS,
    PVariation,
    SearchThread,
    ThreadPool,
)
from lodestar.types import MATE, MATE_IN_MAX

NONE_MOVE = 0

SearchFunction = Callable[[SearchThread, int, int, int], PVariation]
ReportFunction = Callable[[PVariation, int, int], None]


def _copy(pv: PVariation) -> PVariation:
    return PVariation(line=list(pv.line), score=pv.score)


def _first(pv: PVariation, index: int) -> int:
    return pv.line[index] if len(pv.line) > index else NONE_MOVE


def _half(value: int) -> int:
    """Halve an integer, truncating toward zero."""
    return -((-value) // 2) if value < 0 else value // 2


def select_best_thread(pool: ThreadPool) -> tuple[SearchThread, int, int, int]:
    """Pick the thread whose completed result is best.

    A thread beats the current best when it has an equal depth and a greater
    score, when it has a mate score closer than the best, or when it has a
    greater depth without giving up a closer mate. Returns the chosen thread
    with its best move, ponder move and score.
    """
    threads = list(pool)
    best_thread = threads[0]

    for thread in threads[1:]:
        best_depth = best_thread.completed
        best_score = best_thread.pvs[best_depth].score
        this_depth = thread.completed
        this_score = thread.pvs[this_depth].score

        if (this_depth == best_depth and this_score > best_score) or (
            this_score > MATE_IN_MAX and this_score > best_score
        ):
            best_thread = thread

        if this_depth > best_depth and (
            this_score > best_score or best_score < MATE_IN_MAX
        ):
            best_thread = thread

    pv = best_thread.pvs[best_thread.completed]
    best = _first(pv, 0)
    ponder = _first(pv, 1) if pv.length >= 2 else NONE_MOVE

    if best_thread is not threads[0]:
        best_thread.multi_pv = 0

    return best_thread, best, ponder, pv.score


def update_best_line(thread: SearchThread, pv: PVariation) -> None:
    """Record a finished depth or a fail-high as this thread's line of best play."""
    if not thread.multi_pv or pv.score > thread.pvs[thread.completed].score:
        thread.completed = thread.depth
        thread.pvs[thread.depth] = _copy(pv)

    thread.mpvs[thread.multi_pv] = _copy(pv)


def revert_best_line(thread: SearchThread) -> None:
    """Forget fail-highs at the current depth after a fail-low."""
    if not thread.multi_pv:
        thread.completed = thread.depth - 1


def sort_multipv_lines(thread: SearchThread) -> list[PVariation]:
    """Order the MultiPV lines by score, best first, and return them."""
    count = thread.limits.multi_pv
    lines = thread.mpvs

    # Exchange order matters for equal scores, so the swaps are kept as they are
    for i in range(count):
        for j in range(i + 1, count):
            if lines[j].score > lines[i].score:
                lines[i], lines[j] = lines[j], lines[i]

    return lines[:count]


def aspiration_window(
    thread: SearchThread,
    search: SearchFunction,
    report: Optional[ReportFunction] = None,
) -> PVariation:
    """Search the current depth inside a window around the previous score.

    The window is widened after every fail-low or fail-high until the score
    falls strictly inside it. ``search`` is called as
    ``search(thread, alpha, beta, depth)`` and returns a principal variation.
    """
    depth = thread.depth
    alpha, beta, delta = -MATE, MATE, WINDOW_SIZE
    should_report = (
        report is not None and thread.index == 0 and thread.limits.multi_pv == 1
    )

    if thread.depth >= WINDOW_DEPTH:
        previous = thread.pvs[thread.completed].score
        alpha = max(-MATE, previous - delta)
        beta = min(MATE, previous + delta)

    while True:
        pv = search(thread, alpha, beta, max(1, depth))
        inside = alpha < pv.score < beta

        if should_report:
            slow = thread.tm is not None and thread.tm.elapsed() >= WINDOW_TIMER_MS
            if inside or slow:
                report(pv, alpha, beta)

        if inside:
            thread.best_moves[thread.multi_pv] = _first(pv, 0)
            update_best_line(thread, pv)
            return pv

        if pv.score <= alpha:
            beta = _half(alpha + beta)
            alpha = max(-MATE, alpha - delta)
            depth = thread.depth
            revert_best_line(thread)
        else:
            beta = min(MATE, beta + delta)
            depth -= int(abs(pv.score) <= MATE // 2)
            update_best_line(thread, pv)

        delta += delta // 2