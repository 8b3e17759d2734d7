"""Search limits and the time manager that decides when to stop searching."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from lodestar.types import MAX_MOVES

if TYPE_CHECKING:
    from lodestar.thread import SearchThread

DEFAULT_MOVE_OVERHEAD = 300
_MOVE_SPACE = 0x10000


def get_real_time() -> float:
    """Wall clock time in whole milliseconds."""
    return float(time.time_ns() // 1_000_000)


@dataclass
class Limits:
    """Conditions under which a search is to stop, as given by the interface."""

    start: float = 0.0
    time: float = 0.0
    inc: float = 0.0
    mtg: float = -1.0
    time_limit: float = 0.0
    limited_by_none: bool = False
    limited_by_time: bool = False
    limited_by_self: bool = False
    limited_by_depth: bool = False
    limited_by_moves: bool = False
    limited_by_nodes: bool = False
    multi_pv: int = 1
    depth_limit: int = 0
    node_limit: int = 0
    search_moves: list[int] = field(default_factory=list)
    excluded_moves: list[int] = field(default_factory=lambda: [0] * MAX_MOVES)


def _first_move(pv) -> int:
    return pv.line[0] if pv.line else 0


class TimeManager:
    """Allocates thinking time and tracks where search effort has been spent."""

    def __init__(
        self,
        limits: Limits,
        move_overhead: int = DEFAULT_MOVE_OVERHEAD,
        clock: Callable[[], float] = get_real_time,
    ) -> None:
        self.limits = limits
        self.clock = clock
        self.pv_stability = 0
        self.start_time = limits.start
        self.nodes = [0] * _MOVE_SPACE
        self.ideal_usage = 0.0
        self.max_usage = 0.0

        if limits.limited_by_self:
            remaining = limits.time - move_overhead
            if limits.mtg >= 0:
                self.ideal_usage = 1.80 * remaining / (limits.mtg + 5) + limits.inc
                self.max_usage = 10.00 * remaining / (limits.mtg + 10) + limits.inc
            else:
                self.ideal_usage = 2.50 * (remaining + 25 * limits.inc) / 50
                self.max_usage = 10.00 * (remaining + 25 * limits.inc) / 50
            self.ideal_usage = min(self.ideal_usage, remaining)
            self.max_usage = min(self.max_usage, remaining)

        if limits.limited_by_time:
            self.ideal_usage = limits.time_limit
            self.max_usage = limits.time_limit

    def elapsed(self) -> float:
        """Milliseconds since the search started."""
        return self.clock() - self.start_time

    def update(self, thread: SearchThread) -> None:
        """Track how long the best move has stayed the same between iterations."""
        if not self.limits.limited_by_self or thread.completed < 4:
            return
        this_move = _first_move(thread.pvs[thread.completed])
        last_move = _first_move(thread.pvs[thread.completed - 1])
        self.pv_stability = min(10, self.pv_stability + 1) if this_move == last_move else 0

    def finished(self, thread: SearchThread) -> bool:
        """Whether the main thread should stop after its latest completed depth."""
        if thread.completed < 4:
            return False

        # 80% to 120% based on best move stability
        pv_factor = 1.20 - 0.04 * self.pv_stability

        # 75% to 125% based on score fluctuations
        score_change = thread.pvs[thread.completed - 3].score - thread.pvs[thread.completed].score
        score_factor = max(0.75, min(1.25, 0.05 * score_change))

        # 50% to 240% based on the share of nodes spent off the best move
        if thread.nodes == 0:
            return False
        best_nodes = self.nodes[_first_move(thread.pvs[thread.completed])]
        non_best_pct = 1.0 - best_nodes / thread.nodes
        nodes_factor = max(0.50, 2 * non_best_pct + 0.4)

        return self.elapsed() > self.ideal_usage * pv_factor * score_factor * nodes_factor

    def stop_early(self, thread: SearchThread) -> bool:
        """Whether the hard node or time limit has been reached after depth one."""
        limits = thread.limits
        if limits.limited_by_nodes:
            return thread.depth > 1 and thread.nodes >= limits.node_limit // thread.nthreads

        return (
            thread.depth > 1
            and (thread.nodes & 1023) == 1023
            and (limits.limited_by_self or limits.limited_by_time)
            and self.elapsed() >= self.max_usage
        )