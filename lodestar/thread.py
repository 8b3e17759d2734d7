"""Per-thread search state and the pool of search threads."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from lodestar.transposition import PawnKingTable
from lodestar.types import MAX_MOVES, MAX_PLY

if TYPE_CHECKING:
    from lodestar.timeman import Limits, TimeManager

STACK_OFFSET = 4
STACK_SIZE = MAX_PLY + STACK_OFFSET

# Search parameters shared by the search routines
WINDOW_DEPTH = 4
WINDOW_SIZE = 10
WINDOW_TIMER_MS = 2500

CURRMOVE_TIMER_MS = 2500

TT_RESEARCH_MARGIN = 141

BETA_PRUNING_DEPTH = 8
BETA_MARGIN = 65

ALPHA_PRUNING_DEPTH = 4
ALPHA_MARGIN = 3488

NULL_MOVE_PRUNING_DEPTH = 2

PROBCUT_DEPTH = 5
PROBCUT_MARGIN = 100

FUTILITY_PRUNING_DEPTH = 8
FUTILITY_MARGIN_BASE = 77
FUTILITY_MARGIN_PER_DEPTH = 52
FUTILITY_MARGIN_NO_HISTORY = 165
FUTILITY_PRUNING_HISTORY_LIMIT = (14296, 6004)

CONTINUATION_PRUNING_DEPTH = (3, 2)
CONTINUATION_PRUNING_HISTORY_LIMIT = (-1000, -2500)

LATE_MOVE_PRUNING_DEPTH = 8

SEE_PRUNING_DEPTH = 10
SEE_QUIET_MARGIN = -64
SEE_NOISY_MARGIN = -20
SEE_PIECE_VALUES = (103, 422, 437, 694, 1313, 0, 0, 0)

QS_SEE_MARGIN = 123
QS_DELTA_MARGIN = 142


@dataclass
class PVariation:
    """A principal variation: the line of best play and its score."""

    line: list[int] = field(default_factory=list)
    score: int = 0

    @property
    def length(self) -> int:
        return len(self.line)


@dataclass
class _NodeState:
    eval: int = 0
    moved_piece: int = 0
    dextensions: int = 0
    tactical: bool = False
    move: int = 0
    excluded: int = 0


class SearchThread:
    """Everything one search thread owns: results, statistics and ordering tables."""

    def __init__(self, index: int, pool: ThreadPool) -> None:
        self.index = index
        self.pool = pool
        self.limits: Limits | None = None
        self.tm: TimeManager | None = None

        self.pvs = [PVariation() for _ in range(MAX_PLY)]
        self.mpvs = [PVariation() for _ in range(MAX_MOVES)]
        self.multi_pv = 0
        self.best_moves = [0] * MAX_MOVES

        self.nodes = 0
        self.tbhits = 0
        self.depth = 0
        self.seldepth = 0
        self.height = 0
        self.completed = 0

        # Indexed as node_states[height + STACK_OFFSET], allowing looks backwards
        self.node_states = [_NodeState() for _ in range(STACK_SIZE)]

        self.pktable = PawnKingTable()
        self.killers = [[0, 0] for _ in range(MAX_PLY + 1)]
        self.cmtable: defaultdict[tuple[int, ...], int] = defaultdict(int)
        self.history: defaultdict[tuple[int, ...], int] = defaultdict(int)
        self.chistory: defaultdict[tuple[int, ...], int] = defaultdict(int)
        self.continuation: defaultdict[tuple[int, ...], int] = defaultdict(int)

    @property
    def nthreads(self) -> int:
        return len(self.pool)

    def reset_tables(self) -> None:
        """Clear move ordering and evaluation caches for deterministic new games."""
        self.pktable.clear()
        for pair in self.killers:
            pair[0] = pair[1] = 0
        self.cmtable.clear()
        self.history.clear()
        self.chistory.clear()
        self.continuation.clear()

    def _reset_states(self) -> None:
        self.node_states = [_NodeState() for _ in range(STACK_SIZE)]


class ThreadPool:
    """A fixed group of search threads that know about one another."""

    def __init__(self, nthreads: int = 1) -> None:
        if nthreads < 1:
            raise ValueError(f"a thread pool needs at least one thread, got {nthreads}")
        self._threads = [SearchThread(i, self) for i in range(nthreads)]

    def __len__(self) -> int:
        return len(self._threads)

    def __iter__(self) -> Iterator[SearchThread]:
        return iter(self._threads)

    def __getitem__(self, index: int) -> SearchThread:
        return self._threads[index]

    def reset(self) -> None:
        """Reset every thread's ordering tables and caches."""
        for thread in self._threads:
            thread.reset_tables()

    def new_search(self, limits: Limits, tm: TimeManager) -> None:
        """Prepare every thread for a fresh search under the given limits."""
        for thread in self._threads:
            thread.limits = limits
            thread.tm = tm
            thread.height = 0
            thread.nodes = 0
            thread.tbhits = 0
            thread._reset_states()

    def nodes(self) -> int:
        """Total nodes searched across all threads."""
        return sum(thread.nodes for thread in self._threads)

    def tbhits(self) -> int:
        """Total tablebase hits across all threads."""
        return sum(thread.tbhits for thread in self._threads)