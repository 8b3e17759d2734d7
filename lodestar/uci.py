"""Universal Chess Interface protocol: command parsing and search reports."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, TextIO

from lodestar.thread import ThreadPool
from lodestar.timeman import DEFAULT_MOVE_OVERHEAD, Limits, get_real_time
from lodestar.transposition import TranspositionTable
from lodestar.types import MATE, MATE_IN_MAX

START_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VERSION_ID = "14.40"
DEFAULT_OWNER = "Unlicensed"

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_MOVE_CHUNK = re.compile(r"(.{4})([^ ]?) *", re.S)


def _atoi(text: str) -> int:
    """Leading integer of a string, or zero when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    """Leading floating point number of a string, or zero when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _cdiv(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def uci_score(value: int, normalize: bool) -> tuple[str, int]:
    """Convert a search score into a UCI score type ("mate" or "cp") and number."""
    if value >= MATE_IN_MAX:
        return "mate", (MATE - value + 1) // 2
    if value <= -MATE_IN_MAX:
        return "mate", -((value + MATE) // 2)
    return "cp", _cdiv(100 * value, 186) if normalize else value


@dataclass(frozen=True)
class SearchReport:
    """Statistics for one reported line of play during a search."""

    depth: int
    seldepth: int
    multipv: int
    score: int
    alpha: int
    beta: int
    elapsed: int
    nodes: int
    tbhits: int
    hashfull: int
    pv: Sequence[str] = ()

    def render(self, normalize: bool = True) -> str:
        """The "info" line for this report, without a trailing newline."""
        elapsed = int(self.elapsed)
        bounded = max(self.alpha, min(self.score, self.beta))
        nps = 1000 * (self.nodes // (1 + elapsed))
        kind, number = uci_score(bounded, normalize)

        if bounded >= self.beta:
            bound = " lowerbound "
        elif bounded <= self.alpha:
            bound = " upperbound "
        else:
            bound = " "

        head = (
            f"info depth {self.depth} seldepth {self.seldepth} multipv {self.multipv} "
            f"score {kind} {number}{bound}time {elapsed} nodes {self.nodes} "
            f"nps {nps} tbhits {self.tbhits} hashfull {self.hashfull} pv "
        )
        return head + "".join(f"{move} " for move in self.pv)


def format_current_move(depth: int, move: str, number: int) -> str:
    """The "info currmove" line announcing the root move being searched."""
    return f"info depth {depth} currmove {move} currmovenumber {number}"


@dataclass
class GoCommand:
    """A parsed "go" command: the search limits and whether to ponder."""

    limits: Limits
    ponder: bool = False


def _take_value(tokens: Iterator[str], keyword: str) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ValueError(f"missing value after '{keyword}'") from None


def parse_go(
    command: str,
    legal_moves: Iterable[str],
    white_to_move: bool,
    multi_pv: int = 1,
    start: Optional[float] = None,
) -> GoCommand:
    """Parse a "go" command against the legal moves of the current position."""
    start_time = get_real_time() if start is None else start
    legal = list(legal_moves)
    wtime = btime = winc = binc = 0.0
    mtg = -1.0
    limits = Limits()
    ponder = False
    search_moves: list[str] = []

    words = [word for word in command.split(" ") if word]
    tokens = iter(words[1:])

    for token in tokens:
        if token == "wtime":
            wtime = float(_atoi(_take_value(tokens, token)))
        elif token == "btime":
            btime = float(_atoi(_take_value(tokens, token)))
        elif token == "winc":
            winc = float(_atoi(_take_value(tokens, token)))
        elif token == "binc":
            binc = float(_atoi(_take_value(tokens, token)))
        elif token == "movestogo":
            mtg = float(_atoi(_take_value(tokens, token)))
        elif token == "depth":
            limits.depth_limit = _atoi(_take_value(tokens, token))
        elif token == "movetime":
            limits.time_limit = float(_atoi(_take_value(tokens, token)))
        elif token == "nodes":
            limits.node_limit = int(_atof(_take_value(tokens, token)))
        elif token == "infinite":
            limits.limited_by_none = True
        elif token == "searchmoves":
            limits.limited_by_moves = True
        elif token == "ponder":
            ponder = True

        search_moves.extend(move for move in legal if move == token)

    limits.limited_by_time = limits.time_limit != 0
    limits.limited_by_depth = limits.depth_limit != 0
    limits.limited_by_nodes = limits.node_limit != 0
    limits.limited_by_self = (
        not limits.depth_limit
        and not limits.time_limit
        and not limits.limited_by_none
        and not limits.node_limit
    )

    limits.start = start_time
    limits.time = wtime if white_to_move else btime
    limits.inc = winc if white_to_move else binc
    limits.mtg = mtg
    limits.search_moves = search_moves
    limits.multi_pv = min(
        multi_pv, len(search_moves) if limits.limited_by_moves else len(legal)
    )

    return GoCommand(limits=limits, ponder=ponder)


def parse_position(command: str) -> tuple[Optional[str], list[str]]:
    """Parse a "position" command into a FEN (None to keep the board) and moves."""
    fen: Optional[str] = None

    if "fen" in command:
        rest = command[command.index("fen") + len("fen "):]
        if "moves" in rest:
            rest = rest[: rest.index("moves")]
        fen = rest.strip()
    elif "startpos" in command:
        fen = START_POSITION

    moves: list[str] = []
    if "moves" not in command:
        return fen, moves

    text = command[command.index("moves") + len("moves "):]
    pos = 0
    while pos < len(text):
        match = _MOVE_CHUNK.match(text, pos)
        if match is None:
            raise ValueError(f"truncated move in position command: {text[pos:]!r}")
        moves.append(match.group(1) + match.group(2))
        pos = match.end()

    return fen, moves


def _option_value(command: str, name: str) -> Optional[str]:
    prefix = f"setoption name {name} value "
    return command[len(prefix):] if command.startswith(prefix) else None


@dataclass
class UciOptions:
    """Engine options that the interface may change with "setoption"."""

    multi_pv: int = 1
    move_overhead: int = DEFAULT_MOVE_OVERHEAD
    eval_file: Optional[str] = None
    syzygy_path: Optional[str] = None
    syzygy_probe_depth: int = 0
    normalize: bool = True
    chess960: bool = False
    table: TranspositionTable = field(default_factory=TranspositionTable)
    pool: ThreadPool = field(default_factory=ThreadPool)

    def apply(self, command: str) -> list[str]:
        """Apply a "setoption" command; return the lines to send in reply."""
        replies: list[str] = []

        value = _option_value(command, "Hash")
        if value is not None:
            size = self.table.resize(_atoi(value))
            replies.append(f"info string set Hash to {size}MB")

        value = _option_value(command, "Threads")
        if value is not None:
            nthreads = _atoi(value)
            self.pool = ThreadPool(nthreads)
            replies.append(f"info string set Threads to {nthreads}")

        value = _option_value(command, "EvalFile")
        if value is not None:
            self.eval_file = None if value.startswith("<empty>") else value
            replies.append(f"info string set EvalFile to {value}")

        value = _option_value(command, "MultiPV")
        if value is not None:
            self.multi_pv = _atoi(value)
            replies.append(f"info string set MultiPV to {self.multi_pv}")

        value = _option_value(command, "MoveOverhead")
        if value is not None:
            self.move_overhead = _atoi(value)
            replies.append(f"info string set MoveOverhead to {self.move_overhead}")

        value = _option_value(command, "SyzygyPath")
        if value is not None:
            self.syzygy_path = None if value.startswith("<empty>") else value
            replies.append(f"info string set SyzygyPath to {value}")

        value = _option_value(command, "SyzygyProbeDepth")
        if value is not None:
            self.syzygy_probe_depth = _atoi(value)
            replies.append(f"info string set SyzygyProbeDepth to {self.syzygy_probe_depth}")

        value = _option_value(command, "Normalize")
        if value is not None:
            if value.startswith("true"):
                self.normalize = True
                replies.append("info string set Normalize to true")
            if value.startswith("false"):
                self.normalize = False
                replies.append("info string set Normalize to false")

        value = _option_value(command, "UCI_Chess960")
        if value is not None:
            if value.startswith("true"):
                self.chess960 = True
                replies.append("info string set UCI_Chess960 to true")
            if value.startswith("false"):
                self.chess960 = False
                replies.append("info string set UCI_Chess960 to false")

        return replies


def uci_banner(version: str = VERSION_ID, owner: str = DEFAULT_OWNER) -> list[str]:
    """The lines sent in reply to the "uci" command."""
    return [
        f"id name Lodestar {version}",
        "id author Lodestar developers",
        "option name Hash type spin default 16 min 2 max 131072",
        "option name Threads type spin default 1 min 1 max 2048",
        "option name EvalFile type string default <empty>",
        "option name MultiPV type spin default 1 min 1 max 256",
        "option name MoveOverhead type spin default 300 min 0 max 10000",
        "option name SyzygyPath type string default <empty>",
        "option name SyzygyProbeDepth type spin default 0 min 0 max 127",
        "option name Ponder type check default false",
        "option name Normalize type check default true",
        "option name UCI_Chess960 type check default false",
        f"info string licensed to {owner}",
        "uciok",
    ]


def read_commands(stream: TextIO) -> Iterator[str]:
    """Yield each input line, cut at its first newline and then its first carriage return."""
    for line in stream:
        yield line.split("\n", 1)[0].split("\r", 1)[0]