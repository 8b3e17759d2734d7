"""Search core of a UCI chess engine: transposition table, time management, search heuristics, UCI helpers and tuning."""

__version__ = "0.1.0"