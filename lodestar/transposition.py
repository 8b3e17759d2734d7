"""Transposition table and pawn-king evaluation cache."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

from lodestar.types import TBWIN_IN_MAX, VALUE_NONE

TT_MASK_BOUND = 0x03
TT_MASK_AGE = 0xFC
TT_BUCKET_NB = 3
TT_BUCKET_BYTES = 32

_MB = 1 << 20
_MIN_KEY_BITS = 16

PK_CACHE_KEY_SIZE = 16
PK_CACHE_MASK = 0xFFFF
PK_CACHE_SIZE = 1 << PK_CACHE_KEY_SIZE


class Bound(IntFlag):
    NONE = 0
    LOWER = 1
    UPPER = 2
    EXACT = 3


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >= 1 << (bits - 1) else value


def value_from_tt(value: int, height: int) -> int:
    """Adjust a stored mate or tablebase score back to the current height."""
    if value == VALUE_NONE:
        return VALUE_NONE
    if value >= TBWIN_IN_MAX:
        return value - height
    if value <= -TBWIN_IN_MAX:
        return value + height
    return value


def value_to_tt(value: int, height: int) -> int:
    """Adjust a mate or tablebase score for storage in the table."""
    if value == VALUE_NONE:
        return VALUE_NONE
    if value >= TBWIN_IN_MAX:
        return value + height
    if value <= -TBWIN_IN_MAX:
        return value - height
    return value


@dataclass(slots=True)
class TTEntry:
    depth: int = 0
    generation: int = 0
    eval: int = 0
    value: int = 0
    move: int = 0
    hash16: int = 0


@dataclass(frozen=True)
class ProbeResult:
    move: int
    value: int
    eval: int
    depth: int
    bound: Bound


class TranspositionTable:
    """Bucketed table of previously searched positions, three entries per bucket."""

    def __init__(self, megabytes: int = 16) -> None:
        self.generation = 0
        self.hash_mask = 0
        self._buckets: dict[int, list[TTEntry]] = {}
        self.resize(megabytes)

    def resize(self, megabytes: int) -> int:
        """Resize and clear the table; return the size actually used in MB."""
        if megabytes < 0:
            raise ValueError(f"table size must not be negative: {megabytes}")
        key_bits = _MIN_KEY_BITS
        while (1 << key_bits) * TT_BUCKET_BYTES <= megabytes * _MB // 2:
            key_bits += 1
        self.hash_mask = (1 << key_bits) - 1
        self.clear()
        return (self.hash_mask + 1) * TT_BUCKET_BYTES // _MB

    def clear(self) -> None:
        """Empty every bucket."""
        self._buckets.clear()

    def new_search(self) -> None:
        """Age the table so that older entries are preferred for replacement."""
        self.generation = (self.generation + TT_MASK_BOUND + 1) & 0xFF

    def _bucket(self, key: int) -> list[TTEntry]:
        index = key & self.hash_mask
        try:
            return self._buckets[index]
        except KeyError:
            bucket = [TTEntry() for _ in range(TT_BUCKET_NB)]
            self._buckets[index] = bucket
            return bucket

    def probe(self, key: int, height: int) -> ProbeResult | None:
        """Look up a position, refreshing its age when found."""
        hash16 = (key >> 48) & 0xFFFF
        for slot in self._bucket(key):
            if slot.hash16 == hash16:
                slot.generation = self.generation | (slot.generation & TT_MASK_BOUND)
                return ProbeResult(
                    move=slot.move,
                    value=value_from_tt(slot.value, height),
                    eval=slot.eval,
                    depth=slot.depth,
                    bound=Bound(slot.generation & TT_MASK_BOUND),
                )
        return None

    def _age_score(self, slot: TTEntry) -> int:
        return slot.depth - ((259 + self.generation - slot.generation) & TT_MASK_AGE)

    def store(
        self,
        key: int,
        height: int,
        move: int,
        value: int,
        static_eval: int,
        depth: int,
        bound: int,
    ) -> None:
        """Record a search result, choosing a slot by depth and age."""
        hash16 = (key >> 48) & 0xFFFF
        slots = self._bucket(key)
        replace = slots[0]

        for slot in slots:
            if slot.hash16 == hash16:
                replace = slot
                break
            if self._age_score(replace) >= self._age_score(slot):
                replace = slot

        # Keep a deeper entry for the same position unless the new bound is exact
        if bound != Bound.EXACT and hash16 == replace.hash16 and depth < replace.depth - 2:
            return

        if move or hash16 != replace.hash16:
            replace.move = move & 0xFFFF

        replace.depth = _signed(depth, 8)
        replace.generation = (int(bound) | self.generation) & 0xFF
        replace.value = _signed(value_to_tt(value, height), 16)
        replace.eval = _signed(static_eval, 16)
        replace.hash16 = hash16

    def hashfull(self) -> int:
        """Estimate in permill how much of the table holds current entries."""
        used = 0
        for index in range(1000):
            for slot in self._buckets.get(index, ()):
                used += (
                    (slot.generation & TT_MASK_BOUND) != Bound.NONE
                    and (slot.generation & TT_MASK_AGE) == self.generation
                )
        return used // TT_BUCKET_NB


@dataclass(frozen=True)
class PKEntry:
    pkhash: int
    passed: int
    eval: int
    safetyw: int
    safetyb: int


class PawnKingTable:
    """Cache of pawn and king structure evaluations, indexed by pawn-king hash."""

    def __init__(self) -> None:
        self._entries: dict[int, PKEntry] = {}

    def get(self, pkhash: int) -> PKEntry | None:
        """Return the cached entry for this hash, or None."""
        entry = self._entries.get(pkhash & PK_CACHE_MASK)
        if entry is None:
            # An untouched slot reads as all zeros
            entry = PKEntry(0, 0, 0, 0, 0)
        return entry if entry.pkhash == pkhash else None

    def store(
        self, pkhash: int, passed: int, eval_: int, safety_white: int, safety_black: int
    ) -> None:
        """Cache an evaluation, replacing whatever occupied its slot."""
        self._entries[pkhash & PK_CACHE_MASK] = PKEntry(
            pkhash, passed, eval_, safety_white, safety_black
        )

    def clear(self) -> None:
        """Forget every cached entry."""
        self._entries.clear()