"""Texel-style tuning of linear evaluation terms by AdaGrad gradient descent."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

from lodestar.types import EG, MG, WHITE

Vector = list[list[float]]


class Method(IntEnum):
    """How a term enters the evaluation."""

    NORMAL = 0
    COMPLEXITY = 1
    SAFETY = 2


@dataclass(frozen=True)
class TTuple:
    """A term that is active in a position, with its white and black coefficients."""

    index: int
    wcoeff: int
    bcoeff: int


@dataclass
class TEntry:
    """One training position with its traced evaluation components.

    Scores are held as (midgame, endgame) pairs.
    """

    result: float
    seval: int
    phase: int
    turn: int
    eval: tuple[int, int] = (0, 0)
    safety: tuple[tuple[int, int], tuple[int, int]] = ((0, 0), (0, 0))
    complexity: tuple[int, int] = (0, 0)
    sfactor: float = 1.0
    tuples: list[TTuple] = field(default_factory=list)

    @property
    def pfactors(self) -> tuple[float, float]:
        return self.phase / 24.0, 1 - self.phase / 24.0

    @property
    def ntuples(self) -> int:
        return len(self.tuples)


@dataclass(frozen=True)
class GradientData:
    """Intermediate values of a linear evaluation needed by the gradient."""

    egeval: float
    complexity: float
    wsafetymg: float
    bsafetymg: float
    wsafetyeg: float
    bsafetyeg: float


def _sign(value: float) -> int:
    return (value > 0.0) - (value < 0.0)


def sigmoid(k: float, e: float) -> float:
    """Expected score of an evaluation ``e`` under scaling constant ``k``."""
    return 1.0 / (1.0 + math.exp(-k * e / 400.0))


def parse_result(line: str) -> float:
    """Game result marked in a training line: [1.0], [0.0] or [0.5]."""
    for marker, value in (("[1.0]", 1.0), ("[0.0]", 0.0), ("[0.5]", 0.5)):
        if marker in line:
            return value
    raise ValueError(f"cannot parse result from {line!r}")


def build_tuples(
    coeffs: Sequence[tuple[int, int]], methods: Sequence[Method]
) -> list[TTuple]:
    """Keep the terms that affect this position's evaluation."""
    tuples = []
    for index, ((white, black), method) in enumerate(zip(coeffs, methods)):
        if method == Method.NORMAL:
            active = white - black != 0
        else:
            active = white != 0 or black != 0
        if active:
            tuples.append(TTuple(index, white, black))
    return tuples


def linear_evaluation(
    entry: TEntry, params: Vector, methods: Sequence[Method], tempo: float
) -> tuple[float, GradientData]:
    """Evaluate a position with the parameter deltas applied."""
    mg = {m: [0.0, 0.0] for m in Method}
    eg = {m: [0.0, 0.0] for m in Method}

    for tup in entry.tuples:
        method = Method(methods[tup.index])
        mg[method][0] += tup.wcoeff * params[tup.index][MG]
        mg[method][1] += tup.bcoeff * params[tup.index][MG]
        eg[method][0] += tup.wcoeff * params[tup.index][EG]
        eg[method][1] += tup.bcoeff * params[tup.index][EG]

    (sw_mg, sw_eg), (sb_mg, sb_eg) = entry.safety

    normal_mg = entry.eval[MG] + mg[Method.NORMAL][0] - mg[Method.NORMAL][1]
    normal_eg = entry.eval[EG] + eg[Method.NORMAL][0] - eg[Method.NORMAL][1]

    wsafety_mg = sw_mg + mg[Method.SAFETY][0]
    wsafety_eg = sw_eg + eg[Method.SAFETY][0]
    bsafety_mg = sb_mg + mg[Method.SAFETY][1]
    bsafety_eg = sb_eg + eg[Method.SAFETY][1]

    # The original safety score is already inside the normal score; take it out
    normal_mg -= min(0.0, -sw_mg * abs(sw_mg) / 720.0) - min(0.0, -sb_mg * abs(sb_mg) / 720.0)
    normal_eg -= min(0.0, -sw_eg / 20.0) - min(0.0, -sb_eg / 20.0)

    safety_mg = min(0.0, -wsafety_mg * abs(wsafety_mg) / 720.0) - min(
        0.0, -bsafety_mg * abs(bsafety_mg) / 720.0
    )
    safety_eg = min(0.0, -wsafety_eg / 20.0) - min(0.0, -bsafety_eg / 20.0)

    complexity = entry.complexity[EG] + eg[Method.COMPLEXITY][0]
    egeval = normal_eg + safety_eg
    sign = _sign(egeval)

    data = GradientData(egeval, complexity, wsafety_mg, bsafety_mg, wsafety_eg, bsafety_eg)

    midgame = normal_mg + safety_mg
    endgame = egeval + sign * max(-abs(egeval), complexity)
    mixed = (midgame * entry.phase + endgame * (24.0 - entry.phase) * entry.sfactor) / 24.0

    return mixed + (tempo if entry.turn == WHITE else -tempo), data


def update_single_gradient(
    entry: TEntry,
    gradient: Vector,
    params: Vector,
    methods: Sequence[Method],
    k: float,
    tempo: float,
) -> None:
    """Accumulate one position's contribution into ``gradient``."""
    e, data = linear_evaluation(entry, params, methods, tempo)
    s = sigmoid(k, e)
    a = (entry.result - s) * s * (1 - s)

    pf_mg, pf_eg = entry.pfactors
    mg_base = a * pf_mg
    eg_base = a * pf_eg
    complexity_sign = _sign(data.egeval)
    eg_active = data.egeval == 0.0 or data.complexity >= -abs(data.egeval)

    for tup in entry.tuples:
        index, wcoeff, bcoeff = tup.index, tup.wcoeff, tup.bcoeff
        method = methods[index]

        if method == Method.NORMAL:
            gradient[index][MG] += mg_base * (wcoeff - bcoeff)
            if eg_active:
                gradient[index][EG] += eg_base * (wcoeff - bcoeff) * entry.sfactor

        elif method == Method.COMPLEXITY:
            if data.complexity >= -abs(data.egeval):
                gradient[index][EG] += eg_base * wcoeff * complexity_sign * entry.sfactor

        elif method == Method.SAFETY:
            gradient[index][MG] += (mg_base / 360.0) * (
                max(data.bsafetymg, 0.0) * bcoeff - max(data.wsafetymg, 0.0) * wcoeff
            )
            if eg_active:
                gradient[index][EG] += (eg_base / 20.0) * (
                    (data.bsafetyeg > 0.0) * bcoeff - (data.wsafetyeg > 0.0) * wcoeff
                )


def compute_gradient(
    entries: Sequence[TEntry],
    params: Vector,
    methods: Sequence[Method],
    k: float,
    batch: int,
    batch_size: int,
    tempo: float,
) -> Vector:
    """Gradient summed over one mini-batch of entries."""
    gradient = [[0.0, 0.0] for _ in params]
    for entry in entries[batch * batch_size:(batch + 1) * batch_size]:
        update_single_gradient(entry, gradient, params, methods, k, tempo)
    return gradient


def adagrad_step(
    params: Vector,
    adagrad: Vector,
    gradient: Vector,
    k: float,
    rate: float,
    batch_size: int,
) -> None:
    """Move ``params`` along ``gradient``, scaled per term by AdaGrad history."""
    scale = k / 200.0
    for param, history, grad in zip(params, adagrad, gradient):
        for phase in (MG, EG):
            step = scale * grad[phase] / batch_size
            history[phase] += step ** 2
            param[phase] += step * (rate / math.sqrt(1e-8 + history[phase]))


def _mean(values: list[float]) -> float:
    if not values:
        raise ValueError("no training entries")
    return sum(values) / len(values)


def static_evaluation_errors(entries: Sequence[TEntry], k: float) -> float:
    """Mean squared error of the static evaluations."""
    return _mean([(e.result - sigmoid(k, e.seval)) ** 2 for e in entries])


def tuned_evaluation_errors(
    entries: Sequence[TEntry],
    params: Vector,
    methods: Sequence[Method],
    k: float,
    tempo: float,
) -> float:
    """Mean squared error of the linear evaluations under ``params``."""
    return _mean(
        [
            (e.result - sigmoid(k, linear_evaluation(e, params, methods, tempo)[0])) ** 2
            for e in entries
        ]
    )


def compute_optimal_k(entries: Sequence[TEntry], precision: int = 10) -> float:
    """Scaling constant minimising the static error, by a refining grid search."""
    start, end, step = -10.0, 10.0, 1.0
    best = static_evaluation_errors(entries, start)

    for _ in range(precision):
        curr = start - step
        while curr < end:
            curr += step
            error = static_evaluation_errors(entries, curr)
            if error <= best:
                best, start = error, curr
        end = start + step
        start = start - step
        step = step / 10.0

    return start


def _score(params: Vector, index: int) -> str:
    return f"S({int(params[index][MG]):4d},{int(params[index][EG]):4d})"


def format_term_0(name: str, params: Vector, index: int, suffix: str) -> str:
    """Declaration of a single scored term."""
    return f"const int {name}{suffix} = {_score(params, index)};\n"


def format_term_1(name: str, params: Vector, index: int, a: int, suffix: str) -> str:
    """Declaration of a one dimensional array of scored terms."""
    out = [f"const int {name}{suffix} = {{ "]
    if a >= 3:
        for offset in range(a):
            if offset % 4 == 0:
                out.append("\n    ")
            out.append(_score(params, index + offset) + ", ")
        out.append("\n};\n\n")
    else:
        for offset in range(a):
            out.append(_score(params, index + offset))
            out.append(", " if offset != a - 1 else " };\n\n")
    return "".join(out)


def format_term_2(
    name: str, params: Vector, index: int, a: int, b: int, suffix: str
) -> str:
    """Declaration of a two dimensional array of scored terms."""
    out = [f"const int {name}{suffix} = {{\n"]
    for _ in range(a):
        out.append("   {")
        for col in range(b):
            if col and col % 4 == 0:
                out.append("\n    ")
            out.append(_score(params, index))
            out.append("" if col == b - 1 else ", ")
            index += 1
        out.append("},\n")
    out.append("};\n\n")
    return "".join(out)


def format_term_3(
    name: str, params: Vector, index: int, a: int, b: int, c: int, suffix: str
) -> str:
    """Declaration of a three dimensional array of scored terms."""
    out = [f"const int {name}{suffix} = {{\n"]
    for _ in range(a):
        for row in range(b):
            out.append("   {" if row else "  {{")
            for col in range(c):
                if col and col % 4 == 0:
                    out.append("\n    ")
                out.append(_score(params, index))
                out.append("" if col == c - 1 else ", ")
                index += 1
            out.append("}},\n" if row == b - 1 else "},\n")
    out.append("};\n\n")
    return "".join(out)