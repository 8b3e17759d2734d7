import math

import pytest

from lodestar.tuner import (
    GradientData,
    Method,
    TEntry,
    TTuple,
    adagrad_step,
    build_tuples,
    compute_gradient,
    compute_optimal_k,
    format_term_0,
    format_term_1,
    format_term_2,
    format_term_3,
    linear_evaluation,
    parse_result,
    sigmoid,
    static_evaluation_errors,
    tuned_evaluation_errors,
    update_single_gradient,
)
from lodestar.types import BLACK, WHITE


def _entry(result, seval=0, phase=12, turn=WHITE, tuples=(), eval_=(0, 0)):
    return TEntry(
        result=result, seval=seval, phase=phase, turn=turn, eval=eval_, tuples=list(tuples)
    )


def test_sigmoid_midpoint_and_symmetry():
    assert sigmoid(1.3, 0) == 0.5
    assert sigmoid(1.3, 250) + sigmoid(1.3, -250) == pytest.approx(1.0)
    assert sigmoid(1.0, 400) > sigmoid(1.0, 100)


@pytest.mark.parametrize(
    "line, expected",
    [("fen w - - [1.0] 12", 1.0), ("fen b - - [0.0]", 0.0), ("fen [0.5]", 0.5)],
)
def test_parse_result(line, expected):
    assert parse_result(line) == expected


def test_parse_result_rejects_unknown():
    with pytest.raises(ValueError):
        parse_result("fen w - - [draw]")


def test_build_tuples_filters_by_method():
    coeffs = [(1, 1), (2, 0), (1, 1), (0, 0), (0, 3)]
    methods = [Method.NORMAL, Method.NORMAL, Method.SAFETY, Method.SAFETY, Method.COMPLEXITY]
    tuples = build_tuples(coeffs, methods)
    assert tuples == [TTuple(1, 2, 0), TTuple(2, 1, 1), TTuple(4, 0, 3)]


def test_linear_evaluation_without_terms_returns_eval():
    entry = _entry(0.5, phase=24, eval_=(100, 100))
    value, data = linear_evaluation(entry, [], [], 0)
    assert value == pytest.approx(100.0)
    assert isinstance(data, GradientData) and data.egeval == pytest.approx(100.0)


def test_linear_evaluation_tempo_sign_follows_turn():
    white = _entry(0.5, turn=WHITE, eval_=(40, 20))
    black = _entry(0.5, turn=BLACK, eval_=(40, 20))
    vw, _ = linear_evaluation(white, [], [], 7)
    vb, _ = linear_evaluation(black, [], [], 7)
    assert vw - vb == pytest.approx(14)


def test_linear_evaluation_normal_term_is_linear():
    entry = _entry(0.5, phase=24, tuples=[TTuple(0, 2, 0)])
    methods = [Method.NORMAL]
    v0, _ = linear_evaluation(entry, [[0.0, 0.0]], methods, 0)
    v1, _ = linear_evaluation(entry, [[5.0, 0.0]], methods, 0)
    assert v1 - v0 == pytest.approx(10.0)


def test_gradient_step_reduces_error():
    entries = [
        _entry(1.0, tuples=[TTuple(0, 1, 0)]),
        _entry(0.0, tuples=[TTuple(0, 0, 1)]),
    ]
    methods = [Method.NORMAL]
    params = [[0.0, 0.0]]
    adagrad = [[0.0, 0.0]]
    before = tuned_evaluation_errors(entries, params, methods, 1.0, 0)
    for _ in range(20):
        gradient = compute_gradient(entries, params, methods, 1.0, 0, 2, 0)
        adagrad_step(params, adagrad, gradient, 1.0, 1.0, 2)
    after = tuned_evaluation_errors(entries, params, methods, 1.0, 0)
    assert params[0][0] > 0
    assert after < before


def test_compute_gradient_uses_only_its_batch():
    entries = [_entry(1.0, tuples=[TTuple(0, 1, 0)]), _entry(0.0, tuples=[TTuple(0, 1, 0)])]
    methods = [Method.NORMAL]
    params = [[0.0, 0.0]]
    first = compute_gradient(entries, params, methods, 1.0, 0, 1, 0)
    second = compute_gradient(entries, params, methods, 1.0, 1, 1, 0)
    single = [[0.0, 0.0]]
    update_single_gradient(entries[1], single, params, methods, 1.0, 0)
    assert second == single
    assert first[0][0] > 0 > second[0][0]


def test_static_errors_zero_for_perfect_prediction():
    entries = [_entry(0.5, seval=0), _entry(0.5, seval=0)]
    assert static_evaluation_errors(entries, 2.0) == 0.0


def test_errors_reject_empty_set():
    with pytest.raises(ValueError):
        static_evaluation_errors([], 1.0)


def test_format_term_0():
    params = [[100.0, 200.0]]
    assert format_term_0("PawnValue", params, 0, "  ") == "const int PawnValue   = S( 100, 200);\n"


def test_format_term_1_short():
    params = [[1.0, 2.0], [3.0, 4.0]]
    text = format_term_1("RookFile", params, 0, 2, "[2]")
    assert text == "const int RookFile[2] = { S(   1,   2), S(   3,   4) };\n\n"


def test_format_term_1_long_wraps_every_four():
    params = [[float(i), float(-i)] for i in range(5)]
    text = format_term_1("X", params, 0, 5, "[5]")
    assert text.startswith("const int X[5] = { \n    S(   0,   0), ")
    assert text.endswith("\n};\n\n")
    assert text.count("\n    ") == 2
    assert text.count("S(") == 5


def test_format_term_2_and_3_structure():
    params = [[float(i), 0.0] for i in range(8)]
    two = format_term_2("T", params, 0, 2, 2, "[2][2]")
    assert two == (
        "const int T[2][2] = {\n"
        "   {S(   0,   0), S(   1,   0)},\n"
        "   {S(   2,   0), S(   3,   0)},\n"
        "};\n\n"
    )
    three = format_term_3("U", params, 0, 2, 2, 2, "[2][2][2]")
    assert three.count("  {{") == 2
    assert three.count("}},\n") == 2
    assert "S(   7,   0)" in three
    assert three.endswith("};\n\n")