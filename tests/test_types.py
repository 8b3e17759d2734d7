import pytest

from lodestar.types import (
    BLACK,
    BLACK_KING,
    BLACK_KNIGHT,
    BLACK_QUEEN,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    PIECE_NB,
    QUEEN,
    WHITE,
    WHITE_PAWN,
    WHITE_ROOK,
    ROOK,
    make_piece,
    piece_colour,
    piece_type,
)


@pytest.mark.parametrize("type_", range(PAWN, KING + 1))
@pytest.mark.parametrize("colour", [WHITE, BLACK])
def test_make_piece_round_trip(type_, colour):
    piece = make_piece(type_, colour)
    assert piece_type(piece) == type_
    assert piece_colour(piece) == colour


def test_make_piece_matches_named_constants():
    assert make_piece(PAWN, WHITE) == WHITE_PAWN
    assert make_piece(ROOK, WHITE) == WHITE_ROOK
    assert make_piece(KNIGHT, BLACK) == BLACK_KNIGHT
    assert make_piece(QUEEN, BLACK) == BLACK_QUEEN
    assert make_piece(KING, BLACK) == BLACK_KING


def test_empty_square_has_sentinel_type():
    assert piece_type(EMPTY) == PIECE_NB


@pytest.mark.parametrize("type_, colour", [(-1, WHITE), (PIECE_NB, WHITE), (PAWN, -1), (PAWN, 3)])
def test_make_piece_rejects_invalid(type_, colour):
    with pytest.raises(ValueError):
        make_piece(type_, colour)


@pytest.mark.parametrize("piece", [-1, 4 * (PIECE_NB + 1), 3])
def test_piece_helpers_reject_invalid(piece):
    with pytest.raises(ValueError):
        piece_type(piece)
    with pytest.raises(ValueError):
        piece_colour(piece)