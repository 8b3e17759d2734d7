"""Core constants and piece encoding helpers shared by the engine."""

FALSE, TRUE = 0, 1

MG, EG = 0, 1

WHITE, BLACK = 0, 1

PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = range(6)

MAX_PLY = 128
MAX_MOVES = 256

WHITE_PAWN, BLACK_PAWN = 0, 1
WHITE_KNIGHT, BLACK_KNIGHT = 4, 5
WHITE_BISHOP, BLACK_BISHOP = 8, 9
WHITE_ROOK, BLACK_ROOK = 12, 13
WHITE_QUEEN, BLACK_QUEEN = 16, 17
WHITE_KING, BLACK_KING = 20, 21
EMPTY = 26

MATE = 32000 + MAX_PLY
MATE_IN_MAX = MATE - MAX_PLY
TBWIN = 31000 + MAX_PLY
TBWIN_IN_MAX = TBWIN - MAX_PLY
VALUE_NONE = MATE + 1

SQUARE_NB = 64
COLOUR_NB = 2
RANK_NB = 8
FILE_NB = 8
PHASE_NB = 2
PIECE_NB = 6
CONT_NB = 2


def _check_piece(piece: int) -> None:
    if piece < 0 or piece // 4 > PIECE_NB or piece % 4 > COLOUR_NB:
        raise ValueError(f"invalid piece encoding: {piece}")


def piece_type(piece: int) -> int:
    """Return the type (PAWN .. KING, or PIECE_NB for EMPTY) of an encoded piece."""
    _check_piece(piece)
    return piece // 4


def piece_colour(piece: int) -> int:
    """Return the colour of an encoded piece."""
    _check_piece(piece)
    return piece % 4


def make_piece(type_: int, colour: int) -> int:
    """Encode a piece from its type and colour."""
    if not 0 <= type_ < PIECE_NB:
        raise ValueError(f"invalid piece type: {type_}")
    if not 0 <= colour <= COLOUR_NB:
        raise ValueError(f"invalid colour: {colour}")
    return type_ * 4 + colour