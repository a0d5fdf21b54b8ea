"""Static evaluation: material plus pawn and knight piece-square tables.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Final

from chessgame.engine.board import Board
from chessgame.engine.piece import (
    BISHOP,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    is_white,
    kind_of,
)


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Final = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}

# Tables are laid out from white's side: index 0 is a8, index 63 is h1.
# fmt: off
PAWN_TABLE: Final = (
     0,  0,   0,   0,   0,   0,  0,  0,
    50, 50,  50,  50,  50,  50, 50, 50,
    10, 10,  20,  30,  30,  20, 10, 10,
     5,  5,  10,  25,  25,  10,  5,  5,
     0,  0,   0,  20,  20,   0,  0,  0,
     5, -5, -10,   0,   0, -10, -5,  5,
     5, 10,  10, -20, -20,  10, 10,  5,
     0,  0,   0,   0,   0,   0,  0,  0,
)

KNIGHT_TABLE: Final = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)
# fmt: on

PST: Final = {PAWN: PAWN_TABLE, KNIGHT: KNIGHT_TABLE}


def _mirror_sq(sq: int) -> int:
    # Flip vertically (rank mirror)
    return (7 - sq // 8) * 8 + sq % 8


def piece_square_value(piece: int, sq: int) -> int:
    table = PST.get(kind_of(piece))
    if table is None:
        return 0
    return table[sq] if is_white(piece) else table[_mirror_sq(sq)]


def evaluate_white(board: Board) -> int:
    """Return the material and positional balance, positive when white is better."""
    score = 0
    for sq, p in enumerate(board.squares):
        if p == EMPTY:
            continue
        value = PIECE_VALUES[kind_of(p)] + piece_square_value(p, sq)
        score += value if is_white(p) else -value
    return score


def evaluate(board: Board) -> int:
    """Return the score from the side to move's perspective (negamax convention).

    Args:
        board (Board): Position to score.

    Returns:
        int: Centipawn score; positive favours the side to move.
    """
    score = evaluate_white(board)
    return score if board.side_to_move == WHITE else -score
