"""Square geometry on the 0..63 mailbox (row 0 = rank 8, row 7 = rank 1)."""

from __future__ import annotations

from typing import Final


KNIGHT_OFFSETS: Final = (-17, -15, -10, -6, 6, 10, 15, 17)
DIAGONAL_STEPS: Final = (-9, -7, 7, 9)
ORTHOGONAL_STEPS: Final = (-8, -1, 1, 8)
ALL_STEPS: Final = (-9, -8, -7, -1, 1, 7, 8, 9)

# King destination -> (rook origin, rook destination)
CASTLE_ROOK_SQUARES: Final = {
    62: (63, 61),  # white king side
    58: (56, 59),  # white queen side
    6: (7, 5),  # black king side
    2: (0, 3),  # black queen side
}

# Rook home square -> castling right it backs
ROOK_HOME_RIGHTS: Final = {63: "K", 56: "Q", 7: "k", 0: "q"}

WHITE_KING_HOME: Final = 60
BLACK_KING_HOME: Final = 4


def on_board(sq: int) -> bool:
    return 0 <= sq < 64


def slide_valid(from_sq: int, to_sq: int, step: int) -> bool:
    """Return True if ``to_sq`` lies on the ray from ``from_sq`` along ``step``.

    Catches file wrap: a vertical step keeps the column, a horizontal step keeps
    the row, and a diagonal step moves as many rows as columns.
    """
    f_row, f_col = divmod(from_sq, 8)
    t_row, t_col = divmod(to_sq, 8)
    if abs(step) == 8:
        return f_col == t_col
    if abs(step) == 1:
        return f_row == t_row
    return abs(f_row - t_row) == abs(f_col - t_col)


def knight_jump_valid(from_sq: int, to_sq: int) -> bool:
    return abs(from_sq % 8 - to_sq % 8) <= 2
