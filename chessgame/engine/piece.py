from __future__ import annotations

from typing import Final


WHITE: Final = "w"
BLACK: Final = "b"

# Piece kinds occupy the low three bits; bit 3 marks a black piece.
EMPTY: Final = 0
PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = range(1, 7)
BLACK_BIT: Final = 8
KIND_MASK: Final = 7

WP, WN, WB, WR, WQ, WK = PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING
BP, BN, BB, BR, BQ, BK = (k | BLACK_BIT for k in (PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING))

PIECE_TO_CHAR = {
    WP: "P",
    WN: "N",
    WB: "B",
    WR: "R",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BN: "n",
    BB: "b",
    BR: "r",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}

# Lowercase promotion letters to piece kinds
PROMOTION_KINDS = {"q": QUEEN, "r": ROOK, "b": BISHOP, "n": KNIGHT}


def make_piece(color: str, kind: int) -> int:
    return kind | BLACK_BIT if color == BLACK else kind


def kind_of(piece: int) -> int:
    return piece & KIND_MASK


def is_white(piece: int) -> bool:
    return piece != EMPTY and not piece & BLACK_BIT


def color_of(piece: int) -> str | None:
    """Return ``"w"``/``"b"`` for an occupied square value, ``None`` for empty."""
    if piece == EMPTY:
        return None
    return BLACK if piece & BLACK_BIT else WHITE


def opposite(color: str) -> str:
    return BLACK if color == WHITE else WHITE
