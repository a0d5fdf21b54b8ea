from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


PROMOTION_PIECES = {"q", "r", "b", "n"}


class MoveProtocolError(RuntimeError):
    """Raised when make/unmake are called out of order for a Move."""


@dataclass(frozen=True)
class UndoInfo:
    """State snapshot taken by ``Board.make_move`` and consumed by ``unmake_move``."""

    captured: int
    side_to_move: str
    ep_file: Optional[int]
    castling: str
    halfmove_clock: int
    fullmove_number: int
    last_move_from: Optional[int]
    last_move_to: Optional[int]


@dataclass
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (int): Origin square index (0 = a8 .. 63 = h1).
        to_sq (int): Destination square index.
        promotion (Optional[str]): Lowercase promotion piece, if any.
        is_castle (bool): King move of two files that also relocates a rook.
        is_en_passant (bool): Pawn capture of a pawn beside the origin square.

    A Move is made at most once before it is unmade. The undo snapshot lives on
    the Move itself between the two calls.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[str] = None
    is_castle: bool = False
    is_en_passant: bool = False
    undo: Optional[UndoInfo] = field(default=None, repr=False, compare=False)

    @property
    def is_made(self) -> bool:
        return self.undo is not None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + (self.promotion or "")

    def same_squares(self, other: "Move") -> bool:
        return self.from_sq == other.from_sq and self.to_sq == other.to_sq


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Only squares and the promotion letter are read; castle and en-passant flags
    are filled in by matching against generated moves.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Row 0 holds rank 8, so ``"a8"`` is 0 and ``"h1"`` is 63.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return row * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    row = idx // 8
    return chr(ord("a") + file) + str(8 - row)
