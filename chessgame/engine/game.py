from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .board import Board
from .move import Move


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: track board state, expose legal moves, apply moves, and
    keep a snapshot of every position reached.
    """

    board: Board
    move_stack: List[Move] = field(default_factory=list)
    positions: List[Board] = field(default_factory=list)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    def __post_init__(self) -> None:
        if not self.positions:
            self.positions.append(self.board.copy())

    def legal_moves(self) -> List[Move]:
        return self.board.generate_legal_moves()

    def apply_move(self, move: Move) -> Move:
        """Validate and make ``move``; returns the generated move that was made.

        A promotion letter on ``move`` selects the promotion piece.
        """
        legal = self.board.find_legal_move(move)
        if legal is None:
            raise ValueError("illegal move")
        self.board.make_move(legal)
        self.move_stack.append(legal)
        self.positions.append(self.board.copy())
        return legal

    def undo_move(self) -> None:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        last = self.move_stack.pop()
        self.board.unmake_move(last)
        self.positions.pop()

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.board.in_check()

    def checkmate(self) -> bool:
        return (not self.board.has_legal_moves()) and self.board.in_check()

    def stalemate(self) -> bool:
        return (not self.board.has_legal_moves()) and (not self.board.in_check())

    def status(self) -> str:
        if self.board.has_legal_moves():
            return "ongoing"
        return "checkmate" if self.board.in_check() else "stalemate"

    def last_move(self) -> Move | None:
        return self.move_stack[-1] if self.move_stack else None

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]
