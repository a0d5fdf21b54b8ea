from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from chessgame.engine.board import Board
from chessgame.engine.game import Game
from chessgame.engine.move import Move
from chessgame.engine.piece import EMPTY
from chessgame.eval import evaluate


logger = logging.getLogger(__name__)

INF = 100_000_000
# Fixed score for being mated; not adjusted by distance to mate
MATE_SCORE = INF - 100

LogSink = Callable[[str], None]


def _log_to_logger(text: str) -> None:
    logger.info(text)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score_cp: Optional[int]  # root value of best_move, side-to-move relative
    legal_moves: int
    nodes: int
    depth: int
    time_ms: int


def order_moves(board: Board, moves: List[Move]) -> List[Move]:
    """Return ``moves`` with captures first; order is otherwise kept."""
    return sorted(moves, key=lambda m: 0 if board.squares[m.to_sq] != EMPTY else 1)


class SearchService:
    """Fixed-depth negamax with alpha-beta pruning.

    Progress lines go to ``log``, a ``(text) -> None`` callable. Without one,
    lines are sent to this module's logger. The sink never affects results.

    The board handed to ``get_best_move`` is mutated during the search and
    restored before it returns; callers that share a board should pass a copy.
    """

    def __init__(self, log: Optional[LogSink] = None) -> None:
        self.log: LogSink = log if log is not None else _log_to_logger
        self.nodes = 0

    def search(self, game: Game, depth: int) -> SearchResult:
        """Search a private copy of the game's position and report the outcome."""
        return self.search_position(game.board.copy(), depth)

    def search_position(self, board: Board, depth: int) -> SearchResult:
        """Search ``board`` and report the outcome; ``board`` is restored afterwards."""
        self.log(f"Search started at depth {depth}.")
        start = time.perf_counter()
        move, value, n_legal = self._search_root(board, depth)
        time_ms = int((time.perf_counter() - start) * 1000)
        self.log(f"Search finished in {time_ms} ms. Move: {move.to_uci() if move else 'none'}")
        return SearchResult(
            best_move=move,
            score_cp=value,
            legal_moves=n_legal,
            nodes=self.nodes,
            depth=depth,
            time_ms=time_ms,
        )

    def get_best_move(self, board: Board, depth: int) -> Optional[Move]:
        """Return the best move for the side to move, or None without legal moves.

        No move means checkmate or stalemate; callers tell them apart with
        ``board.in_check()``. Among equal scores the first move searched wins.
        """
        move, _, _ = self._search_root(board, depth)
        return move

    def _search_root(self, board: Board, depth: int) -> Tuple[Optional[Move], Optional[int], int]:
        if depth < 1:
            raise ValueError("depth must be >= 1")
        self.nodes = 0
        moves = board.generate_legal_moves()
        self.log(f"Found {len(moves)} legal moves.")

        best_move: Optional[Move] = None
        best_value = -INF
        alpha = -INF
        beta = INF
        for mv in order_moves(board, moves):
            board.make_move(mv)
            value = -self.negamax(board, depth - 1, -beta, -alpha)
            board.unmake_move(mv)

            if value > best_value:
                best_value = value
                best_move = mv
                self.log(f"New best move: {mv.to_uci()} val={value}")
            alpha = max(alpha, value)

        if best_move is None:
            return None, None, 0
        return best_move, best_value, len(moves)

    def negamax(self, board: Board, depth: int, alpha: int, beta: int) -> int:
        """Return the fail-hard alpha-beta value of ``board`` for the side to move."""
        self.nodes += 1
        if depth == 0:
            return evaluate(board)

        moves = board.generate_legal_moves()
        if not moves:
            if board.in_check():
                return -MATE_SCORE
            return 0

        for mv in moves:
            board.make_move(mv)
            value = -self.negamax(board, depth - 1, -beta, -alpha)
            board.unmake_move(mv)

            if value >= beta:
                return beta
            alpha = max(alpha, value)
        return alpha
