from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with make/unmake on ``board``, which is restored on
    return. Promotions count once per pawn move since only queens are generated.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = board.generate_legal_moves()
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        board.make_move(m)
        nodes += perft(board, depth - 1)
        board.unmake_move(m)
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) per root move, keyed by UCI text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in board.generate_legal_moves():
        board.make_move(m)
        out[m.to_uci()] = perft(board, depth - 1)
        board.unmake_move(m)
    return out
