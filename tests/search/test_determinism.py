from __future__ import annotations

from chessgame.engine.board import Board
from chessgame.engine.piece import EMPTY
from chessgame.search.service import SearchService, order_moves


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def _quiet() -> SearchService:
    return SearchService(log=lambda _text: None)


def test_repeated_searches_pick_same_move() -> None:
    picks = {_quiet().get_best_move(Board.from_fen(KIWIPETE), 2).to_uci() for _ in range(3)}
    assert len(picks) == 1


def test_same_service_is_reusable() -> None:
    service = _quiet()
    board = Board.startpos()
    first = service.get_best_move(board, 2)
    second = service.get_best_move(board, 2)
    assert first is not None and second is not None
    assert first.to_uci() == second.to_uci()


def test_order_moves_puts_captures_first_and_is_stable() -> None:
    board = Board.from_fen(KIWIPETE)
    moves = board.generate_legal_moves()
    ordered = order_moves(board, moves)
    flags = [board.squares[m.to_sq] != EMPTY for m in ordered]
    n_caps = sum(flags)
    assert n_caps > 0
    assert all(flags[:n_caps]) and not any(flags[n_caps:])
    captures = [m for m in moves if board.squares[m.to_sq] != EMPTY]
    quiets = [m for m in moves if board.squares[m.to_sq] == EMPTY]
    assert ordered == captures + quiets
