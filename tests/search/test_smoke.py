from __future__ import annotations

from chessgame.engine.board import Board
from chessgame.engine.game import Game
from chessgame.search.service import SearchService


def _is_same_move(a, b) -> bool:
    return a.from_sq == b.from_sq and a.to_sq == b.to_sq and a.promotion == b.promotion


def _quiet() -> SearchService:
    return SearchService(log=lambda _text: None)


def test_search_returns_legal_move_at_depth_3_startpos() -> None:
    board = Board.startpos()
    move = _quiet().get_best_move(board, 3)
    assert move is not None
    assert any(_is_same_move(move, m) for m in board.generate_legal_moves())


def test_search_restores_board() -> None:
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    board = Board.from_fen(fen)
    before = board.copy()
    move = _quiet().get_best_move(board, 2)
    assert move is not None
    assert board == before
    assert not move.is_made


def test_search_takes_hanging_queen() -> None:
    board = Board.from_fen("4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1")
    move = _quiet().get_best_move(board, 2)
    assert move is not None and move.to_uci() == "d2d5"


def test_search_finds_back_rank_mate() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    move = _quiet().get_best_move(board, 2)
    assert move is not None and move.to_uci() == "a1a8"


def test_search_result_reports_counts_and_keeps_game() -> None:
    game = Game.new()
    res = _quiet().search(game, 2)
    assert res.best_move is not None
    assert res.legal_moves == 20
    assert res.nodes > 20
    assert res.depth == 2
    assert res.time_ms >= 0
    assert game.move_stack == []
    assert game.to_fen() == Board.startpos().to_fen()
