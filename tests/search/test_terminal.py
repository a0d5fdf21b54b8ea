from __future__ import annotations

import pytest

from chessgame.engine.board import Board
from chessgame.engine.game import Game
from chessgame.engine.move import parse_uci
from chessgame.eval import evaluate
from chessgame.search.service import MATE_SCORE, SearchService


def _quiet() -> SearchService:
    return SearchService(log=lambda _text: None)


def test_stalemate_root_returns_no_move() -> None:
    # Black to move is stalemated (not in check, no legal moves)
    board = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert _quiet().get_best_move(board, 2) is None
    assert board.in_check() is False


def test_checkmate_root_returns_no_move() -> None:
    board = Board.from_fen("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    assert _quiet().get_best_move(board, 2) is None
    assert board.in_check() is True


def test_fools_mate_root_returns_no_move() -> None:
    game = Game.new()
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        game.apply_move(parse_uci(uci))
    res = _quiet().search(game, 3)
    assert res.best_move is None
    assert res.score_cp is None
    assert res.legal_moves == 0
    assert game.board.in_check(game.board.side_to_move)


def test_negamax_terminal_scores() -> None:
    service = _quiet()
    mated = Board.from_fen("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    stalemated = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert service.negamax(mated, 1, -MATE_SCORE - 1, MATE_SCORE + 1) == -MATE_SCORE
    assert service.negamax(stalemated, 3, -MATE_SCORE - 1, MATE_SCORE + 1) == 0


def test_negamax_depth_zero_is_static_eval() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 b - - 0 1")
    assert _quiet().negamax(board, 0, -10_000, 10_000) == evaluate(board) == -500


def test_mate_score_does_not_depend_on_distance() -> None:
    # Mate in one found at depth 2 and at depth 3 carries the same value
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    game = Game(board=board)
    shallow = _quiet().search(game, 2)
    deeper = _quiet().search(game, 3)
    assert shallow.score_cp == deeper.score_cp == MATE_SCORE


def test_depth_must_be_positive() -> None:
    with pytest.raises(ValueError):
        _quiet().get_best_move(Board.startpos(), 0)
