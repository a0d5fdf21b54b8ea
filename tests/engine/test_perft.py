from __future__ import annotations

import pytest

from chessgame.engine.board import Board, STARTPOS_FEN
from chessgame.engine.perft import divide, perft


# Castling, en passant and pins in one position
KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
# Rook endgame with en passant discovered-check traps
ENDGAME = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"


def test_perft_startpos_depths_1_3() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert perft(b, 1) == 20
    assert perft(b, 2) == 400
    assert perft(b, 3) == 8902
    # Board left as found
    assert b.to_fen() == STARTPOS_FEN


@pytest.mark.parametrize(("depth", "expected"), [(1, 48), (2, 2039)])
def test_perft_kiwipete_shallow(depth: int, expected: int) -> None:
    b = Board.from_fen(KIWIPETE)
    assert perft(b, depth) == expected


@pytest.mark.parametrize(("depth", "expected"), [(1, 14), (2, 191), (3, 2812)])
def test_perft_endgame(depth: int, expected: int) -> None:
    b = Board.from_fen(ENDGAME)
    assert perft(b, depth) == expected


@pytest.mark.slow
def test_perft_kiwipete_depth3() -> None:
    b = Board.from_fen(KIWIPETE)
    assert perft(b, 3) == 97862


def test_perft_depth_zero_and_negative() -> None:
    b = Board.startpos()
    assert perft(b, 0) == 1
    with pytest.raises(ValueError):
        perft(b, -1)


def test_divide_sums_to_perft() -> None:
    b = Board.startpos()
    counts = divide(b, 2)
    assert len(counts) == 20
    assert all(n == 20 for n in counts.values())
    assert sum(counts.values()) == 400
