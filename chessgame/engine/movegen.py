"""Pseudo-legal and legal move generation for a mailbox Board.

Pure with respect to the board: legal filtering makes and unmakes each
candidate, leaving the position as it found it.
"""

from __future__ import annotations

from typing import List, TYPE_CHECKING

from .move import Move
from .piece import (
    BISHOP,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    ROOK,
    WHITE,
    color_of,
    kind_of,
    make_piece,
    opposite,
)
from .squares import (
    ALL_STEPS,
    BLACK_KING_HOME,
    DIAGONAL_STEPS,
    KNIGHT_OFFSETS,
    ORTHOGONAL_STEPS,
    WHITE_KING_HOME,
    knight_jump_valid,
    on_board,
    slide_valid,
)

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


def generate_pseudo_legal_moves(board: "Board") -> List[Move]:
    """Return moves that follow piece movement rules for the side to move.

    Moves may still leave the mover's king in check. Back-rank pawn moves are
    tagged as queen promotions; under-promotions are not enumerated.
    """
    moves: List[Move] = []
    stm = board.side_to_move
    for sq, p in enumerate(board.squares):
        if p == EMPTY or color_of(p) != stm:
            continue
        kind = kind_of(p)
        if kind == PAWN:
            _pawn_moves(board, sq, moves)
        elif kind == KNIGHT:
            _knight_moves(board, sq, moves)
        elif kind == KING:
            _king_moves(board, sq, moves)
        elif kind == ROOK:
            _slider_moves(board, sq, ORTHOGONAL_STEPS, moves)
        elif kind == BISHOP:
            _slider_moves(board, sq, DIAGONAL_STEPS, moves)
        else:
            _slider_moves(board, sq, ALL_STEPS, moves)
    return moves


def generate_legal_moves(board: "Board") -> List[Move]:
    """Return pseudo-legal moves that do not leave the mover's king in check.

    Each candidate is made, tested, and unmade on ``board`` itself.
    """
    mover = board.side_to_move
    legal: List[Move] = []
    for mv in generate_pseudo_legal_moves(board):
        board.make_move(mv)
        if not board.in_check(mover):
            legal.append(mv)
        board.unmake_move(mv)
    return legal


def _pawn_moves(board: "Board", sq: int, moves: List[Move]) -> None:
    squares = board.squares
    white = board.side_to_move == WHITE
    step = -8 if white else 8
    start_row = 6 if white else 1
    promo_row = 0 if white else 7
    ep_row = 2 if white else 5
    row, col = divmod(sq, 8)

    forward = sq + step
    if on_board(forward) and squares[forward] == EMPTY:
        moves.append(Move(sq, forward, "q" if forward // 8 == promo_row else None))
        forward2 = forward + step
        if row == start_row and squares[forward2] == EMPTY:
            moves.append(Move(sq, forward2))

    for cap in (step - 1, step + 1):
        target = sq + cap
        if not on_board(target) or abs(target % 8 - col) != 1:
            continue
        victim = squares[target]
        if victim != EMPTY:
            if color_of(victim) != board.side_to_move:
                moves.append(Move(sq, target, "q" if target // 8 == promo_row else None))
        elif (
            board.ep_file is not None
            and target // 8 == ep_row
            and target % 8 == board.ep_file
            and squares[target - step] == make_piece(opposite(board.side_to_move), PAWN)
        ):
            moves.append(Move(sq, target, is_en_passant=True))


def _knight_moves(board: "Board", sq: int, moves: List[Move]) -> None:
    for off in KNIGHT_OFFSETS:
        target = sq + off
        if on_board(target) and knight_jump_valid(sq, target):
            if color_of(board.squares[target]) != board.side_to_move:
                moves.append(Move(sq, target))


def _slider_moves(board: "Board", sq: int, steps: tuple[int, ...], moves: List[Move]) -> None:
    stm = board.side_to_move
    for step in steps:
        for dist in range(1, 8):
            target = sq + step * dist
            if not on_board(target) or not slide_valid(sq, target, step):
                break
            p = board.squares[target]
            if p == EMPTY:
                moves.append(Move(sq, target))
                continue
            if color_of(p) != stm:
                moves.append(Move(sq, target))
            break


def _king_moves(board: "Board", sq: int, moves: List[Move]) -> None:
    stm = board.side_to_move
    for step in ALL_STEPS:
        target = sq + step
        if on_board(target) and slide_valid(sq, target, step):
            if color_of(board.squares[target]) != stm:
                moves.append(Move(sq, target))

    home = WHITE_KING_HOME if stm == WHITE else BLACK_KING_HOME
    if sq != home or not board.castling:
        return
    enemy = opposite(stm)
    if board.is_square_attacked(sq, enemy):
        return
    rook = make_piece(stm, ROOK)
    squares = board.squares
    king_side, queen_side = ("K", "Q") if stm == WHITE else ("k", "q")

    # King side: f and g files empty and safe, rook on h
    if (
        king_side in board.castling
        and squares[sq + 3] == rook
        and squares[sq + 1] == EMPTY
        and squares[sq + 2] == EMPTY
        and not board.is_square_attacked(sq + 1, enemy)
        and not board.is_square_attacked(sq + 2, enemy)
    ):
        moves.append(Move(sq, sq + 2, is_castle=True))
    # Queen side: b, c, d files empty; only c and d must be safe
    if (
        queen_side in board.castling
        and squares[sq - 4] == rook
        and squares[sq - 1] == EMPTY
        and squares[sq - 2] == EMPTY
        and squares[sq - 3] == EMPTY
        and not board.is_square_attacked(sq - 1, enemy)
        and not board.is_square_attacked(sq - 2, enemy)
    ):
        moves.append(Move(sq, sq - 2, is_castle=True))
