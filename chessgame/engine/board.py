from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from . import movegen
from .move import Move, MoveProtocolError, UndoInfo, square_to_str, str_to_square
from .piece import (
    BISHOP,
    BLACK,
    CHAR_TO_PIECE,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    PIECE_TO_CHAR,
    PROMOTION_KINDS,
    QUEEN,
    ROOK,
    WHITE,
    color_of,
    kind_of,
    make_piece,
    opposite,
)
from .squares import (
    ALL_STEPS,
    CASTLE_ROOK_SQUARES,
    KNIGHT_OFFSETS,
    ROOK_HOME_RIGHTS,
    knight_jump_valid,
    on_board,
    slide_valid,
)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_DIAGONAL = frozenset((-9, -7, 7, 9))


@dataclass
class Board:
    """Mailbox board state with make/unmake and FEN I/O.

    Notes:
    - Squares are 0..63 row-major, a8=0 .. h1=63 (row 0 is black's back rank).
    - ``castling`` holds the subset of ``"KQkq"`` rights still available.
    - ``ep_file`` is the file of a pawn that just advanced two squares.
    """

    squares: List[int]
    side_to_move: str  # 'w' or 'b'
    castling: str = ""
    ep_file: Optional[int] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    # UI highlighting only; search never reads these
    last_move_from: Optional[int] = None
    last_move_to: Optional[int] = None
    # moves currently made on this board, most recent last
    _history: List[Move] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board instance initialized with state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        # FEN lists rank 8 first, which is row 0 here
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        squares = [EMPTY] * 64
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    squares[row * 8 + col] = CHAR_TO_PIECE[ch]
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in (WHITE, BLACK):
            raise ValueError("side to move must be 'w' or 'b'")

        if castling != "-":
            for ch in castling:
                if ch not in "KQkq":
                    raise ValueError("invalid castling rights")
            castling = "".join(c for c in "KQkq" if c in castling)
        else:
            castling = ""

        ep_file: Optional[int]
        if ep == "-":
            ep_file = None
        else:
            try:
                ep_sq = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # Target must sit on rank 6 (row 2) or rank 3 (row 5)
            if ep_sq // 8 not in (2, 5):
                raise ValueError("invalid en passant square rank")
            ep_file = ep_sq % 8

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            squares=squares,
            side_to_move=stm,
            castling=castling,
            ep_file=ep_file,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        rows: List[str] = []
        for row in range(8):
            run = 0
            out = []
            for col in range(8):
                p = self.squares[row * 8 + col]
                if p == EMPTY:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(PIECE_TO_CHAR[p])
            if run > 0:
                out.append(str(run))
            rows.append("".join(out))
        placement = "/".join(rows)

        castling = self.castling if self.castling else "-"
        ep = "-"
        if self.ep_file is not None:
            # White to move captures onto row 2, black onto row 5
            ep_row = 2 if self.side_to_move == WHITE else 5
            ep = square_to_str(ep_row * 8 + self.ep_file)
        return (
            f"{placement} {self.side_to_move} {castling} {ep} "
            f"{self.halfmove_clock} {self.fullmove_number}"
        )

    def copy(self) -> "Board":
        """Return an independent snapshot; made-move history is not carried over."""
        return Board(
            squares=list(self.squares),
            side_to_move=self.side_to_move,
            castling=self.castling,
            ep_file=self.ep_file,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            last_move_from=self.last_move_from,
            last_move_to=self.last_move_to,
        )

    def king_square(self, side: str) -> Optional[int]:
        king = make_piece(side, KING)
        for sq, p in enumerate(self.squares):
            if p == king:
                return sq
        return None

    # --- Move generation ---
    def generate_pseudo_legal_moves(self) -> List[Move]:
        return movegen.generate_pseudo_legal_moves(self)

    def generate_legal_moves(self) -> List[Move]:
        return movegen.generate_legal_moves(self)

    def has_legal_moves(self) -> bool:
        """Return True if the side to move has at least one legal move."""
        return bool(self.generate_legal_moves())

    def apply(self, move: Move) -> "Board":
        """Return a new Board with `move` applied if legal.

        This board is left unchanged. The move is matched against the
        generated legal moves by squares and promotion, so castle and en
        passant flags need not be set by the caller.
        """
        match = self.find_legal_move(move)
        if match is None:
            raise ValueError("illegal move")
        new_board = self.copy()
        new_board.make_move(match)
        return new_board

    def find_legal_move(self, move: Move) -> Optional[Move]:
        """Return the generated legal move matching ``move``, or None.

        Back-rank pawn moves are generated as queen promotions; a requested
        under-promotion is written onto the matching generated move.
        """
        for m in self.generate_legal_moves():
            if not m.same_squares(move):
                continue
            if m.promotion is None:
                return m if move.promotion is None else None
            if move.promotion is None:
                return None
            m.promotion = move.promotion
            return m
        return None

    # --- State transitions ---
    def make_move(self, move: Move) -> None:
        """Apply `move` to this board in-place, storing the undo snapshot on the move.

        Supports normal moves, captures, promotions, en passant, and castling.

        Raises:
            MoveProtocolError: If the move is already made, the origin square
                does not hold a piece of the side to move, or the promotion,
                castle, or en passant fields do not fit the moving piece. The
                board is untouched when this is raised.
        """
        if move.undo is not None:
            raise MoveProtocolError(f"move {move.to_uci()} is already made")
        from_sq, to_sq = move.from_sq, move.to_sq
        moving = self.squares[from_sq]
        if moving == EMPTY or color_of(moving) != self.side_to_move:
            raise MoveProtocolError(f"no piece of the side to move on {square_to_str(from_sq)}")
        is_white = self.side_to_move == WHITE
        kind = kind_of(moving)

        if move.promotion is not None:
            if move.promotion not in PROMOTION_KINDS or kind != PAWN:
                raise MoveProtocolError(f"move {move.to_uci()} cannot promote")
        if move.is_castle:
            if kind != KING or to_sq not in CASTLE_ROOK_SQUARES:
                raise MoveProtocolError(f"move {move.to_uci()} is not a castle")

        captured = self.squares[to_sq]
        ep_capture_sq: Optional[int] = None
        if move.is_en_passant:
            # Captured pawn sits beside the origin, one row behind the target
            ep_capture_sq = to_sq + 8 if is_white else to_sq - 8
            if (
                kind != PAWN
                or not on_board(ep_capture_sq)
                or self.squares[ep_capture_sq] != make_piece(opposite(self.side_to_move), PAWN)
            ):
                raise MoveProtocolError(f"move {move.to_uci()} is not an en passant capture")
            captured = self.squares[ep_capture_sq]

        move.undo = UndoInfo(
            captured=captured,
            side_to_move=self.side_to_move,
            ep_file=self.ep_file,
            castling=self.castling,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            last_move_from=self.last_move_from,
            last_move_to=self.last_move_to,
        )
        self._history.append(move)

        self.squares[from_sq] = EMPTY
        if move.promotion:
            self.squares[to_sq] = make_piece(self.side_to_move, PROMOTION_KINDS[move.promotion])
        else:
            self.squares[to_sq] = moving
        if ep_capture_sq is not None:
            self.squares[ep_capture_sq] = EMPTY

        if move.is_castle:
            rook_from, rook_to = CASTLE_ROOK_SQUARES[to_sq]
            self.squares[rook_to] = self.squares[rook_from]
            self.squares[rook_from] = EMPTY

        self.ep_file = None
        if kind == PAWN and abs(from_sq - to_sq) == 16:
            self.ep_file = from_sq % 8

        self._update_castling_rights(kind, from_sq, to_sq)

        if kind == PAWN or captured != EMPTY:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if not is_white:
            self.fullmove_number += 1

        self.side_to_move = opposite(self.side_to_move)
        self.last_move_from = from_sq
        self.last_move_to = to_sq

    def unmake_move(self, move: Move) -> None:
        """Undo `move`, which must be the most recent move made on this board.

        Raises:
            MoveProtocolError: If the move was never made, or another move was
                made on this board after it.
        """
        undo = move.undo
        if undo is None:
            raise MoveProtocolError(f"move {move.to_uci()} was not made")
        if not self._history or self._history[-1] is not move:
            raise MoveProtocolError(f"move {move.to_uci()} is not the last move made")
        self._history.pop()

        from_sq, to_sq = move.from_sq, move.to_sq

        self.side_to_move = undo.side_to_move
        self.ep_file = undo.ep_file
        self.castling = undo.castling
        self.halfmove_clock = undo.halfmove_clock
        self.fullmove_number = undo.fullmove_number
        self.last_move_from = undo.last_move_from
        self.last_move_to = undo.last_move_to

        moved = self.squares[to_sq]
        if move.promotion:
            moved = make_piece(self.side_to_move, PAWN)
        self.squares[from_sq] = moved

        if move.is_en_passant:
            self.squares[to_sq] = EMPTY
            cap_sq = to_sq + 8 if self.side_to_move == WHITE else to_sq - 8
            self.squares[cap_sq] = undo.captured
        else:
            self.squares[to_sq] = undo.captured

        if move.is_castle:
            rook_from, rook_to = CASTLE_ROOK_SQUARES[to_sq]
            self.squares[rook_from] = self.squares[rook_to]
            self.squares[rook_to] = EMPTY

        move.undo = None

    def _update_castling_rights(self, kind: int, from_sq: int, to_sq: int) -> None:
        """Drop rights when a king or rook leaves home or a rook home square is hit."""
        if not self.castling:
            return
        rights = set(self.castling)
        if kind == KING:
            rights -= {"K", "Q"} if self.side_to_move == WHITE else {"k", "q"}
        elif kind == ROOK and from_sq in ROOK_HOME_RIGHTS:
            rights.discard(ROOK_HOME_RIGHTS[from_sq])
        # Anything landing on a rook home square captures that rook
        if to_sq in ROOK_HOME_RIGHTS:
            rights.discard(ROOK_HOME_RIGHTS[to_sq])
        self.castling = "".join(c for c in "KQkq" if c in rights)

    # --- Attack detection ---
    def is_square_attacked(self, sq: int, by_side: str) -> bool:
        """Return True if square `sq` is attacked by pieces of `by_side`.

        Covers pawns, knights, and the eight rays for bishops, rooks, and
        queens, with the king counted at distance one.
        """
        squares = self.squares
        col = sq % 8
        by_white = by_side == WHITE

        if by_white:
            # White pawns attack toward row 0
            if sq + 7 < 64 and col != 0 and squares[sq + 7] == make_piece(WHITE, PAWN):
                return True
            if sq + 9 < 64 and col != 7 and squares[sq + 9] == make_piece(WHITE, PAWN):
                return True
        else:
            if sq - 7 >= 0 and col != 7 and squares[sq - 7] == make_piece(BLACK, PAWN):
                return True
            if sq - 9 >= 0 and col != 0 and squares[sq - 9] == make_piece(BLACK, PAWN):
                return True

        knight = make_piece(by_side, KNIGHT)
        for off in KNIGHT_OFFSETS:
            target = sq + off
            if on_board(target) and knight_jump_valid(sq, target) and squares[target] == knight:
                return True

        for step in ALL_STEPS:
            diagonal = step in _DIAGONAL
            for dist in range(1, 8):
                target = sq + step * dist
                if not on_board(target) or not slide_valid(sq, target, step):
                    break
                p = squares[target]
                if p == EMPTY:
                    continue
                if color_of(p) == by_side:
                    kind = kind_of(p)
                    if kind == QUEEN:
                        return True
                    if diagonal and kind == BISHOP:
                        return True
                    if not diagonal and kind == ROOK:
                        return True
                    if dist == 1 and kind == KING:
                        return True
                break
        return False

    def in_check(self, side: Optional[str] = None) -> bool:
        """Return True if `side` (default: current side to move) is in check.

        A board without that side's king counts as in check.
        """
        s = self.side_to_move if side is None else side
        if s not in (WHITE, BLACK):
            raise ValueError("side must be 'w' or 'b'")
        ksq = self.king_square(s)
        if ksq is None:
            return True
        return self.is_square_attacked(ksq, opposite(s))
