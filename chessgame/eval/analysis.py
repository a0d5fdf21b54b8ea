"""Post-game review: a white-relative score per position and flagged moves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, List, Optional

from chessgame.engine.game import Game
from chessgame.engine.piece import WHITE
from chessgame.eval import evaluate_white


# Score beyond which one side is treated as winning outright
WINNING: Final = 9000
# Score beyond which one side is treated as better
ADVANTAGE: Final = 200
# Swing against the mover that flags a move
INACCURACY_SWING: Final = 200
MISTAKE_SWING: Final = 500


@dataclass
class PositionReview:
    ply: int
    eval_white: int
    verdict: str
    move: Optional[str] = None  # move that led here, UCI
    mover: Optional[str] = None  # side that played it
    flag: Optional[str] = None  # "inaccuracy" or "mistake"


def verdict_for(score_white: int) -> str:
    if score_white > WINNING:
        return "white winning"
    if score_white < -WINNING:
        return "black winning"
    if score_white > ADVANTAGE:
        return "white better"
    if score_white < -ADVANTAGE:
        return "black better"
    return "equal"


def flag_for(swing: int) -> Optional[str]:
    """Classify a score change measured from the mover's side (negative is worse)."""
    if swing < -MISTAKE_SWING:
        return "mistake"
    if swing < -INACCURACY_SWING:
        return "inaccuracy"
    return None


def analyze_game(game: Game) -> List[PositionReview]:
    """Score every position the game passed through, starting position first.

    A move is flagged when the static score moves against the side that played
    it by more than ``INACCURACY_SWING`` (inaccuracy) or ``MISTAKE_SWING``
    (mistake) centipawns.
    """
    reviews: List[PositionReview] = []
    prev_score: Optional[int] = None
    for ply, board in enumerate(game.positions):
        score = evaluate_white(board)
        review = PositionReview(ply=ply, eval_white=score, verdict=verdict_for(score))
        if prev_score is not None:
            mover = game.positions[ply - 1].side_to_move
            swing = score - prev_score
            review.move = game.move_stack[ply - 1].to_uci()
            review.mover = mover
            review.flag = flag_for(swing if mover == WHITE else -swing)
        reviews.append(review)
        prev_score = score
    return reviews
