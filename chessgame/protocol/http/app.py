from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, Session
from ...engine.board import STARTPOS_FEN, Board
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.perft import perft as perft_nodes
from ...eval import evaluate_white
from ...eval.analysis import analyze_game
from ...search.service import SearchResult, SearchService


logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 2
MAX_DEPTH = 6
MAX_PERFT_DEPTH = 4


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4 or e7e8n")


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=MAX_DEPTH)


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    status: str
    eval_white: int
    last_move: Optional[str]
    move_history: List[str]


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: Optional[int]
    legal_moves: int
    nodes: int
    depth: int
    time_ms: int


class BotMoveResponse(BaseModel):
    move: Optional[str]
    search: SearchResponse
    state: GameState


class LogResponse(BaseModel):
    game_id: str
    lines: List[str]


class PositionReviewModel(BaseModel):
    ply: int
    eval_white: int
    verdict: str
    move: Optional[str]
    mover: Optional[str]
    flag: Optional[str]


class AnalysisResponse(BaseModel):
    game_id: str
    positions: List[PositionReviewModel]


def create_app(default_depth: int = DEFAULT_DEPTH) -> FastAPI:
    if not 1 <= default_depth <= MAX_DEPTH:
        raise ValueError(f"default_depth must be within 1..{MAX_DEPTH}")
    app = FastAPI(title="Chess Game API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        session = _require_session(store, game_id)
        session.log("New game started.")
        return CreateGameResponse(game_id=game_id, fen=session.game.to_fen())

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> None:
        _require_session(store, game_id)
        store.delete(game_id)

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        return _game_state(game_id, session.game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_session(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.set_game(game_id, game)
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_session(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        try:
            session.game.apply_move(move)
        except ValueError:
            raise HTTPException(status_code=400, detail="illegal move")
        return _game_state(game_id, session.game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        try:
            session.game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _game_state(game_id, session.game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    async def search(game_id: str, req: Optional[SearchRequest] = None) -> SearchResponse:
        session = _require_session(store, game_id)
        res = await _run_search(session, session.game.board.copy(), _depth(req, default_depth))
        return _search_response(res)

    @app.post("/api/games/{game_id}/bot-move", response_model=BotMoveResponse)
    async def bot_move(game_id: str, req: Optional[SearchRequest] = None) -> BotMoveResponse:
        session = _require_session(store, game_id)
        game = session.game
        fen, plies = game.to_fen(), len(game.move_stack)
        res = await _run_search(session, game.board.copy(), _depth(req, default_depth))
        # Only apply the move to the position that was searched
        if (
            store.get(game_id) is not session
            or session.game is not game
            or game.to_fen() != fen
            or len(game.move_stack) != plies
        ):
            raise HTTPException(status_code=409, detail="position changed during search")
        if res.best_move is None:
            session.log("Engine found no move (checkmate or stalemate).")
        else:
            game.apply_move(res.best_move)
            session.log("Engine move applied.")
        return BotMoveResponse(
            move=res.best_move.to_uci() if res.best_move else None,
            search=_search_response(res),
            state=_game_state(game_id, game),
        )

    @app.get("/api/games/{game_id}/log", response_model=LogResponse)
    async def get_log(game_id: str) -> LogResponse:
        session = _require_session(store, game_id)
        return LogResponse(game_id=game_id, lines=session.log_snapshot())

    @app.get("/api/games/{game_id}/analysis", response_model=AnalysisResponse)
    async def get_analysis(game_id: str) -> AnalysisResponse:
        session = _require_session(store, game_id)
        reviews = analyze_game(session.game)
        return AnalysisResponse(
            game_id=game_id,
            positions=[PositionReviewModel(**vars(r)) for r in reviews],
        )

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        nodes = await run_in_threadpool(perft_nodes, game.board, req.depth)
        return {"nodes": nodes, "depth": req.depth}

    return app


async def _run_search(session: Session, board: Board, depth: int) -> SearchResult:
    """Search ``board``, a private copy, on a worker thread."""
    service = SearchService(log=session.log)
    return await run_in_threadpool(service.search_position, board, depth)


def _depth(req: Optional[SearchRequest], default_depth: int) -> int:
    if req is None or req.depth is None:
        return default_depth
    return req.depth


def _search_response(res: SearchResult) -> SearchResponse:
    return SearchResponse(
        best_move=res.best_move.to_uci() if res.best_move else None,
        score=res.score_cp,
        legal_moves=res.legal_moves,
        nodes=res.nodes,
        depth=res.depth,
        time_ms=res.time_ms,
    )


def _game_state(game_id: str, game: Game) -> GameState:
    legal = game.legal_moves()
    in_check = game.in_check()
    if legal:
        status = "ongoing"
    else:
        status = "checkmate" if in_check else "stalemate"
    history = game.move_history_uci()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.board.side_to_move,
        legal_moves=[m.to_uci() for m in legal],
        in_check=in_check,
        checkmate=status == "checkmate",
        stalemate=status == "stalemate",
        status=status,
        eval_white=evaluate_white(game.board),
        last_move=history[-1] if history else None,
        move_history=history,
    )


def _require_session(store: InMemorySessionStore, game_id: str) -> Session:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


# Default app for non-factory servers
app = create_app()
