from __future__ import annotations

import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from ...engine.game import Game


MAX_LOG_LINES = 500


@dataclass
class Session:
    """One game plus the engine log lines produced while playing it."""

    game: Game
    log_lines: Deque[str] = field(default_factory=lambda: deque(maxlen=MAX_LOG_LINES))

    def log(self, text: str) -> None:
        # deque.append is atomic, so the search worker may call this directly
        self.log_lines.append(text)

    def log_snapshot(self) -> List[str]:
        return list(self.log_lines)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace a session's game
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._sessions[gid] = Session(game=game)
        return gid

    def get(self, game_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(game_id)

    def set_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            self._sessions[game_id].game = game

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)
