from __future__ import annotations

from fastapi.testclient import TestClient

from chessgame.protocol.http.app import create_app


def _new_game(client: TestClient) -> str:
    return client.post("/api/games").json()["game_id"]


def test_move_updates_history_and_side() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    for uci in ("e2e4", "e7e5", "g1f3"):
        r = client.post(f"/api/games/{game_id}/move", json={"move": uci})
        assert r.status_code == 200
    state = r.json()
    assert state["move_history"] == ["e2e4", "e7e5", "g1f3"]
    assert state["last_move"] == "g1f3"
    assert state["side_to_move"] == "b"
    assert state["fen"] == "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"


def test_illegal_move_rejected() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "illegal move"
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["move_history"] == []


def test_malformed_move_rejected() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "zz99"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_underpromotion_over_http() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    client.post(f"/api/games/{game_id}/position", json={"fen": "4k3/1P6/8/8/8/8/8/4K3 w - - 0 1"})
    r = client.post(f"/api/games/{game_id}/move", json={"move": "b7b8n"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"].startswith("1N2k3/")
    assert state["last_move"] == "b7b8n"


def test_fools_mate_reports_checkmate() -> None:
    client = TestClient(create_app())
    game_id = _new_game(client)
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        r = client.post(f"/api/games/{game_id}/move", json={"move": uci})
    state = r.json()
    assert state["checkmate"] is True
    assert state["in_check"] is True
    assert state["legal_moves"] == []
