# client.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Type

import requests
from websockets.sync.client import connect

from algorithms.solver import RecursiveSolver
from game import SessionManager
from maze import (
    BlockedByWall,
    InvalidDirection,
    MazeError,
    MazeSolved,
    NoActiveMaze,
    OutOfBounds,
    SessionBusy,
    Survey,
    Victory,
    parse_move,
)

log = logging.getLogger("labyrinth.icarus")

ERRORS: Dict[str, Type[MazeError]] = {
    cls.code: cls for cls in (BlockedByWall, InvalidDirection, OutOfBounds, NoActiveMaze, MazeSolved, SessionBusy)
}


def to_survey(reply: Dict[str, Any]) -> Survey:
    """Turn a Daedalus reply into a survey, or raise the signal/error it carries."""
    if reply.get("victory"):
        raise Victory(int(reply.get("steps") or 0), str(reply.get("message") or ""))
    if reply.get("error"):
        exc = ERRORS.get(str(reply.get("code") or ""), MazeError)
        raise exc(str(reply.get("message") or "request refused"))
    return Survey.from_dict(reply.get("survey"))


class HttpDaedalus:
    """Talks to a Daedalus server over plain HTTP GETs."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str) -> Dict[str, Any]:
        response = self.http.get(f"{self.base_url}{path}", timeout=self.timeout)
        try:
            return response.json()
        except ValueError:
            response.raise_for_status()
            raise

    def awake(self) -> Survey:
        return to_survey(self._get("/awake"))

    def move(self, direction: str) -> Survey:
        parse_move(direction)
        return to_survey(self._get(f"/move/{direction}"))

    def done(self) -> Dict[str, Any]:
        return self._get("/done")

    def close(self) -> None:
        self.http.close()


class WebSocketDaedalus:
    """Same protocol over the /ws endpoint, one JSON message per request."""

    def __init__(self, uri: str, timeout: float = 10.0):
        self.uri = uri
        self.timeout = timeout
        self.ws = None

    def __enter__(self) -> "WebSocketDaedalus":
        self.ws = connect(self.uri, open_timeout=self.timeout)
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _ask(self, msg: Dict[str, Any]) -> Dict[str, Any]:
        self.ws.send(json.dumps(msg))
        data = json.loads(self.ws.recv(timeout=self.timeout))
        if data.get("code") == "busy":
            raise ConnectionError(data.get("message"))
        return data

    def awake(self) -> Survey:
        return to_survey(self._ask({"type": "awake"}))

    def move(self, direction: str) -> Survey:
        parse_move(direction)
        return to_survey(self._ask({"type": "move", "dir": direction}))

    def done(self) -> Dict[str, Any]:
        return self._ask({"type": "done"})

    def close(self) -> None:
        if self.ws is not None:
            self.ws.close()
            self.ws = None


class LocalDaedalus:
    """In-process Daedalus, no network involved."""

    def __init__(self, manager: SessionManager):
        self.manager = manager

    def awake(self) -> Survey:
        return self.manager.awake().survey

    def move(self, direction: str) -> Survey:
        return to_survey(self.manager.move(direction).to_dict())

    def done(self) -> Dict[str, Any]:
        return self.manager.flush()

    def close(self) -> None:
        pass


def solve_maze(link) -> bool:
    """Wake up in a fresh labyrinth and look for the treasure."""
    s = link.awake()
    solver = RecursiveSolver(link)
    found = solver.solve(s)
    if found:
        log.info("Treasure found after %d moves", solver.moves)
    else:
        log.warning("Gave up after %d moves: every reachable room explored", solver.moves)
    return found


def run_icarus(link, times: int) -> List[bool]:
    """Solve `times` labyrinths, then tell Daedalus we are done."""
    log.info("Solving %d times", times)
    results = [solve_maze(link) for _ in range(times)]
    summary = link.done()
    log.info("Daedalus reports %s", summary)
    return results
