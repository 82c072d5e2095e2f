import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from game import Reply, SessionManager
from maze import InvalidDirection, MazeError, SessionBusy, Survey

log = logging.getLogger("labyrinth.server")

# status code for each refused request
ERROR_STATUS: Dict[str, int] = {
    InvalidDirection.code: 400,
}
DEFAULT_ERROR_STATUS = 409


def _error_reply(e: MazeError) -> Dict[str, Any]:
    return Reply(survey=Survey(), message=str(e), error=True, code=e.code).to_dict()


def _safe_json_loads(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
        return data if isinstance(data, dict) else {}
    except ValueError:
        return {}


def create_app(manager: SessionManager, on_done: Optional[Callable[[], None]] = None) -> FastAPI:
    """
    Daedalus: serves one labyrinth at a time to one Icarus.

    Route handlers are coroutines that never await while touching the
    session, so the event loop runs them one after the other.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # runs on /done and on Ctrl+C alike
        manager.flush()

    app = FastAPI(title="Labyrinth: Daedalus", version="0.1.0", lifespan=lifespan)
    app.state.manager = manager
    app.state.on_done = on_done
    app.state.ws_busy = False

    @app.exception_handler(MazeError)
    async def maze_error_handler(request: Request, exc: MazeError):
        status = ERROR_STATUS.get(exc.code, DEFAULT_ERROR_STATUS)
        return JSONResponse(status_code=status, content=_error_reply(exc))

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.get("/awake")
    async def awake():
        """Build a new maze and wake Icarus in it."""
        _check_http_allowed(app)
        return manager.awake().to_dict()

    @app.get("/move/{direction}")
    async def move(direction: str):
        _check_http_allowed(app)
        return manager.move(direction).to_dict()

    @app.get("/done")
    async def done(background: BackgroundTasks):
        """Icarus has had enough: report and stop serving."""
        summary = manager.flush()
        background.add_task(_shutdown, app)
        return summary

    @app.websocket("/ws")
    async def ws_endpoint(ws: WebSocket):
        await ws.accept()

        # One Icarus at a time
        if app.state.ws_busy:
            log.warning("Refusing second websocket session")
            await ws.send_text(json.dumps({"type": "error", "error": True, "code": "busy",
                                           "message": "Daedalus is busy with another Icarus"}))
            await ws.close(code=1013)
            return

        app.state.ws_busy = True
        try:
            while True:
                raw = await ws.receive_text()
                msg = _safe_json_loads(raw)
                t = msg.get("type")
                try:
                    if t == "awake":
                        payload = {"type": "reply", **manager.awake().to_dict()}
                    elif t == "move":
                        payload = {"type": "reply", **manager.move(str(msg.get("dir") or "")).to_dict()}
                    elif t == "done":
                        payload = {"type": "done", **manager.flush()}
                    else:
                        payload = {"type": "error", "error": True, "message": f"Unknown type: {t}"}
                except MazeError as e:
                    payload = {"type": "error", **_error_reply(e)}

                await ws.send_text(json.dumps(payload))
                if t == "done":
                    await ws.close(code=1000)
                    _shutdown(app)
                    return

        except WebSocketDisconnect:
            log.info("Icarus disconnected")
        finally:
            app.state.ws_busy = False

    return app


def _shutdown(app: FastAPI) -> None:
    cb = app.state.on_done
    if cb is not None:
        cb()


def _check_http_allowed(app: FastAPI) -> None:
    # the websocket Icarus owns the maze until he disconnects
    if app.state.ws_busy:
        raise SessionBusy("Daedalus is busy with another Icarus")
