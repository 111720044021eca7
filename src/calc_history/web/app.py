"""calc-history Web App: FastAPI backend.

One Calculator per session; the presentation layer drives it through:

  POST   /api/sessions                → create session → session_id + state
  GET    /api/sessions/{id}           → state + history
  POST   /api/sessions/{id}/operate   → {"operator": "+", "operand": 5}
  POST   /api/sessions/{id}/undo      → {"count": 1}
  POST   /api/sessions/{id}/redo      → {"count": 1}
  POST   /api/sessions/{id}/reset     → {"value": 100} (optional)
  DELETE /api/sessions/{id}

Run with:
  uvicorn calc_history.web.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calc_history.config import load_config
from calc_history.core.commands import coerce_number
from calc_history.core.errors import CalculatorError
from calc_history.web.sessions import Session, SessionManager

_logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (YAML file and CALC_HISTORY_* environment variables)
# ---------------------------------------------------------------------------

config = load_config()

session_manager = SessionManager(ttl_seconds=config.session_ttl_seconds)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="calc-history API",
    description="Arithmetic accumulator with undo/redo",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _log_startup() -> None:
    _logger.info(
        "calc-history started: initial_value=%s session_ttl=%ds cors=%s",
        config.initial_value,
        config.session_ttl_seconds,
        ",".join(config.cors_origins),
    )


@app.exception_handler(CalculatorError)
async def _calculator_error(request: Request, exc: CalculatorError) -> JSONResponse:
    _logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    from calc_history import __version__
    return {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@app.post("/api/sessions")
async def create_session(request: Request):
    """Create a new calculator session."""
    body = await _json_body(request)
    initial_value = coerce_number(body.get("initial_value", config.initial_value))
    session = session_manager.create(initial_value)
    return _state(session)


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str):
    """Return the current value, cursor and the full history."""
    session = _get_session(session_id)
    with session.lock:
        payload = _state(session)
        calc = session.calculator
        payload["history"] = [
            {"index": i, "description": entry.description, "applied": i < calc.cursor}
            for i, entry in enumerate(calc.history)
        ]
    return payload


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str):
    if not session_manager.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return {"ok": True}


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


@app.post("/api/sessions/{session_id}/operate")
async def operate(session_id: str, request: Request):
    session = _get_session(session_id)
    body = await _json_body(request)
    if "operator" not in body or "operand" not in body:
        raise HTTPException(status_code=400, detail="Both 'operator' and 'operand' are required")
    operand = coerce_number(body["operand"])
    with session.lock:
        session.calculator.operate(body["operator"], operand)
        return _state(session)


@app.post("/api/sessions/{session_id}/undo")
async def undo(session_id: str, request: Request):
    session = _get_session(session_id)
    body = await _json_body(request)
    count = body.get("count", 1)
    with session.lock:
        session.calculator.undo(count)
        return _state(session)


@app.post("/api/sessions/{session_id}/redo")
async def redo(session_id: str, request: Request):
    session = _get_session(session_id)
    body = await _json_body(request)
    count = body.get("count", 1)
    with session.lock:
        session.calculator.redo(count)
        return _state(session)


@app.post("/api/sessions/{session_id}/reset")
async def reset(session_id: str, request: Request):
    session = _get_session(session_id)
    body = await _json_body(request)
    value = body.get("value")
    with session.lock:
        session.calculator.reset(None if value is None else coerce_number(value))
        return _state(session)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session(session_id: str) -> Session:
    session = session_manager.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session


async def _json_body(request: Request) -> dict[str, Any]:
    """Parse the request body; an empty body counts as ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def _state(session: Session) -> dict[str, Any]:
    return {"session_id": session.id, **session.calculator.state().to_dict()}
