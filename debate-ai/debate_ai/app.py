from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles

from debate_ai.agents.judge import JudgeAgent
from debate_ai.agents.opponent import OpponentAgent
from debate_ai.agents.topic_validator import TopicValidator
from debate_ai.config import settings
from debate_ai.models.schemas import (
    CreateSessionInput,
    OperationResult,
    SessionRefInput,
    StartDebateInput,
    SubmitArgumentInput,
    SubmitResponseInput,
    TopicInput,
)
from debate_ai.utils.debate_coordinator import DebateCoordinator
from debate_ai.utils.debate_manager import DebateManager
from debate_ai.utils.logger import DebateLogger


_STATUS_FOR_ERROR = {"not_found": 404, "conflict": 409, "validation": 400}

ENDPOINTS = [
    "GET /api/info - Server info",
    "GET /api/ping - Health check",
    "POST /api/validate-topic - Validate debate topic",
    "POST /api/debate/create - Create new debate session",
    "GET /api/debate/{session_id} - Get session details",
    "DELETE /api/debate/{session_id} - Expire a debate session",
    "POST /api/debate/{session_id}/submit - Submit round response",
    "GET /api/debates - List debate sessions",
    "POST /api/start-debate - Create session (client contract)",
    "POST /api/submit-argument - Submit round response (client contract)",
    "POST /api/ai-response - Get session with AI response (client contract)",
]


def _failure(result: OperationResult, default_status: int = 400) -> JSONResponse:
    status = _STATUS_FOR_ERROR.get(result.error or "", default_status)
    return JSONResponse(status_code=status, content={"success": False, "message": result.message})


def create_app(
    manager: Optional[DebateManager] = None,
    coordinator: Optional[DebateCoordinator] = None,
    topic_validator: Optional[TopicValidator] = None,
    event_log: Optional[DebateLogger] = None,
) -> FastAPI:
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

    if event_log is None:
        event_log = DebateLogger("debate_ai", log_file=settings.LOG_FILE)
        if settings.CLEAR_LOGS_ON_START:
            event_log.clear_logs()

    manager = manager or DebateManager(settings.WORD_CAP, event_log=event_log)
    coordinator = coordinator or DebateCoordinator(
        manager,
        OpponentAgent(event_log=event_log),
        JudgeAgent(event_log=event_log),
        event_log=event_log,
    )
    topic_validator = topic_validator or TopicValidator(event_log=event_log)

    app.state.manager = manager
    app.state.coordinator = coordinator
    app.state.event_log = event_log

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        path = request.url.path
        # Skip static assets
        if not path.startswith("/api/") and "." in path:
            return await call_next(request)
        t0 = time.time()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            event_log.log_request(request.method, path, status, (time.time() - t0) * 1000.0)

    # Error handlers
    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request body"
        if errors:
            first = errors[0]
            field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
            msg = str(first.get("msg", "")).removeprefix("Value error, ")
            message = f"{field}: {msg}" if field else msg
        return JSONResponse(status_code=400, content={"success": False, "message": message})

    @app.exception_handler(HTTPException)
    async def handle_http(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def handle_ex(request: Request, exc: Exception):
        event_log.log_error(exc, {"method": request.method, "url": request.url.path})
        return JSONResponse(status_code=500, content={"success": False, "message": "Internal Server Error"})

    # Static files (serve pre-built client)
    client_dir = Path(settings.CLIENT_BUILD_DIR).resolve()
    if client_dir.exists():
        app.mount("/static", StaticFiles(directory=str(client_dir), html=True), name="static")

        @app.get("/")
        async def root_index():
            return RedirectResponse(url="/static/index.html", status_code=307)
    else:
        event_log.log("WARN", f"Client directory not found at {client_dir}; /static disabled.")

    @app.get("/favicon.ico")
    async def favicon():
        return Response(status_code=204)

    # Routes
    @app.get("/api/ping")
    def ping() -> Dict[str, str]:
        return {"message": "pong"}

    @app.get("/api/info")
    def info() -> Dict[str, Any]:
        return {
            "message": settings.APP_TITLE,
            "version": settings.APP_VERSION,
            "endpoints": ENDPOINTS,
            "status": "running",
            "word_cap": manager.word_cap,
            "ai_available": coordinator.opponent.available,
        }

    @app.post("/api/validate-topic")
    def validate_topic(payload: TopicInput) -> Dict[str, Any]:
        return topic_validator.validate_topic(payload.topic).model_dump()

    @app.post("/api/debate/create")
    def create_debate(payload: CreateSessionInput) -> Dict[str, Any]:
        session = manager.create_session(payload.topic, payload.refined_topic, payload.user_side)
        return {
            "success": True,
            "session": session.model_dump(mode="json"),
            "message": "Debate session created successfully",
        }

    @app.get("/api/debates")
    def list_debates() -> List[Dict[str, Any]]:
        """Lightweight list of sessions for a history panel, newest first."""
        items = [
            {
                "session_id": s.id,
                "topic": s.topic,
                "user_side": s.user_side,
                "current_round": s.current_round,
                "is_complete": s.is_complete,
                "final_score": s.final_grading.final_score if s.final_grading else None,
                "created_at": s.created_at.isoformat(),
            }
            for s in manager.list_sessions()
        ]
        items.sort(key=lambda item: item["created_at"], reverse=True)
        return items

    @app.get("/api/debate/{session_id}")
    def get_debate(session_id: str):
        session = manager.get_session(session_id)
        if session is None:
            return _failure(OperationResult.not_found("Debate session"))
        return {"success": True, "session": session.model_dump(mode="json")}

    @app.delete("/api/debate/{session_id}")
    def expire_debate(session_id: str):
        result = coordinator.expire_session(session_id)
        if not result.success:
            return _failure(result)
        return {"success": True, "message": result.message}

    @app.post("/api/debate/{session_id}/submit")
    def submit_response(session_id: str, payload: SubmitResponseInput):
        result = coordinator.submit_round(session_id, payload.response)
        if not result.success:
            return _failure(result)
        return {
            "success": True,
            "message": result.message,
            "round": result.round.model_dump(mode="json") if result.round else None,
            "session": result.session.model_dump(mode="json") if result.session else None,
            "next_round": result.next_round,
            "is_complete": result.is_complete,
            "final_grading": result.final_grading.model_dump(mode="json") if result.final_grading else None,
        }

    # Client-contract endpoints
    @app.post("/api/start-debate")
    def start_debate(payload: StartDebateInput) -> Dict[str, Any]:
        user_side = "pro" if payload.position == "for" else "con"
        session = manager.create_session(payload.topic, payload.topic, user_side)
        event_log.log(
            "INFO",
            "New debate session created via start-debate endpoint",
            {"session_id": session.id, "starting_player": payload.starting_player},
        )
        return {"success": True, "session": session.model_dump(mode="json")}

    @app.post("/api/submit-argument")
    def submit_argument(payload: SubmitArgumentInput):
        result = coordinator.submit_round(payload.session_id, payload.argument)
        if not result.success:
            return _failure(result)
        return {"success": True, "session": result.session.model_dump(mode="json")}

    @app.post("/api/ai-response")
    def ai_response(payload: SessionRefInput):
        # The AI reply is attached during submission; this only returns the session
        session = manager.get_session(payload.session_id)
        if session is None:
            return _failure(OperationResult.not_found())
        return {"success": True, "session": session.model_dump(mode="json")}

    # Single-page client: unknown non-API paths serve index.html
    index_file = client_dir / "index.html"
    if index_file.exists():

        @app.get("/{full_path:path}", include_in_schema=False)
        async def spa_fallback(full_path: str):
            if full_path.startswith("api/"):
                raise HTTPException(status_code=404, detail="Not Found")
            return FileResponse(str(index_file))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("debate_ai.app:app", host="0.0.0.0", port=3000)
