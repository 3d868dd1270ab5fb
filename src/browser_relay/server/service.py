"""HTTP API exposing the relay's chat loop and browser session."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..browser.controller import SessionController
from ..history.base import HistoryStore
from ..orchestrator.runner import ChatOrchestrator

LOGGER = logging.getLogger(__name__)

CHAT_ERROR_REPLY = "An error occurred while processing your request."

app = FastAPI(title="Browser Relay")


# Pydantic request/response models --------------------------------------------


class ChatRequest(BaseModel):
    message: str
    username: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    screenshot: str
    success: bool = True


class ScreenshotResponse(BaseModel):
    screenshot: str


class HistoryItemModel(BaseModel):
    username: str
    message: str
    ai_response: str
    command: Optional[str] = None
    created_at: str


class HistoryResponse(BaseModel):
    history: List[HistoryItemModel]


class ModeResponse(BaseModel):
    mode: str
    success: bool = True


# Relay state -----------------------------------------------------------------


class RelayState:
    """Components shared by every request, wired once at startup."""

    def __init__(
        self,
        *,
        controller: Optional[SessionController] = None,
        orchestrator: Optional[ChatOrchestrator] = None,
        history: Optional[HistoryStore] = None,
    ) -> None:
        self.controller = controller
        self.orchestrator = orchestrator
        self.history = history

    def require_controller(self) -> SessionController:
        if self.controller is None:
            raise HTTPException(status_code=503, detail="Browser session is not configured")
        return self.controller

    def require_orchestrator(self) -> ChatOrchestrator:
        if self.orchestrator is None:
            raise HTTPException(status_code=503, detail="Chat orchestrator is not configured")
        return self.orchestrator

    def require_history(self) -> HistoryStore:
        if self.history is None:
            raise HTTPException(status_code=503, detail="History store is not configured")
        return self.history


state = RelayState()


def configure(
    controller: SessionController,
    orchestrator: ChatOrchestrator,
    history: HistoryStore,
) -> RelayState:
    """Install the components used by the API routes."""

    global state
    state = RelayState(controller=controller, orchestrator=orchestrator, history=history)
    return state


def _error(exc: Exception, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=500, content={**extra, "error": str(exc)})


# API routes -----------------------------------------------------------------


@app.get("/health")
def get_health() -> Dict[str, Any]:
    controller = state.controller
    if controller is None:
        return {"status": "unconfigured", "mode": None}
    return {
        "status": "ok" if controller.is_ready else "starting",
        "mode": controller.mode.value,
    }


@app.post("/api/chat", response_model=ChatResponse)
def chat(payload: ChatRequest) -> Any:
    orchestrator = state.require_orchestrator()
    try:
        result = orchestrator.handle(payload.message, payload.username)
    except Exception as exc:
        LOGGER.exception("Chat request failed")
        return _error(exc, response=CHAT_ERROR_REPLY, success=False)
    return ChatResponse(response=result.conversation, screenshot=result.screenshot)


@app.get("/api/screenshot", response_model=ScreenshotResponse)
def get_screenshot() -> Any:
    controller = state.require_controller()
    try:
        image = controller.screenshot()
    except Exception as exc:
        LOGGER.exception("Screenshot request failed")
        return _error(exc)
    return ScreenshotResponse(screenshot=base64.b64encode(image).decode("ascii"))


@app.get("/api/history/{username}", response_model=HistoryResponse)
def get_history(username: str) -> Any:
    history = state.require_history()
    try:
        entries = history.list_for(username)
    except Exception as exc:
        LOGGER.exception("History request failed for %s", username)
        return _error(exc)
    return HistoryResponse(
        history=[
            HistoryItemModel(
                username=entry.username,
                message=entry.message,
                ai_response=entry.ai_response,
                command=entry.command,
                created_at=entry.created_at.isoformat(),
            )
            for entry in entries
        ]
    )


@app.post("/api/toggle-headless", response_model=ModeResponse)
def toggle_headless() -> Any:
    controller = state.require_controller()
    try:
        mode = controller.toggle_mode()
    except Exception as exc:
        LOGGER.exception("Failed to toggle browser mode")
        return _error(exc)
    return ModeResponse(mode=mode.value)
