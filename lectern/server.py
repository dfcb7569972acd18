"""FastAPI server for Lectern."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from lectern.agent.briefing import generate_briefing
from lectern.agent.chat import send_message
from lectern.agent.prompts import SUGGESTED_QUESTIONS
from lectern.audio.clips import AudioClipStore
from lectern.audio.overview import create_audio_overview
from lectern.config import LecternConfig, load_config, store_dir
from lectern.core import Diag, MissingCredentialError, OperationInProgressError
from lectern.guard import InFlightGuard, Operation
from lectern.notebook.kv import FileKeyValueStore
from lectern.notebook.models import Notebook, SourceKind
from lectern.notebook.store import NotebookRepository

logger = logging.getLogger("lectern.server")

app = FastAPI(title="Lectern", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_repository: NotebookRepository | None = None
_clips = AudioClipStore()
_guard = InFlightGuard()


def get_repository() -> NotebookRepository:
    """Lazily open the on-disk repository. Overridden in tests."""
    global _repository  # noqa: PLW0603
    if _repository is None:
        _repository = NotebookRepository(FileKeyValueStore(store_dir()))
    return _repository


def get_clips() -> AudioClipStore:
    return _clips


def get_guard() -> InFlightGuard:
    return _guard


def get_config() -> LecternConfig:
    return load_config()


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "error": message})


def _not_found(what: str, item_id: str) -> JSONResponse:
    return _error(404, "NOT_FOUND", f"{what} {item_id} not found")


def _diag_response(diag: Diag | None) -> JSONResponse:
    if diag is None:
        return _error(502, "UNKNOWN", "Generation failed")
    status = 400 if diag.code == "NO_SOURCES" else 502
    return _error(status, diag.code, diag.message)


@app.exception_handler(MissingCredentialError)
async def _missing_credential(request: Request, exc: MissingCredentialError) -> JSONResponse:
    return _error(503, "CONFIG_ERROR", str(exc))


@app.exception_handler(OperationInProgressError)
async def _in_progress(request: Request, exc: OperationInProgressError) -> JSONResponse:
    return _error(409, "IN_PROGRESS", str(exc))


def _summary(nb: Notebook) -> dict[str, Any]:
    return {
        "id": nb.id,
        "title": nb.title,
        "source_count": len(nb.sources),
        "message_count": len(nb.history),
        "updated_at": nb.updated_at,
    }


@app.get("/api/health")
async def health() -> dict[str, Any]:
    return {"ok": True}


# --- notebooks ---


@app.get("/api/notebooks")
async def list_notebooks(repo: NotebookRepository = Depends(get_repository)) -> list[dict[str, Any]]:
    return [_summary(nb) for nb in repo.list_notebooks()]


class CreateNotebookRequest(BaseModel):
    title: str | None = None


@app.post("/api/notebooks", status_code=201)
async def create_notebook(
    request: CreateNotebookRequest,
    repo: NotebookRepository = Depends(get_repository),
) -> dict[str, Any]:
    return repo.create_notebook(request.title).model_dump()


@app.get("/api/notebooks/{notebook_id}")
async def get_notebook(notebook_id: str, repo: NotebookRepository = Depends(get_repository)) -> Any:
    nb = repo.get(notebook_id)
    if nb is None:
        return _not_found("Notebook", notebook_id)
    return nb.model_dump()


class RenameNotebookRequest(BaseModel):
    title: str = Field(min_length=1)


@app.patch("/api/notebooks/{notebook_id}")
async def rename_notebook(
    notebook_id: str,
    request: RenameNotebookRequest,
    repo: NotebookRepository = Depends(get_repository),
) -> Any:
    nb = repo.rename_notebook(notebook_id, request.title)
    if nb is None:
        return _not_found("Notebook", notebook_id)
    return _summary(nb)


@app.delete("/api/notebooks/{notebook_id}")
async def delete_notebook(
    notebook_id: str,
    repo: NotebookRepository = Depends(get_repository),
    clips: AudioClipStore = Depends(get_clips),
) -> Any:
    if not repo.delete_notebook(notebook_id):
        return _not_found("Notebook", notebook_id)
    clips.revoke_for_notebook(notebook_id)
    return {"ok": True}


# --- sources ---


class AddSourceRequest(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    kind: SourceKind = SourceKind.TEXT


@app.post("/api/notebooks/{notebook_id}/sources", status_code=201)
async def add_source(
    notebook_id: str,
    request: AddSourceRequest,
    repo: NotebookRepository = Depends(get_repository),
) -> Any:
    source = repo.add_source(notebook_id, request.title, request.content, request.kind)
    if source is None:
        return _not_found("Notebook", notebook_id)
    return source.model_dump()


@app.post("/api/notebooks/{notebook_id}/sources/{source_id}/toggle")
async def toggle_source(
    notebook_id: str,
    source_id: str,
    repo: NotebookRepository = Depends(get_repository),
) -> Any:
    source = repo.toggle_source(notebook_id, source_id)
    if source is None:
        return _not_found("Source", source_id)
    return source.model_dump()


@app.delete("/api/notebooks/{notebook_id}/sources/{source_id}")
async def delete_source(
    notebook_id: str,
    source_id: str,
    repo: NotebookRepository = Depends(get_repository),
) -> Any:
    if not repo.delete_source(notebook_id, source_id):
        return _not_found("Source", source_id)
    return {"ok": True}


# --- generation ---


class ChatRequestBody(BaseModel):
    text: str


@app.post("/api/notebooks/{notebook_id}/chat")
async def chat(
    notebook_id: str,
    request: ChatRequestBody,
    repo: NotebookRepository = Depends(get_repository),
    guard: InFlightGuard = Depends(get_guard),
    config: LecternConfig = Depends(get_config),
) -> Any:
    text = request.text.strip()
    if not text:
        return _error(400, "EMPTY_MESSAGE", "Message text is empty")
    if repo.get(notebook_id) is None:
        return _not_found("Notebook", notebook_id)

    logger.info("POST /chat notebook=%s", notebook_id)
    with guard.hold(notebook_id, Operation.CHAT):
        exchange = await send_message(repo, notebook_id, text, config)
    if exchange is None:
        return _not_found("Notebook", notebook_id)
    user_msg, reply = exchange
    return {"messages": [user_msg.model_dump(exclude_none=True), reply.model_dump(exclude_none=True)]}


@app.post("/api/notebooks/{notebook_id}/briefing")
async def briefing(
    notebook_id: str,
    repo: NotebookRepository = Depends(get_repository),
    guard: InFlightGuard = Depends(get_guard),
    config: LecternConfig = Depends(get_config),
) -> Any:
    nb = repo.get(notebook_id)
    if nb is None:
        return _not_found("Notebook", notebook_id)

    logger.info("POST /briefing notebook=%s", notebook_id)
    with guard.hold(notebook_id, Operation.BRIEFING):
        result = await asyncio.to_thread(generate_briefing, nb.active_sources(), config)
    if not result.ok:
        logger.warning("Briefing failed for %s: %s", notebook_id, result.diagnostics)
        return _diag_response(result.first_error)
    return {"briefing": result.data}


@app.post("/api/notebooks/{notebook_id}/audio")
async def audio_overview(
    notebook_id: str,
    repo: NotebookRepository = Depends(get_repository),
    clips: AudioClipStore = Depends(get_clips),
    guard: InFlightGuard = Depends(get_guard),
    config: LecternConfig = Depends(get_config),
) -> Any:
    nb = repo.get(notebook_id)
    if nb is None:
        return _not_found("Notebook", notebook_id)

    logger.info("POST /audio notebook=%s", notebook_id)
    with guard.hold(notebook_id, Operation.AUDIO):
        result = await create_audio_overview(nb, clips, config)
    if not result.ok or result.data is None:
        logger.warning("Audio overview failed for %s: %s", notebook_id, result.diagnostics)
        return _diag_response(result.first_error)
    clip = result.data
    return {"clip_id": clip.id, "url": clip.url, "bytes": len(clip.data)}


@app.get("/api/notebooks/{notebook_id}/suggestions")
async def suggestions(notebook_id: str, repo: NotebookRepository = Depends(get_repository)) -> Any:
    if repo.get(notebook_id) is None:
        return _not_found("Notebook", notebook_id)
    return {"suggestions": list(SUGGESTED_QUESTIONS)}


@app.get("/api/notebooks/{notebook_id}/pending")
async def pending(notebook_id: str, guard: InFlightGuard = Depends(get_guard)) -> dict[str, Any]:
    return {"pending": [str(op) for op in guard.pending(notebook_id)]}


# --- audio clips ---


@app.get("/api/audio/{clip_id}")
async def get_audio(clip_id: str, clips: AudioClipStore = Depends(get_clips)) -> Response:
    clip = clips.get(clip_id)
    if clip is None:
        return _not_found("Clip", clip_id)
    return Response(content=clip.data, media_type=clip.media_type)


@app.delete("/api/audio/{clip_id}")
async def revoke_audio(clip_id: str, clips: AudioClipStore = Depends(get_clips)) -> Any:
    if not clips.revoke(clip_id):
        return _not_found("Clip", clip_id)
    return {"ok": True}


# Serve frontend static files if built
_frontend_dist = Path(__file__).parent.parent / "frontend" / "dist"
if _frontend_dist.exists():
    app.mount("/", StaticFiles(directory=str(_frontend_dist), html=True), name="frontend")
