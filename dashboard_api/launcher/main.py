from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel

from .config import settings
from .handlers import default_registry
from .input_routing import KeyEvent, KeyRouter
from .interpreter import QueryInterpreter
from .labels import load_labels
from .logging_utils import setup_logger
from .models import NewBookmarkRequest, PageSwitchRequest
from .presentation.html_renderer import HtmlRenderer
from .presentation.presenters import create_presenter
from .security import require_api_key
from .sink import HostActionSink, PresentationState
from .store import (
    JsonBookmarkRepository, JsonDataStore, JsonFinderRepository, JsonSettingsStore,
    validate_bookmark_url,
)

VERSION = "0.1.0"

logger = setup_logger("launcher", settings.log_level)

app = FastAPI(title="Dashboard Launcher API", version=VERSION)

origins = (
    [o.strip() for o in settings.cors_origins.split(",")]
    if settings.cors_origins
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class KeysRequest(BaseModel):
    events: List[KeyEvent]


class TextSyncRequest(BaseModel):
    value: str


class DashboardHost:
    """One dashboard's launcher: file store, effect sink and interpreter.

    The interpreter is single-threaded, so every request touching it holds
    ``lock``.
    """

    def __init__(self, data_dir: Path, labels_file: Optional[Path] = None, fuzzy_limit: int = 20):
        self.lock = threading.Lock()
        self.data = JsonDataStore(data_dir)
        self.settings_store = JsonSettingsStore(self.data)
        self.bookmarks = JsonBookmarkRepository(self.data, self.settings_store)
        self.finders = JsonFinderRepository(self.data)

        current = self.settings_store.load()
        self.sink = HostActionSink(self.settings_store, PresentationState.from_settings(current))
        self.interpreter = QueryInterpreter(
            self.bookmarks,
            self.finders,
            self.sink,
            settings=current,
            labels=load_labels(labels_file),
            registry=default_registry(self.settings_store.custom_themes),
            fuzzy_limit=fuzzy_limit,
        )
        self.router = KeyRouter(self.interpreter)
        self.sink.drain()
        logger.info(f"🚀 Launcher ready: data_dir={self.data.data_dir}")

    def reload(self) -> None:
        """Re-read settings and data after an out-of-band change."""
        current = self.settings_store.load()
        self.sink.presentation = PresentationState.from_settings(current)
        self.interpreter.refresh(current)

    def sync_settings(self) -> None:
        # Commands persist settings through the sink; keep the interpreter's copy current
        current = self.settings_store.load()
        if current.global_shortcuts != self.interpreter.settings.global_shortcuts:
            # The searchable set depends on it
            self.interpreter.refresh(current)
        else:
            self.interpreter.settings = current

    def snapshot(self) -> dict:
        return {
            "view": self.interpreter.view(),
            "effects": self.sink.drain(),
            "presentation": self.sink.presentation.to_dict(),
        }


_host: Optional[DashboardHost] = None
_host_lock = threading.Lock()


def get_host() -> DashboardHost:
    global _host
    with _host_lock:
        if _host is None:
            _host = DashboardHost(
                Path(settings.data_dir),
                labels_file=Path(settings.labels_file) if settings.labels_file else None,
                fuzzy_limit=settings.fuzzy_limit,
            )
        return _host


def render_view(host: DashboardHost, view: dict, fmt: str) -> Response:
    markdown_text = create_presenter("overlay").to_markdown(view)
    if fmt == "markdown":
        return PlainTextResponse(markdown_text, media_type="text/markdown; charset=utf-8")

    presentation = host.sink.presentation
    theme = presentation.theme if presentation.theme in ("light", "dark") else None
    renderer = HtmlRenderer(theme=theme)
    return HTMLResponse(renderer.render(
        markdown_text,
        title="Launcher",
        body_classes=presentation.body_classes(),
        metadata={"mode": view.get("mode") or "closed", "query": view.get("query", "")},
    ))


@app.get("/health")
def health(response: Response):
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "service": "dashboard-launcher",
        "version": VERSION,
        "time": datetime.now().astimezone().isoformat()
    }


@app.get("/session", dependencies=[Depends(require_api_key)])
def session(
    format: str = Query(default="json", pattern="^(json|markdown|html)$"),
    host: DashboardHost = Depends(get_host),
):
    with host.lock:
        if format == "json":
            return host.snapshot()
        return render_view(host, host.interpreter.view(), format)


@app.post("/session/keys", dependencies=[Depends(require_api_key)])
def session_keys(req: KeysRequest, host: DashboardHost = Depends(get_host)):
    with host.lock:
        handled = [host.router.route(event) for event in req.events]
        host.sync_settings()
        return {"handled": handled, **host.snapshot()}


@app.post("/session/text", dependencies=[Depends(require_api_key)])
def session_text(req: TextSyncRequest, host: DashboardHost = Depends(get_host)):
    with host.lock:
        handled = host.router.sync_text(req.value)
        host.sync_settings()
        return {"handled": handled, **host.snapshot()}


@app.post("/session/open", dependencies=[Depends(require_api_key)])
def session_open(host: DashboardHost = Depends(get_host)):
    with host.lock:
        host.interpreter.open()
        return host.snapshot()


@app.post("/session/close", dependencies=[Depends(require_api_key)])
def session_close(host: DashboardHost = Depends(get_host)):
    with host.lock:
        host.router.route_outside_activation()
        return host.snapshot()


@app.post("/session/page", dependencies=[Depends(require_api_key)])
def session_page(req: PageSwitchRequest, host: DashboardHost = Depends(get_host)):
    with host.lock:
        if not host.bookmarks.set_current_page(req.page):
            raise HTTPException(400, detail=f"Unknown page: {req.page}")
        host.reload()
        return {"page": req.page, **host.snapshot()}


@app.get("/resolve", dependencies=[Depends(require_api_key)])
def resolve(q: str = Query(..., min_length=1), host: DashboardHost = Depends(get_host)):
    with host.lock:
        rows = host.interpreter.preview(q.upper())
        return {"q": q, "rows": [row.to_dict() for row in rows]}


@app.get("/api/bookmarks", dependencies=[Depends(require_api_key)])
def list_bookmarks(page: Optional[int] = Query(default=None), host: DashboardHost = Depends(get_host)):
    with host.lock:
        page_id = page if page is not None else host.bookmarks.current_page_id()
        loaded = host.bookmarks.load_page(page_id)
    if loaded is None:
        raise HTTPException(404, detail=f"Unknown page: {page_id}")
    return loaded.model_dump(by_alias=True)


@app.post("/api/bookmarks/add", dependencies=[Depends(require_api_key)])
def add_bookmark(req: NewBookmarkRequest = Body(...), host: DashboardHost = Depends(get_host)):
    try:
        validate_bookmark_url(req.bookmark.url)
    except ValueError as e:
        raise HTTPException(400, detail=f"Invalid URL: {e}")

    with host.lock:
        if not host.bookmarks.create(req.page, req.bookmark):
            raise HTTPException(400, detail=f"Could not add bookmark to page {req.page}")
        host.reload()
    return {"status": "created", "page": req.page, "bookmark": req.bookmark.model_dump(by_alias=True)}


@app.get("/api/finders", dependencies=[Depends(require_api_key)])
def list_finders(host: DashboardHost = Depends(get_host)):
    with host.lock:
        finders = host.finders.list()
    return {"finders": [f.model_dump(by_alias=True) for f in finders]}
