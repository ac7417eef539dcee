# tagnotes/app.py
from __future__ import annotations
from threading import Lock
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from .config import setup_logging
from .models import Note, ViewState
from .services import filtered_view, tag_universe
from .store import NoteStore, open_store

_LOCK = Lock()

# ---------- Schemas ----------
class DraftEdit(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tag_input: Optional[str] = None

class TagCommit(BaseModel):
    text: Optional[str] = None

class SaveRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None

class Filters(BaseModel):
    search: Optional[str] = None
    tag: Optional[str] = None


def get_store(request: Request) -> NoteStore:
    # store is owned by the app; opened lazily so importing this module has no side effects
    with _LOCK:
        store = getattr(request.app.state, "store", None)
        if store is None:
            store = request.app.state.store = open_store()
        return store


def create_app(store: Optional[NoteStore] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title="tagnotes API")
    app.state.store = store

    # ---------- read-only ----------
    @app.get("/api/view", response_model=ViewState)
    def api_view(store: NoteStore = Depends(get_store)):
        with _LOCK:
            return store.view()

    @app.get("/api/notes", response_model=list[Note])
    def api_list_notes(search: str = "", tag: str = "", store: NoteStore = Depends(get_store)):
        with _LOCK:
            return filtered_view(store.notes, search, tag)

    @app.get("/api/notes/{note_id}", response_model=Note)
    def api_get_note(note_id: int, store: NoteStore = Depends(get_store)):
        with _LOCK:
            n = store.get(note_id)
        if not n:
            raise HTTPException(status_code=404, detail="Not found")
        return n

    @app.get("/api/tags", response_model=list[str])
    def api_tags(store: NoteStore = Depends(get_store)):
        with _LOCK:
            return tag_universe(store.notes)

    # ---------- intents ----------
    @app.post("/api/draft", response_model=ViewState)
    def api_new_note(store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.new_note()
            return store.view()

    @app.patch("/api/draft", response_model=ViewState)
    def api_edit_draft(payload: DraftEdit, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.update_draft(title=payload.title, content=payload.content)
            if payload.tag_input is not None:
                store.set_tag_input(payload.tag_input)
            return store.view()

    @app.post("/api/draft/tags", response_model=ViewState)
    def api_commit_tags(payload: TagCommit, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.commit_tag_input(payload.text)
            return store.view()

    @app.delete("/api/draft/tags/{tag:path}", response_model=ViewState)
    def api_remove_tag(tag: str, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.remove_tag(tag)
            return store.view()

    @app.post("/api/draft/save", response_model=ViewState)
    def api_save(payload: SaveRequest, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.save_draft(title=payload.title, content=payload.content)
            return store.view()

    @app.post("/api/draft/cancel", response_model=ViewState)
    def api_cancel(store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.cancel()
            return store.view()

    @app.post("/api/notes/{note_id}/edit", response_model=ViewState)
    def api_begin_edit(note_id: int, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.edit(note_id)
            return store.view()

    @app.delete("/api/notes/{note_id}", response_model=ViewState)
    def api_delete_note(note_id: int, store: NoteStore = Depends(get_store)):
        with _LOCK:
            store.delete_note(note_id)
            return store.view()

    @app.put("/api/filters", response_model=ViewState)
    def api_filters(payload: Filters, store: NoteStore = Depends(get_store)):
        with _LOCK:
            if payload.search is not None:
                store.set_search(payload.search)
            if payload.tag is not None:
                store.set_filter_tag(payload.tag)
            return store.view()

    return app


app = create_app()
