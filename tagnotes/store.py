"""NoteStore: the note collection, the editing draft and their derived views."""

from __future__ import annotations
from datetime import datetime, UTC
import logging
from typing import Callable, Optional

from .codec import decode_notes, encode_notes
from .config import Settings, load_settings
from .errors import CorruptStateError, PersistenceFailure
from .models import Draft, Note, ViewState
from .services import filtered_view, find_note, format_tags, parse_tags, tag_universe
from .storage import SqlStorage, Storage

logger = logging.getLogger(__name__)

Listener = Callable[[ViewState], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class NoteStore:
    """
    Single owner of note state. Presentation code calls the intent methods
    (new_note, save_draft, edit, delete_note, ...) and reads view() or
    subscribes to get a ViewState after every change.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        key: str = "notes",
        persist_empty: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self.key = key
        self.persist_empty = persist_empty
        self.clock = clock

        self.notes: list[Note] = []
        self.draft = Draft()
        self.tag_input = ""
        self.editing = False
        self.search_query = ""
        self.filter_tag = ""
        self.error: Optional[str] = None

        self.loaded = False
        self._last_id = 0
        self._listeners: list[Listener] = []

    # ---------- lifecycle ----------
    def load_initial(self) -> list[Note]:
        blob = self.storage.read(self.key)
        if blob is None:
            self.notes = []
            logger.info("No stored notes under '%s'; starting empty", self.key)
        else:
            try:
                self.notes = decode_notes(blob)
                logger.info("Loaded %d notes from '%s'", len(self.notes), self.key)
            except CorruptStateError as e:
                logger.error("Ignoring unreadable notes under '%s': %s", self.key, e)
                self.notes = []
                self.error = str(e)
        self._last_id = max((n.id for n in self.notes), default=0)
        self.loaded = True
        self._emit()
        return self.notes

    def persist(self) -> bool:
        """Write the whole collection. Returns False when nothing was written."""
        if not self.loaded:
            logger.debug("Skipping persist before load_initial")
            return False
        if not self.notes and not self.persist_empty:
            return False
        try:
            self.storage.write(self.key, encode_notes(self.notes))
        except PersistenceFailure as e:
            logger.error("Keeping %d notes in memory, write failed: %s", len(self.notes), e)
            self.error = str(e)
            return False
        self.error = None
        return True

    # ---------- subscriptions ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        if not self._listeners:
            return
        state = self.view()
        for listener in list(self._listeners):
            listener(state)

    # ---------- derived views ----------
    def tag_universe(self) -> list[str]:
        return tag_universe(self.notes)

    def filtered_view(self) -> list[Note]:
        return filtered_view(self.notes, self.search_query, self.filter_tag)

    def get(self, note_id: int) -> Optional[Note]:
        return find_note(self.notes, note_id)

    def view(self) -> ViewState:
        return ViewState(
            notes=self.filtered_view(),
            total=len(self.notes),
            tags=self.tag_universe(),
            draft=self.draft.model_copy(deep=True),
            tag_input=self.tag_input,
            editing=self.editing,
            search_query=self.search_query,
            filter_tag=self.filter_tag,
            error=self.error,
        )

    # ---------- draft intents ----------
    def new_note(self) -> Draft:
        self._reset_draft()
        self.editing = True
        self._emit()
        return self.draft

    def update_draft(self, *, title: Optional[str] = None, content: Optional[str] = None) -> Draft:
        if title is not None:
            self.draft.title = title
        if content is not None:
            self.draft.content = content
        self._emit()
        return self.draft

    def begin_edit(self, note: Note) -> Draft:
        # copy the tag list so draft edits never reach the stored note
        self.draft = Draft(
            id=note.id, title=note.title, content=note.content, tags=list(note.tags)
        )
        self.tag_input = format_tags(self.draft.tags)
        self.editing = True
        self._emit()
        return self.draft

    def edit(self, note_id: int) -> Optional[Draft]:
        note = self.get(note_id)
        if note is None:
            logger.debug("Edit requested for unknown note %s", note_id)
            return None
        return self.begin_edit(note)

    def cancel(self) -> None:
        self._reset_draft()
        self.editing = False
        self._emit()

    def set_tag_input(self, text: str) -> None:
        self.tag_input = text
        self._emit()

    def commit_tag_input(self, raw_text: Optional[str] = None) -> Draft:
        """Replace the draft's tags with the parsed input; blank input is ignored."""
        text = self.tag_input if raw_text is None else raw_text
        if not text.strip():
            return self.draft
        self.tag_input = text
        self.draft.tags = parse_tags(self.tag_input)
        self._emit()
        return self.draft

    def remove_tag(self, tag: str) -> Draft:
        self.draft.tags = [t for t in self.draft.tags if t != tag]
        self.tag_input = format_tags(self.draft.tags)
        self._emit()
        return self.draft

    def save_draft(
        self,
        draft: Optional[Draft] = None,
        *,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Optional[Note]:
        """
        Commit the draft. Returns the stored note, or None when both title
        and content are blank (nothing changes, the draft is kept).
        """
        if draft is not None:
            self.draft = draft.model_copy(deep=True)
        if title is not None:
            self.draft.title = title
        if content is not None:
            self.draft.content = content

        d = self.draft
        if d.is_blank():
            return None

        existing = self.get(d.id) if d.id is not None else None
        if existing is not None:
            saved = existing.model_copy(
                update={"title": d.title, "content": d.content, "tags": list(d.tags)}
            )
            self.notes = [saved if n.id == saved.id else n for n in self.notes]
            logger.info("Updated note %s", saved.id)
        else:
            now = self.clock()
            saved = Note(
                id=self._next_id(now),
                title=d.title,
                content=d.content,
                tags=list(d.tags),
                created_at=now,
            )
            self.notes = [*self.notes, saved]
            logger.info("Created note %s", saved.id)

        self._reset_draft()
        self.editing = False
        self.persist()
        self._emit()
        return saved

    # ---------- collection intents ----------
    def delete_note(self, note_id: int) -> bool:
        remaining = [n for n in self.notes if n.id != note_id]
        if len(remaining) == len(self.notes):
            return False
        self.notes = remaining
        logger.info("Deleted note %s", note_id)
        self.persist()
        self._emit()
        return True

    def set_search(self, text: str) -> None:
        self.search_query = text or ""
        self._emit()

    def set_filter_tag(self, tag: str) -> None:
        self.filter_tag = tag or ""
        self._emit()

    # ---------- helpers ----------
    def _reset_draft(self) -> None:
        self.draft = Draft()
        self.tag_input = ""

    def _next_id(self, now: datetime) -> int:
        # millisecond clock like stored ids, but never repeats or goes backwards
        candidate = int(now.timestamp() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id


def open_store(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> NoteStore:
    """Build and load a NoteStore from settings (SQLite storage by default)."""
    settings = settings or load_settings()
    store = NoteStore(
        storage if storage is not None else SqlStorage(),
        key=settings.storage_key,
        persist_empty=settings.persist_empty,
    )
    store.load_initial()
    return store
