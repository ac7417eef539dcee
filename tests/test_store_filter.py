from datetime import datetime, UTC

from tagnotes.models import Note
from tagnotes.services import filtered_view
from tagnotes.storage import MemoryStorage
from tagnotes.store import NoteStore

T = datetime(2026, 1, 1, tzinfo=UTC)

NOTES = [
    Note(id=1, title="Hello World", content="first", tags=["work"], created_at=T),
    Note(id=2, title="groceries", content="milk, eggs", tags=["home", "Work"], created_at=T),
    Note(id=3, title="plan", content="say hello to the team", tags=["work", "ideas"], created_at=T),
    Note(id=4, title="misc", content="nothing", tags=["Hello-tag"], created_at=T),
]


def test_empty_query_and_filter_returns_everything_in_order():
    assert filtered_view(NOTES, "", "") == NOTES


def test_search_is_case_insensitive_over_title_content_and_tags():
    assert [n.id for n in filtered_view(NOTES, "hello", "")] == [1, 3, 4]
    assert [n.id for n in filtered_view(NOTES, "EGGS", "")] == [2]
    assert [n.id for n in filtered_view(NOTES, "IDEA", "")] == [3]


def test_tag_filter_is_exact_membership():
    assert [n.id for n in filtered_view(NOTES, "", "work")] == [1, 3]
    assert [n.id for n in filtered_view(NOTES, "", "Work")] == [2]
    assert filtered_view(NOTES, "", "wor") == []


def test_search_and_tag_filter_combine():
    assert [n.id for n in filtered_view(NOTES, "hello", "work")] == [1, 3]
    assert filtered_view(NOTES, "milk", "work") == []


def test_store_view_uses_search_and_filter_state():
    storage = MemoryStorage()
    store = NoteStore(storage)
    store.load_initial()
    store.notes = list(NOTES)

    store.set_search("hello")
    store.set_filter_tag("work")
    view = store.view()
    assert [n.id for n in view.notes] == [1, 3]
    assert view.total == 4
    assert view.tags == ["work", "home", "Work", "ideas", "Hello-tag"]
    assert (view.search_query, view.filter_tag) == ("hello", "work")

    store.set_search("")
    store.set_filter_tag("")
    assert store.filtered_view() == NOTES
