"""Unit tests for study/store.py.

Covers:
- Folder listing: newest first, per-folder flashcard counts, scoped to owner
- Owner-scoped writes: rename/update/delete by a non-owner touch nothing
- Folder delete removes its flashcards in the same transaction
- Flashcard reads carry the folder name; folder_id filter on listing
"""

import pytest
from sqlalchemy.exc import IntegrityError

from study.models import Flashcard, Folder
from study.store import StudyStore


@pytest.fixture
def store():
    s = StudyStore("sqlite:///:memory:")
    yield s
    s.close()


def _card(store: StudyStore, user_id: int, folder_id: int, front: str = "front") -> int:
    return store.create_flashcard(Flashcard(user_id=user_id, folder_id=folder_id, front_text=front, back_text="back"))


def test_list_folders_newest_first_with_counts(store):
    first = store.create_folder(Folder(user_id=1, name="First"))
    second = store.create_folder(Folder(user_id=1, name="Second"))
    store.create_folder(Folder(user_id=2, name="Someone else's"))
    _card(store, 1, first)
    _card(store, 1, first)

    folders = store.list_folders(1)
    assert [f.id for f in folders] == [second, first]
    assert {f.name: f.flashcard_count for f in folders} == {"First": 2, "Second": 0}


def test_get_folder_includes_count(store):
    folder_id = store.create_folder(Folder(user_id=1, name="Verbs"))
    _card(store, 1, folder_id)
    folder = store.get_folder(folder_id)
    assert folder.user_id == 1
    assert folder.flashcard_count == 1
    assert folder.created_at


def test_get_missing_folder_returns_none(store):
    assert store.get_folder(999) is None


def test_rename_folder_is_owner_scoped(store):
    folder_id = store.create_folder(Folder(user_id=1, name="Old"))
    assert store.rename_folder(folder_id, 2, "Hijacked") is False
    assert store.get_folder(folder_id).name == "Old"
    assert store.rename_folder(folder_id, 1, "New") is True
    assert store.get_folder(folder_id).name == "New"


def test_delete_folder_cascades_to_flashcards(store):
    folder_id = store.create_folder(Folder(user_id=1, name="Doomed"))
    keep_id = store.create_folder(Folder(user_id=1, name="Keep"))
    doomed_card = _card(store, 1, folder_id)
    kept_card = _card(store, 1, keep_id)

    assert store.delete_folder(folder_id, 1) is True
    assert store.get_folder(folder_id) is None
    assert store.get_flashcard(doomed_card) is None
    assert store.get_flashcard(kept_card) is not None


def test_delete_folder_by_non_owner_deletes_nothing(store):
    folder_id = store.create_folder(Folder(user_id=1, name="Mine"))
    card_id = _card(store, 1, folder_id)
    assert store.delete_folder(folder_id, 2) is False
    assert store.get_folder(folder_id) is not None
    assert store.get_flashcard(card_id) is not None


def test_flashcard_requires_existing_folder(store):
    with pytest.raises(IntegrityError):
        _card(store, 1, 12345)


def test_flashcard_reads_carry_folder_name(store):
    folder_id = store.create_folder(Folder(user_id=1, name="Spanish"))
    card = store.get_flashcard(_card(store, 1, folder_id, front="hola"))
    assert card.front_text == "hola"
    assert card.folder_name == "Spanish"


def test_list_flashcards_filter_and_order(store):
    a = store.create_folder(Folder(user_id=1, name="A"))
    b = store.create_folder(Folder(user_id=1, name="B"))
    c1 = _card(store, 1, a)
    c2 = _card(store, 1, b)
    c3 = _card(store, 1, a)
    other = store.create_folder(Folder(user_id=2, name="Other"))
    _card(store, 2, other)

    assert [c.id for c in store.list_flashcards(1)] == [c3, c2, c1]
    assert [c.id for c in store.list_flashcards(1, folder_id=a)] == [c3, c1]
    assert store.list_flashcards(1, folder_id=other) == []


def test_update_and_delete_flashcard_are_owner_scoped(store):
    folder_id = store.create_folder(Folder(user_id=1, name="F"))
    card_id = _card(store, 1, folder_id, front="before")

    assert store.update_flashcard(card_id, 2, front_text="stolen") is False
    assert store.get_flashcard(card_id).front_text == "before"
    assert store.update_flashcard(card_id, 1, front_text="after", back_text="b2") is True
    assert store.get_flashcard(card_id).front_text == "after"

    assert store.delete_flashcard(card_id, 2) is False
    assert store.delete_flashcard(card_id, 1) is True
    assert store.get_flashcard(card_id) is None


def test_out_of_range_ids_find_nothing(store):
    folder_id = store.create_folder(Folder(user_id=1, name="F"))
    _card(store, 1, folder_id)
    assert store.get_folder(2**63) is None
    assert store.get_flashcard(2**70) is None
    assert store.get_folder(0) is None
    assert store.list_flashcards(1, folder_id=2**64) == []


def test_database_url_is_required():
    with pytest.raises(TypeError):
        StudyStore()
