"""Unit tests for study/service.py ownership checks.

Covers:
- 404 for missing records, 403 for records owned by someone else
- move_flashcard checks the card first, then the target folder
"""

import pytest

from core.errors import Forbidden, NotFound
from study.service import StudyService
from study.store import StudyStore


@pytest.fixture
def service():
    store = StudyStore("sqlite:///:memory:")
    yield StudyService(store)
    store.close()


def test_create_and_update_folder(service):
    folder = service.create_folder(1, "Verbs")
    assert folder.id is not None
    assert service.update_folder(1, folder.id, "Nouns").name == "Nouns"


def test_missing_folder_is_not_found(service):
    with pytest.raises(NotFound):
        service.update_folder(1, 404, "x")
    with pytest.raises(NotFound):
        service.delete_folder(1, 404)


def test_foreign_folder_is_forbidden(service):
    folder = service.create_folder(1, "Mine")
    with pytest.raises(Forbidden):
        service.update_folder(2, folder.id, "Theirs")
    with pytest.raises(Forbidden):
        service.create_flashcard(2, folder.id, "q", "a")
    assert service.list_folders(1)[0].name == "Mine"


def test_move_flashcard_checks_target_folder(service):
    src = service.create_folder(1, "Src")
    card = service.create_flashcard(1, src.id, "q", "a")
    foreign = service.create_folder(2, "Foreign")

    with pytest.raises(NotFound, match="Target folder not found"):
        service.move_flashcard(1, card.id, 9999)
    with pytest.raises(Forbidden):
        service.move_flashcard(1, card.id, foreign.id)

    dst = service.create_folder(1, "Dst")
    moved = service.move_flashcard(1, card.id, dst.id)
    assert moved.folder_id == dst.id
    assert moved.folder_name == "Dst"


def test_foreign_flashcard_is_forbidden(service):
    folder = service.create_folder(1, "F")
    card = service.create_flashcard(1, folder.id, "q", "a")
    with pytest.raises(Forbidden):
        service.update_flashcard(2, card.id, "x", "y")
    with pytest.raises(Forbidden):
        service.delete_flashcard(2, card.id)
    with pytest.raises(NotFound):
        service.delete_flashcard(1, 9999)
    service.delete_flashcard(1, card.id)
    assert service.list_flashcards(1) == []
