"""
study/service.py -- Ownership-checked folder and flashcard operations.

Every operation on a specific record follows the same order:
  1. load by id              -> NotFound (404) if absent
  2. compare owner to caller -> Forbidden (403) if different
  3. perform the write, scoped by (id, user_id) in the store

Step 3 returning False means the record disappeared between steps 1 and 3
(e.g. a concurrent delete); that is reported as NotFound.

Field constraints (trimmed, non-empty, length ceilings) are enforced by the
request models in api/models.py before any of these methods run.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import Forbidden, NotFound
from study.models import Flashcard, Folder
from study.store import StudyStore

logger = logging.getLogger("flashcards.study")


class StudyService:
    def __init__(self, store: StudyStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Ownership checks
    # ------------------------------------------------------------------

    def _owned_folder(self, folder_id: int, user_id: int, label: str = "Folder") -> Folder:
        folder = self.store.get_folder(folder_id)
        if folder is None:
            raise NotFound(f"{label} not found.")
        if folder.user_id != user_id:
            logger.warning("User %d denied access to folder %d", user_id, folder_id)
            raise Forbidden(f"Access denied to {label.lower()}.")
        return folder

    def _owned_flashcard(self, card_id: int, user_id: int) -> Flashcard:
        card = self.store.get_flashcard(card_id)
        if card is None:
            raise NotFound("Flashcard not found.")
        if card.user_id != user_id:
            logger.warning("User %d denied access to flashcard %d", user_id, card_id)
            raise Forbidden("Access denied.")
        return card

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def list_folders(self, user_id: int) -> list[Folder]:
        return self.store.list_folders(user_id)

    def create_folder(self, user_id: int, name: str) -> Folder:
        folder_id = self.store.create_folder(Folder(user_id=user_id, name=name))
        return self.store.get_folder(folder_id)

    def update_folder(self, user_id: int, folder_id: int, name: str) -> Folder:
        self._owned_folder(folder_id, user_id)
        if not self.store.rename_folder(folder_id, user_id, name):
            raise NotFound("Folder not found.")
        return self.store.get_folder(folder_id)

    def delete_folder(self, user_id: int, folder_id: int) -> None:
        """Delete a folder and every flashcard in it."""
        self._owned_folder(folder_id, user_id)
        if not self.store.delete_folder(folder_id, user_id):
            raise NotFound("Folder not found.")
        logger.info("User %d deleted folder %d", user_id, folder_id)

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    def list_flashcards(self, user_id: int, folder_id: Optional[int] = None) -> list[Flashcard]:
        return self.store.list_flashcards(user_id, folder_id=folder_id)

    def create_flashcard(self, user_id: int, folder_id: int, front_text: str, back_text: str) -> Flashcard:
        self._owned_folder(folder_id, user_id)
        card_id = self.store.create_flashcard(
            Flashcard(user_id=user_id, folder_id=folder_id, front_text=front_text, back_text=back_text)
        )
        return self.store.get_flashcard(card_id)

    def update_flashcard(self, user_id: int, card_id: int, front_text: str, back_text: str) -> Flashcard:
        self._owned_flashcard(card_id, user_id)
        if not self.store.update_flashcard(card_id, user_id, front_text=front_text, back_text=back_text):
            raise NotFound("Flashcard not found.")
        return self.store.get_flashcard(card_id)

    def move_flashcard(self, user_id: int, card_id: int, folder_id: int) -> Flashcard:
        """Move a flashcard into another folder; both must belong to the caller."""
        self._owned_flashcard(card_id, user_id)
        self._owned_folder(folder_id, user_id, label="Target folder")
        if not self.store.update_flashcard(card_id, user_id, folder_id=folder_id):
            raise NotFound("Flashcard not found.")
        return self.store.get_flashcard(card_id)

    def delete_flashcard(self, user_id: int, card_id: int) -> None:
        self._owned_flashcard(card_id, user_id)
        if not self.store.delete_flashcard(card_id, user_id):
            raise NotFound("Flashcard not found.")
