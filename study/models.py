"""
study/models.py -- Domain dataclasses for folders and flashcards.

Pure data containers with zero logic. Ownership checks live in
study/service.py; SQL lives in study/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Folder:
    """A named group of flashcards belonging to one user.

    flashcard_count is filled in by StudyStore reads (get_folder, list_folders).
    id is None before the record is written to the database.
    """

    user_id: int
    name: str
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    flashcard_count: int = 0


@dataclass
class Flashcard:
    """A front/back card inside a folder.

    user_id duplicates the owning folder's user_id so ownership checks need
    no join. folder_name is filled in by reads that join the folder.
    """

    user_id: int
    folder_id: int
    front_text: str
    back_text: str
    id: Optional[int] = None
    created_at: str = ""
    folder_name: Optional[str] = None
