"""
study/store.py -- SQLAlchemy-backed persistence for folders and flashcards.

Uses SQLAlchemy Core (not ORM) so the dataclasses in study/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. StudyStore is the repository; the _row_to_*
functions are the mappers. Services never touch SQL directly.

Ownership:
  Every mutating method takes the caller's user_id and puts it in the WHERE
  clause next to the record id (IDOR guard). StudyService still loads the
  record first to tell "does not exist" (404) apart from "not yours" (403),
  but the write itself can never touch another user's row.

Cascade:
  flashcards.folder_id is a FOREIGN KEY ... ON DELETE CASCADE, and
  delete_folder() also removes the folder's flashcards explicitly in the same
  transaction, so no orphan survives even on engines where SQLite's
  foreign_keys pragma is off.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = StudyStore("sqlite:///flashcards.db")        # SQLite file
    store = StudyStore("postgresql://user:pw@host/db")  # PostgreSQL
    folder_id = store.create_folder(Folder(user_id=1, name="Spanish"))
    card_id = store.create_flashcard(Flashcard(user_id=1, folder_id=folder_id, front_text="hola", back_text="hi"))
    store.delete_folder(folder_id, user_id=1)
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    select,
)
from sqlalchemy.engine import Engine

from study.models import Flashcard, Folder


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_folders = Table(
    "folders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(100), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_flashcards = Table(
    "flashcards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("folder_id", Integer, ForeignKey("folders.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("front_text", Text, nullable=False),
    Column("back_text", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys=ON is what makes the
    ON DELETE CASCADE clause on flashcards.folder_id take effect.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# Newest first; id breaks ties between rows created in the same microsecond.
_FOLDER_ORDER = (_folders.c.created_at.desc(), _folders.c.id.desc())
_CARD_ORDER = (_flashcards.c.created_at.desc(), _flashcards.c.id.desc())

# Ids are 64-bit signed integers; anything outside that range cannot exist.
_MAX_ID = 2**63 - 1


def _valid_id(value: int) -> bool:
    return 0 < value <= _MAX_ID


def _folder_select():
    """SELECT folders with a per-folder flashcard count (one grouped LEFT JOIN)."""
    return (
        select(_folders, func.count(_flashcards.c.id).label("flashcard_count"))
        .select_from(_folders.outerjoin(_flashcards, _flashcards.c.folder_id == _folders.c.id))
        .group_by(_folders.c.id)
    )


def _card_select():
    """SELECT flashcards joined to their folder's name."""
    return select(_flashcards, _folders.c.name.label("folder_name")).select_from(
        _flashcards.outerjoin(_folders, _flashcards.c.folder_id == _folders.c.id)
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class StudyStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # SQLite requires check_same_thread=False when used from FastAPI's
            # threadpool where the same connection may be accessed across
            # threads managed by the ASGI server.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def create_folder(self, folder: Folder) -> int:
        """Insert a new folder and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _folders.insert().values(
                    user_id=folder.user_id,
                    name=folder.name,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_folder(self, folder_id: int) -> Optional[Folder]:
        """Fetch a single folder (with its flashcard count) by ID regardless of owner.

        Returns None if not found.
        """
        if not _valid_id(folder_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_folder_select().where(_folders.c.id == folder_id)).fetchone()
        return _row_to_folder(row) if row is not None else None

    def list_folders(self, user_id: int) -> list[Folder]:
        """Return the user's folders, newest first, each with its flashcard count.

        One grouped LEFT JOIN instead of a count query per folder.
        """
        stmt = _folder_select().where(_folders.c.user_id == user_id).order_by(*_FOLDER_ORDER)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_folder(r) for r in rows]

    def rename_folder(self, folder_id: int, user_id: int, name: str) -> bool:
        """Rename a folder owned by user_id. Returns False if no such owned folder."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _folders.update()
                .where((_folders.c.id == folder_id) & (_folders.c.user_id == user_id))
                .values(name=name)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_folder(self, folder_id: int, user_id: int) -> bool:
        """Delete a folder owned by user_id together with all of its flashcards.

        Both DELETEs run on one connection and are committed together.
        Returns False (and deletes nothing) if no such owned folder exists.
        """
        with self.engine.connect() as conn:
            owned = conn.execute(
                select(_folders.c.id).where((_folders.c.id == folder_id) & (_folders.c.user_id == user_id))
            ).fetchone()
            if owned is None:
                conn.rollback()
                return False
            conn.execute(_flashcards.delete().where(_flashcards.c.folder_id == folder_id))
            conn.execute(_folders.delete().where(_folders.c.id == folder_id))
            conn.commit()
        return True

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    def create_flashcard(self, card: Flashcard) -> int:
        """Insert a new flashcard and return its assigned database ID.

        The caller is responsible for checking that folder_id belongs to
        user_id; the FOREIGN KEY only guarantees the folder exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _flashcards.insert().values(
                    user_id=card.user_id,
                    folder_id=card.folder_id,
                    front_text=card.front_text,
                    back_text=card.back_text,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_flashcard(self, card_id: int) -> Optional[Flashcard]:
        """Fetch a single flashcard (with its folder name) by ID. Returns None if not found."""
        if not _valid_id(card_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_card_select().where(_flashcards.c.id == card_id)).fetchone()
        return _row_to_flashcard(row) if row is not None else None

    def list_flashcards(self, user_id: int, folder_id: Optional[int] = None) -> list[Flashcard]:
        """Return the user's flashcards, newest first, optionally limited to one folder."""
        if folder_id is not None and not _valid_id(folder_id):
            return []
        stmt = _card_select().where(_flashcards.c.user_id == user_id)
        if folder_id is not None:
            stmt = stmt.where(_flashcards.c.folder_id == folder_id)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt.order_by(*_CARD_ORDER)).fetchall()
        return [_row_to_flashcard(r) for r in rows]

    def update_flashcard(self, card_id: int, user_id: int, **fields) -> bool:
        """Update mutable fields on a flashcard owned by user_id.

        Accepts any subset of: front_text, back_text, folder_id.
        Returns True if a row was updated, False if no such owned card exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _flashcards.update()
                .where((_flashcards.c.id == card_id) & (_flashcards.c.user_id == user_id))
                .values(**fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_flashcard(self, card_id: int, user_id: int) -> bool:
        """Delete a flashcard owned by user_id. Returns False if no such owned card exists."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _flashcards.delete().where((_flashcards.c.id == card_id) & (_flashcards.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_folder(row) -> Folder:
    return Folder(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        created_at=row.created_at,
        flashcard_count=getattr(row, "flashcard_count", 0) or 0,
    )


def _row_to_flashcard(row) -> Flashcard:
    return Flashcard(
        id=row.id,
        user_id=row.user_id,
        folder_id=row.folder_id,
        front_text=row.front_text,
        back_text=row.back_text,
        created_at=row.created_at,
        folder_name=getattr(row, "folder_name", None),
    )
