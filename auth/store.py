"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as study/store.py).
UserStore is the repository; _row_to_user is the mapper.
Services never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  email, verification_token and reset_token are UNIQUE. The services check for
  existing rows first to give friendly errors, but the constraint is the
  authoritative guard: a concurrent duplicate surfaces as IntegrityError.

  Token consumption (mark_email_verified, consume_reset_token) is a single
  conditional UPDATE keyed on the token value, so two concurrent requests
  presenting the same token cannot both succeed.

Layer rule: no imports from api/, study/, or notify/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import User


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),  # lower-cased
    Column("password_hash", Text, nullable=False),
    Column("email_verified", Integer, nullable=False, server_default="0"),
    Column("verification_token", String(128), unique=True),
    Column("reset_token", String(128), unique=True),
    Column("reset_token_expiry", String(32)),  # ISO 8601 UTC
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(get_settings().database_url)
        user_id = store.create_user(User(email="a@b.co", password_hash=hash_password("Secret123")))
        user = store.get_by_email("A@B.co")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email (or a token) already
        exists. AuthService.register catches it and reports a conflict.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=normalize_email(user.email),
                    password_hash=user.password_hash,
                    email_verified=1 if user.email_verified else 0,
                    verification_token=user.verification_token,
                    reset_token=user.reset_token,
                    reset_token_expiry=user.reset_token_expiry,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email, case-insensitively. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == normalize_email(email))).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_verification_token(self, token: str) -> User | None:
        """Exact-match lookup on verification_token. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.verification_token == token)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_reset_token(self, token: str) -> User | None:
        """Exact-match lookup on reset_token. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.reset_token == token)).fetchone()
        return _row_to_user(row) if row is not None else None

    def set_verification_token(self, user_id: int, token: str) -> bool:
        """Replace the user's verification token. Returns False if user_id was not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(verification_token=token))
            conn.commit()
        return result.rowcount > 0

    def mark_email_verified(self, user_id: int, token: str) -> bool:
        """Flip email_verified and clear the verification token in one statement.

        The WHERE clause requires the token to still be present and the user to
        still be unverified. Returns False when another request consumed the
        token first.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(
                    (_users.c.id == user_id)
                    & (_users.c.verification_token == token)
                    & (_users.c.email_verified == 0)
                )
                .values(email_verified=1, verification_token=None)
            )
            conn.commit()
        return result.rowcount > 0

    def set_reset_token(self, user_id: int, token: str, expiry_iso: str) -> bool:
        """Store a reset token and its expiry, overwriting any previous pair."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(reset_token=token, reset_token_expiry=expiry_iso)
            )
            conn.commit()
        return result.rowcount > 0

    def consume_reset_token(self, user_id: int, token: str, password_hash: str) -> bool:
        """Set the new password hash and clear the reset token pair.

        Conditional on the token still matching, so a reset token changes the
        password at most once. Returns False if it was already consumed.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where((_users.c.id == user_id) & (_users.c.reset_token == token))
                .values(password_hash=password_hash, reset_token=None, reset_token_expiry=None)
            )
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /api/health."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        email_verified=bool(row.email_verified),
        verification_token=row.verification_token,
        reset_token=row.reset_token,
        reset_token_expiry=row.reset_token_expiry,
        created_at=row.created_at,
    )
