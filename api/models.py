"""
API request and response models for the Flashcards REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py and study/models.py, which own
the internal domain representation. Route handlers map between the two.

Wire format is camelCase (folderId, frontText, createdAt); Python attributes
stay snake_case. _ApiModel's alias generator does the translation, and
populate_by_name lets tests and internal callers use either spelling.

Field constraints here are the input validation layer: anything that fails
them is rejected with 400 before a service or store is touched.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from study.models import Flashcard, Folder

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

FOLDER_NAME_MAX = 100
CARD_TEXT_MAX = 1000
# bcrypt only looks at the first 72 bytes of a password.
PASSWORD_MAX_BYTES = 72

_Email = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]
_FolderName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=FOLDER_NAME_MAX)]
_CardText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=CARD_TEXT_MAX)]


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")
    return value


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(_ApiModel):
    """Request body for POST /api/auth/register.

    Password strength is not checked here: the shared password policy runs in
    AuthService so registration and reset report identical rule lists.
    """

    email: _Email
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(_ApiModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_BYTES)


class EmailRequest(_ApiModel):
    """Request body for resend-verification and forgot-password."""

    email: _Email


class ResetPasswordRequest(_ApiModel):
    token: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1)

    @field_validator("new_password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class MessageResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    message: str


class RegisterResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    message: str
    user_id: int


class UserPublic(_ApiModel):
    """The only user fields ever returned to clients."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str


class LoginResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserPublic


class MeResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    email_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "MeResponse":
        return cls(id=user.id, email=user.email, email_verified=user.email_verified)


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------


class FolderWrite(_ApiModel):
    """Request body for POST /api/folders and PUT /api/folders/{id}."""

    name: _FolderName


class FolderOut(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    created_at: str
    flashcard_count: int = 0

    @classmethod
    def from_folder(cls, folder: Folder) -> "FolderOut":
        return cls(
            id=folder.id,
            name=folder.name,
            created_at=folder.created_at,
            flashcard_count=folder.flashcard_count,
        )


class FolderResponse(_ApiModel):
    folder: FolderOut


class FolderListResponse(_ApiModel):
    folders: list[FolderOut]


# ---------------------------------------------------------------------------
# Flashcards
# ---------------------------------------------------------------------------


class FlashcardCreate(_ApiModel):
    folder_id: int
    front_text: _CardText
    back_text: _CardText


class FlashcardUpdate(_ApiModel):
    front_text: _CardText
    back_text: _CardText


class FlashcardMove(_ApiModel):
    folder_id: int


class FolderSummary(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class FlashcardOut(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    folder_id: int
    front_text: str
    back_text: str
    created_at: str
    folder: Optional[FolderSummary] = None

    @classmethod
    def from_flashcard(cls, card: Flashcard) -> "FlashcardOut":
        folder = FolderSummary(id=card.folder_id, name=card.folder_name) if card.folder_name is not None else None
        return cls(
            id=card.id,
            folder_id=card.folder_id,
            front_text=card.front_text,
            back_text=card.back_text,
            created_at=card.created_at,
            folder=folder,
        )


class FlashcardResponse(_ApiModel):
    flashcard: FlashcardOut


class FlashcardListResponse(_ApiModel):
    flashcards: list[FlashcardOut]


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    errors lists every violated rule when more than one input check failed.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    errors: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
