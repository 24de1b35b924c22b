"""Core data models for the journal.

Framework-agnostic entry, candidate, form and identity types.  Wire
conversion uses the column names of the hosted ``journal_entries`` table
(``user_id``, ``created_at``, ``is_public``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from daybook.core.exceptions import DataProcessingError


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Some backends hand back a full timestamp for DATE columns
        return date.fromisoformat(value[:10])
    raise ValueError(f"not a date: {value!r}")


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"not a timestamp: {value!r}")


@dataclass(frozen=True)
class Identity:
    """The authenticated principal on whose behalf entries are read and written."""

    id: str
    email: str | None = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Identity id must be a non-empty string")


@dataclass(frozen=True)
class NewEntry:
    """An entry candidate that has not been stored yet (no id, no created_at)."""

    owner_id: str
    date: date
    content: str
    title: str | None = None
    is_public: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "user_id": self.owner_id,
            "title": self.title,
            "content": self.content,
            "is_public": self.is_public,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class JournalEntry:
    """A stored journal entry.

    Attributes:
        id: Opaque identifier assigned by the backend.
        owner_id: Identity that owns the entry.
        date: Calendar date of authorship; the sort key.
        content: Entry text, never blank.
        title: Optional title. ``None`` means no title, which is not the same as ``""``.
        is_public: Visibility flag, enforced by the backend.
        created_at: Backend-assigned creation timestamp, informational only.
    """

    id: str
    owner_id: str
    date: date
    content: str
    title: str | None = None
    is_public: bool = False
    created_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError("Entry content must be a non-empty string")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> JournalEntry:
        """Build an entry from a backend row.

        Raises:
            DataProcessingError: if a required column is missing or malformed.
        """
        try:
            return cls(
                id=str(record["id"]),
                owner_id=str(record["user_id"]),
                date=_parse_date(record["date"]),
                content=record["content"],
                title=record.get("title"),
                is_public=bool(record.get("is_public", False)),
                created_at=_parse_timestamp(record.get("created_at")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataProcessingError(f"Malformed journal entry record: {e}") from e

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.owner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "date": self.date.isoformat(),
            "title": self.title,
            "content": self.content,
            "is_public": self.is_public,
        }

    def __repr__(self) -> str:
        preview = self.content[:40] + "..." if len(self.content) > 40 else self.content
        return f"JournalEntry(id='{self.id}', date={self.date.isoformat()}, content='{preview}')"


@dataclass
class EntryForm:
    """Caller-visible state of the "new entry" form."""

    title: str = ""
    content: str = ""
    is_public: bool = False

    @property
    def can_submit(self) -> bool:
        """Whether the form holds enough to submit (content non-blank)."""
        return bool(self.content.strip())

    def clear(self) -> None:
        self.title = ""
        self.content = ""
        self.is_public = False

    def to_candidate(self, owner_id: str, today: date) -> NewEntry:
        """Trim the fields into an insert candidate; a blank title becomes ``None``."""
        return NewEntry(
            owner_id=owner_id,
            date=today,
            title=self.title.strip() or None,
            content=self.content.strip(),
            is_public=self.is_public,
        )
