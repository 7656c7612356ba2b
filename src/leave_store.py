"""
Durable leave record storage.

Records live in a single JSON array on disk. The store never edits or
removes a record: every write is the full previous collection plus the
new entries.
"""

import json
import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from src.observability import trace_span

logger = logging.getLogger(__name__)

# Day token as typed by the user ("5 Feb", "Feb 10"). Never calendar-checked.
DayToken = NewType("DayToken", str)


class LeaveStoreError(RuntimeError):
    """Raised when the leave file cannot be read or written."""


class LeaveType(str, Enum):
    """Kinds of leave the assistant can record."""

    SICK = "sick"
    CASUAL = "casual"
    UNSPECIFIED = "unspecified"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveRecord(BaseModel):
    """A single applied leave. Immutable once created."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    type: LeaveType
    date: str
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")


_records_adapter = TypeAdapter(list[LeaveRecord])


class JsonLeaveStore:
    """
    Leave records persisted as a JSON array.

    Persistence contract:
    - load_all(): every record in append order
    - save_all(records): replace the file contents with a new set

    append() is load, append, overwrite. It is not atomic across
    concurrent requests; records are only ever added so nothing is lost,
    but ordering between racing writers is not guaranteed.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._ensure_file()

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            raise LeaveStoreError(f"Cannot initialise leave file {self.path}: {e}") from e
        logger.info(f"Initialised empty leave file at {self.path}")

    def load_all(self) -> list[LeaveRecord]:
        """Return every stored record in storage order."""
        try:
            raw = self.path.read_text(encoding="utf-8")
            return _records_adapter.validate_json(raw)
        except (OSError, ValidationError) as e:
            logger.error(f"Failed to read leave file {self.path}: {e}")
            raise LeaveStoreError(f"Cannot read leave records from {self.path}") from e

    def save_all(self, records: list[LeaveRecord]) -> None:
        """Overwrite the file with the given records."""
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"Failed to write leave file {self.path}: {e}")
            raise LeaveStoreError(f"Cannot write leave records to {self.path}") from e

    def append(self, session_id: str, leave_type: LeaveType, date: DayToken) -> LeaveRecord:
        """Create a record and persist it after the existing ones."""
        record = LeaveRecord(session_id=session_id, type=leave_type, date=date)

        with trace_span("leave_store_append", session=session_id, type=leave_type.value):
            records = self.load_all()
            records.append(record)
            self.save_all(records)

        logger.info(f"Recorded {leave_type.value} leave for session {session_id}: {date}")
        return record

    def find(self, session_id: str, leave_type: LeaveType | None = None) -> list[LeaveRecord]:
        """Records of one session, optionally of one type, in append order."""
        return [
            record
            for record in self.load_all()
            if record.session_id == session_id
            and (leave_type is None or record.type == leave_type)
        ]

    def count(self) -> int:
        return len(self.load_all())
