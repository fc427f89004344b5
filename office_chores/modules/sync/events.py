"""Typed change notifications pushed by the remote data service."""

from pydantic import BaseModel
from typing import Any, Dict, Optional, Tuple
from enum import Enum


class Collection(str, Enum):
    MEMBERS = "members"
    CHORES = "chores"
    COMPLETIONS = "completions"


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    ANY = "any"


class ChangeEvent(BaseModel):
    collection: Collection
    kind: ChangeKind
    payload: Dict[str, Any] = {}  # full row for insert/update, prior row (at least id) for delete

    class Config:
        frozen = True

    @property
    def row_id(self) -> Optional[str]:
        value = self.payload.get("id")
        return str(value) if value is not None else None


def decode_realtime_payload(payload: Dict[str, Any]) -> Tuple[ChangeKind, Dict[str, Any]]:
    """
    Turn a Supabase realtime postgres_changes payload into (kind, row).

    Accepts both the python client shape ({"data": {"type", "record",
    "old_record"}}) and the flattened shape ({"eventType", "new", "old"}).
    """
    data = payload.get("data", payload)
    raw_kind = str(data.get("type") or data.get("eventType") or "").lower()
    try:
        kind = ChangeKind(raw_kind)
    except ValueError:
        kind = ChangeKind.ANY

    if kind == ChangeKind.DELETE:
        row = data.get("old_record") or data.get("old") or {}
    else:
        row = data.get("record") or data.get("new") or {}
    return kind, dict(row)
