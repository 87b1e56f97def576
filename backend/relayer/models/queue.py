"""Persistent queue models.

These are the documents operators see and hand-edit, so they serialize to
camelCase JSON. Only ``hash`` is required on a pending entry; everything
else is filled in by the relayer.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from interop.models import TxAction, TxMetadata, to_int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_action(value):
    """Case-insensitive TxAction lookup; anything unrecognized becomes None."""
    if value is None or isinstance(value, TxAction):
        return value
    text = str(value).strip().lower()
    for action in TxAction:
        if action.value.lower() == text:
            return action
    return None


def parse_text(value):
    if value is None or isinstance(value, str):
        return value
    return str(value)


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PendingItem(_Document):
    """A source-chain transaction waiting to be finalized."""

    hash: str
    added_at: datetime = Field(default_factory=utcnow)
    action: TxAction | None = None
    amount: str | None = None
    last_finalize_hash: str | None = None
    updated_at: datetime | None = None
    failure_count: int = 0
    last_error: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v):
        return parse_action(v)

    @field_validator("amount", "last_error", mode="before")
    @classmethod
    def _parse_text(cls, v):
        return parse_text(v)

    @classmethod
    def from_metadata(cls, tx_hash: str, metadata: TxMetadata) -> "PendingItem":
        return cls(hash=tx_hash, action=metadata.action, amount=metadata.amount)

    @property
    def needs_metadata(self) -> bool:
        return self.action is None or self.amount is None


class FinalizedItem(_Document):
    """A transaction that no longer needs relaying."""

    source_hash: str
    destination_hash: str | None = None
    finalized_at: datetime = Field(default_factory=utcnow)
    action: TxAction = TxAction.UNKNOWN
    amount: str = "0"
    reason: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v):
        return parse_action(v) or TxAction.UNKNOWN

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, v):
        return parse_text(v) or "0"


class ScanState(_Document):
    """Highest source-chain block fully scanned (inclusive)."""

    last_block: int = 0

    @field_validator("last_block", mode="before")
    @classmethod
    def _parse_block(cls, v):
        return to_int(v) if v is not None else 0

    @field_serializer("last_block")
    def _block_as_string(self, v: int) -> str:
        return str(v)
