"""File-backed relayer state.

Three small JSON documents live in the data directory:

- pending-txs.json   - queue of source transactions still to finalize
- finalized-txs.json - most recent finalized items, newest first
- scan-state.json    - last fully scanned source-chain block

The store is the only writer of these files. Each save serializes the full
document first, writes it to a temporary file in the same directory and
atomically replaces the target, so a crash never leaves a truncated file.
The pending document may carry ``//`` and ``/* */`` comments added by an
operator; they are stripped on load and not preserved on save.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Iterable

import orjson
from pydantic import ValidationError

from relayer.models import FinalizedItem, PendingItem, ScanState

logger = logging.getLogger(__name__)

PENDING_FILE = "pending-txs.json"
FINALIZED_FILE = "finalized-txs.json"
SCAN_STATE_FILE = "scan-state.json"

DEFAULT_HISTORY_LIMIT = 50

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)


def strip_comments(text: str) -> str:
    """Remove /* block */ comments and whole-line // comments."""
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", text)).strip()


class Store:
    """Durable pending / finalized / scan-cursor state."""

    def __init__(self, data_dir: Path | str, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.data_dir = Path(data_dir)
        self.history_limit = history_limit

    # ------------------------------------------------------------------
    # Pending queue
    # ------------------------------------------------------------------

    def load_pending(self) -> list[PendingItem]:
        """Load the queue, skipping entries that cannot be parsed."""
        document = self._read(PENDING_FILE, allow_comments=True)
        if not document:
            return []
        if not isinstance(document, list):
            logger.error(f"{PENDING_FILE} must hold a JSON array, ignoring its contents")
            return []

        items = []
        for position, entry in enumerate(document):
            try:
                items.append(PendingItem.model_validate(entry))
            except ValidationError as e:
                logger.error(
                    f"Dropping invalid entry #{position} in {PENDING_FILE}: {entry!r} "
                    f"({e.error_count()} validation error(s))"
                )
        return items

    def save_pending(self, items: Iterable[PendingItem]) -> None:
        self._write(PENDING_FILE, [item.to_document() for item in items])

    def enqueue(self, candidates: Iterable[PendingItem]) -> int:
        """Append candidates not already pending or finalized.

        Returns the number of items actually added.
        """
        pending = self.load_pending()
        known = {item.hash.lower() for item in pending}
        known.update(item.source_hash.lower() for item in self.load_finalized())

        added = 0
        for candidate in candidates:
            key = candidate.hash.lower()
            if key in known:
                continue
            known.add(key)
            pending.append(candidate)
            added += 1
            logger.info(
                f"Queued {candidate.hash} ({candidate.action.value if candidate.action else 'Unknown'} "
                f"{candidate.amount or '0'})"
            )

        if added:
            self.save_pending(pending)
        return added

    # ------------------------------------------------------------------
    # Finalized history
    # ------------------------------------------------------------------

    def load_finalized(self) -> list[FinalizedItem]:
        document = self._read(FINALIZED_FILE)
        if not document:
            return []
        return [FinalizedItem.model_validate(entry) for entry in document]

    def save_finalized(self, items: Iterable[FinalizedItem]) -> None:
        """Persist history, keeping only the newest history_limit entries."""
        kept = list(items)[: self.history_limit]
        self._write(FINALIZED_FILE, [item.to_document() for item in kept])

    # ------------------------------------------------------------------
    # Scan cursor
    # ------------------------------------------------------------------

    def load_scan_state(self) -> ScanState:
        document = self._read(SCAN_STATE_FILE)
        if not document:
            return ScanState()
        return ScanState.model_validate(document)

    def save_scan_state(self, state: ScanState) -> None:
        self._write(SCAN_STATE_FILE, state.to_document())

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read(self, name: str, allow_comments: bool = False) -> Any:
        path = self._path(name)
        if not path.exists():
            return None
        text = path.read_text(encoding="utf-8")
        if allow_comments:
            text = strip_comments(text)
        if not text.strip():
            return None
        return orjson.loads(text)

    def _write(self, name: str, document: Any) -> None:
        payload = orjson.dumps(document, option=orjson.OPT_INDENT_2)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path(name))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
