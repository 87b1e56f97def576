"""Tests for the file-backed store."""

import json
from datetime import datetime, timezone

import pytest

from interop.models import TxAction
from relayer.models import FinalizedItem, PendingItem, ScanState
from relayer.storage import FINALIZED_FILE, PENDING_FILE, SCAN_STATE_FILE, Store, strip_comments

from factories import tx_hash


@pytest.fixture
def store(tmp_path):
    return Store(tmp_path / "state", history_limit=3)


def finalized(n: int) -> FinalizedItem:
    return FinalizedItem(
        source_hash=tx_hash(n),
        finalized_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        reason="finalized",
    )


class TestFirstRun:
    def test_missing_files_return_zero_values(self, store):
        assert store.load_pending() == []
        assert store.load_finalized() == []
        assert store.load_scan_state().last_block == 0

    def test_empty_files_return_zero_values(self, store):
        store.data_dir.mkdir(parents=True)
        for name in (PENDING_FILE, FINALIZED_FILE, SCAN_STATE_FILE):
            (store.data_dir / name).write_text("  \n")

        assert store.load_pending() == []
        assert store.load_finalized() == []
        assert store.load_scan_state() == ScanState()


class TestPendingDocument:
    def test_comments_are_ignored(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / PENDING_FILE).write_text(
            "// queued by hand\n"
            "/* retry this one\n   after the batch executes */\n"
            f'[{{"hash": "{tx_hash(1)}", "status": "pending"}}]\n'
            "// trailing note\n"
        )

        items = store.load_pending()

        assert [item.hash for item in items] == [tx_hash(1)]
        assert items[0].needs_metadata

    def test_loosely_typed_entries_are_coerced(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / PENDING_FILE).write_text(
            f'[{{"hash": "{tx_hash(1)}", "amount": 0, "action": "deposit"}},'
            f' {{"hash": "{tx_hash(2)}", "amount": 1.5, "action": "bridge"}}]'
        )

        first, second = store.load_pending()

        assert (first.action, first.amount) == (TxAction.DEPOSIT, "0")
        assert (second.action, second.amount) == (None, "1.5")
        assert second.needs_metadata

    def test_invalid_entries_are_dropped(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / PENDING_FILE).write_text(
            f'[{{"amount": "1"}}, "{tx_hash(3)}", {{"hash": "{tx_hash(1)}"}}]'
        )

        assert [item.hash for item in store.load_pending()] == [tx_hash(1)]

    def test_non_array_document_is_ignored(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / PENDING_FILE).write_text(f'{{"hash": "{tx_hash(1)}"}}')

        assert store.load_pending() == []

    def test_only_comments_means_empty_queue(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / PENDING_FILE).write_text("// nothing yet\n/* */\n")
        assert store.load_pending() == []

    def test_strip_comments_keeps_urls_inside_values(self):
        text = '[{"hash": "0x1", "note": "see https://example.org"}]'
        assert strip_comments(text) == text

    def test_save_writes_camel_case_without_empty_fields(self, store):
        store.save_pending([
            PendingItem(
                hash=tx_hash(1),
                action=TxAction.DEPOSIT,
                amount="1.5",
                last_finalize_hash=tx_hash(99),
            ),
        ])

        raw = json.loads((store.data_dir / PENDING_FILE).read_text())
        assert raw[0]["hash"] == tx_hash(1)
        assert raw[0]["action"] == "Deposit"
        assert raw[0]["amount"] == "1.5"
        assert raw[0]["lastFinalizeHash"] == tx_hash(99)
        assert "addedAt" in raw[0]
        assert "updatedAt" not in raw[0]

        loaded = store.load_pending()
        assert loaded[0].last_finalize_hash == tx_hash(99)
        assert loaded[0].action == TxAction.DEPOSIT

    def test_save_leaves_no_temporary_files(self, store):
        store.save_pending([PendingItem(hash=tx_hash(1))])
        store.save_pending([PendingItem(hash=tx_hash(2))])

        assert sorted(p.name for p in store.data_dir.iterdir()) == [PENDING_FILE]
        assert [i.hash for i in store.load_pending()] == [tx_hash(2)]


class TestEnqueue:
    def test_adds_new_items(self, store):
        added = store.enqueue([PendingItem(hash=tx_hash(1)), PendingItem(hash=tx_hash(2))])

        assert added == 2
        assert [i.hash for i in store.load_pending()] == [tx_hash(1), tx_hash(2)]

    def test_skips_pending_duplicates_case_insensitively(self, store):
        store.enqueue([PendingItem(hash=tx_hash(0xABC))])

        added = store.enqueue([PendingItem(hash="0x" + tx_hash(0xABC)[2:].upper())])

        assert added == 0
        assert len(store.load_pending()) == 1

    def test_skips_duplicates_within_batch(self, store):
        added = store.enqueue([PendingItem(hash=tx_hash(1)), PendingItem(hash=tx_hash(1))])

        assert added == 1

    def test_never_readds_finalized(self, store):
        store.save_finalized([finalized(5)])

        added = store.enqueue([PendingItem(hash=tx_hash(5))])

        assert added == 0
        assert store.load_pending() == []


class TestFinalizedHistory:
    def test_truncated_to_limit_newest_first(self, store):
        items = [finalized(n) for n in (9, 8, 7, 6, 5)]

        store.save_finalized(items)

        loaded = store.load_finalized()
        assert [i.source_hash for i in loaded] == [tx_hash(9), tx_hash(8), tx_hash(7)]

    def test_destination_hash_optional(self, store):
        store.save_finalized([finalized(1)])

        raw = json.loads((store.data_dir / FINALIZED_FILE).read_text())
        assert raw[0]["sourceHash"] == tx_hash(1)
        assert "destinationHash" not in raw[0]
        assert store.load_finalized()[0].destination_hash is None


class TestScanState:
    def test_round_trip_as_decimal_string(self, store):
        store.save_scan_state(ScanState(last_block=123456))

        raw = json.loads((store.data_dir / SCAN_STATE_FILE).read_text())
        assert raw == {"lastBlock": "123456"}
        assert store.load_scan_state().last_block == 123456

    def test_accepts_numeric_cursor(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / SCAN_STATE_FILE).write_text('{"lastBlock": 77}')

        assert store.load_scan_state().last_block == 77
