"""Tests for cross-layer log matching and payload location."""

from interop.logs import find_log_index, references_address, resolve_sender
from interop.models import L2ToL1Log
from interop.payload import locate_message

from factories import (
    BASE_TOKEN,
    INTEROP_CENTER,
    OTHER_SENDER,
    SYSTEM_MESSENGER,
    cross_layer_log,
    make_receipt,
    message_event,
    padded_key,
    tx_hash,
    withdrawal_payload,
)


class TestAddressMatching:
    def test_key_reference_is_case_insensitive(self):
        log = L2ToL1Log(sender=SYSTEM_MESSENGER, key=padded_key(INTEROP_CENTER).upper())
        assert references_address(log, INTEROP_CENTER)

    def test_sender_reference(self):
        log = L2ToL1Log(sender=INTEROP_CENTER.lower(), key="0x" + "00" * 32)
        assert references_address(log, INTEROP_CENTER)

    def test_unrelated_log(self):
        log = L2ToL1Log(sender=SYSTEM_MESSENGER, key=padded_key(BASE_TOKEN))
        assert not references_address(log, INTEROP_CENTER)

    def test_empty_address_never_matches(self):
        log = L2ToL1Log(sender="", key="")
        assert not references_address(log, "")

    def test_find_log_index_returns_first_match(self):
        logs = [
            L2ToL1Log(sender=SYSTEM_MESSENGER, key=padded_key(BASE_TOKEN)),
            L2ToL1Log(sender=SYSTEM_MESSENGER, key=padded_key(INTEROP_CENTER)),
        ]
        assert find_log_index(logs, INTEROP_CENTER) == 1
        assert find_log_index(logs, OTHER_SENDER) is None


class TestResolveSender:
    def test_system_messenger_sender_comes_from_key(self):
        log = L2ToL1Log(sender=SYSTEM_MESSENGER, key=padded_key(INTEROP_CENTER))
        assert resolve_sender(log) == INTEROP_CENTER.lower()

    def test_direct_sender_kept(self):
        log = L2ToL1Log(sender=OTHER_SENDER, key=padded_key(INTEROP_CENTER))
        assert resolve_sender(log) == OTHER_SENDER


class TestLocateMessage:
    def test_matches_by_hash(self):
        payload = withdrawal_payload(5)
        decoy = withdrawal_payload(6)
        receipt = make_receipt(
            tx_hash(1),
            l2_logs=[cross_layer_log(payload)],
            logs=[message_event(decoy, address=INTEROP_CENTER), message_event(payload)],
        )

        assert locate_message(receipt, receipt.l2_to_l1_logs[0], INTEROP_CENTER) == payload

    def test_matches_unaligned_payload_by_declared_length(self):
        payload = withdrawal_payload(5) + b"\x01\x02\x03"
        receipt = make_receipt(
            tx_hash(1),
            l2_logs=[cross_layer_log(payload)],
            logs=[message_event(payload)],
        )

        assert locate_message(receipt, receipt.l2_to_l1_logs[0], INTEROP_CENTER) == payload

    def test_falls_back_to_interop_center_event(self):
        expected = withdrawal_payload(6)
        log = cross_layer_log(withdrawal_payload(5))
        receipt = make_receipt(
            tx_hash(1),
            l2_logs=[log],
            logs=[message_event(withdrawal_payload(7)), message_event(expected, address=INTEROP_CENTER)],
        )

        assert locate_message(receipt, receipt.l2_to_l1_logs[0], INTEROP_CENTER) == expected

    def test_falls_back_to_first_candidate(self):
        first = withdrawal_payload(7)
        receipt = make_receipt(
            tx_hash(1),
            l2_logs=[cross_layer_log(withdrawal_payload(5))],
            logs=[{"address": OTHER_SENDER, "data": "0x1234"}, message_event(first), message_event(withdrawal_payload(8))],
        )

        assert locate_message(receipt, receipt.l2_to_l1_logs[0], INTEROP_CENTER) == first

    def test_no_candidates(self):
        receipt = make_receipt(
            tx_hash(1),
            l2_logs=[cross_layer_log(withdrawal_payload(5))],
            logs=[{"address": INTEROP_CENTER, "data": "0x" + "00" * 40}],
        )

        assert locate_message(receipt, receipt.l2_to_l1_logs[0], INTEROP_CENTER) is None
