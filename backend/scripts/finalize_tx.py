#!/usr/bin/env python3
"""
Manual finalization
===================

Runs the finalizer once for each given source transaction and prints the
outcome, or adds the transactions to the daemon's pending queue.

Usage:
    python scripts/finalize_tx.py 0xabc...            # finalize now
    python scripts/finalize_tx.py 0xabc... 0xdef...   # several, in order
    python scripts/finalize_tx.py --enqueue 0xabc...  # let the daemon do it
"""

import argparse
import asyncio
import logging
import os
import re
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from interop.errors import ConfigurationError
from relayer.config import get_settings
from relayer.models import PendingItem
from relayer.runtime import build_relayer, build_store

_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def tx_hash(value: str) -> str:
    if not _TX_HASH_RE.match(value):
        raise argparse.ArgumentTypeError(f"not a transaction hash: {value}")
    return value


async def finalize(hashes: list[str]) -> int:
    relayer = build_relayer(get_settings())
    failures = 0
    try:
        for h in hashes:
            print("=" * 80)
            print(f"Finalizing {h}")
            try:
                result = await relayer.finalizer.finalize(h)
            except Exception as e:
                print(f"  error: {e}")
                failures += 1
                continue

            status = "ok" if result.success else ("retry later" if result.retryable else "failed")
            print(f"  {status}: {result.reason.value}")
            if result.destination_hash:
                print(f"  destination tx: {result.destination_hash}")
            if not result.success:
                failures += 1
    finally:
        await relayer.aclose()
    return failures


def enqueue(hashes: list[str]) -> int:
    store = build_store(get_settings())
    added = store.enqueue(PendingItem(hash=h) for h in hashes)
    print(f"Queued {added} of {len(hashes)} transaction(s) in {store.data_dir}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Finalize source-chain interop transactions")
    parser.add_argument("hashes", nargs="+", type=tx_hash, help="source transaction hash(es)")
    parser.add_argument(
        "--enqueue",
        action="store_true",
        help="add to the pending queue instead of finalizing now",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if args.enqueue:
        return enqueue(args.hashes)

    try:
        failures = asyncio.run(finalize(args.hashes))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
