"""
receipts.py - Structured Event Receipts

Every engine tick, tracker pass, pairing pass, seed and regenerate produces
one receipt: a flat dict carrying its type, a UTC timestamp, the tenant and a
dual payload hash, followed by the event fields.

Hashes are always dual (SHA256:BLAKE3).
"""

import hashlib
import json
from collections import deque
from datetime import datetime, timezone
from typing import IO, Any, Deque, Dict, Iterator, List, Optional, Union

import blake3

__all__ = [
    "dual_hash",
    "emit_receipt",
    "write_receipt_jsonl",
    "ReceiptLedger",
    "StopRule",
    "ENVELOPE_FIELDS",
    "DEFAULT_TENANT",
]

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TENANT = "default"

# Fields every receipt carries ahead of its payload
ENVELOPE_FIELDS = ("receipt_type", "ts", "tenant_id", "payload_hash")


# =============================================================================
# HASHING
# =============================================================================

def dual_hash(data: Union[bytes, str]) -> str:
    """
    Hash with SHA256 and BLAKE3 side by side.

    Args:
        data: Bytes, or a string hashed as UTF-8

    Returns:
        "sha256_hex:blake3_hex"
    """
    if isinstance(data, str):
        data = data.encode()
    sha = hashlib.sha256(data).hexdigest()
    b3 = blake3.blake3(data).hexdigest()
    return f"{sha}:{b3}"


# =============================================================================
# EMISSION
# =============================================================================

def emit_receipt(receipt_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Wrap one event payload in the receipt envelope.

    The payload hash is taken over the key-sorted JSON of data, so two
    receipts with equal payloads hash equally regardless of field order.
    """
    return {
        "receipt_type": receipt_type,
        "ts": datetime.now(timezone.utc).isoformat(),
        "tenant_id": data.get("tenant_id", DEFAULT_TENANT),
        "payload_hash": dual_hash(json.dumps(data, sort_keys=True)),
        **data
    }


def write_receipt_jsonl(receipt: Dict[str, Any], fh: IO[str]) -> None:
    """Write one receipt as a compact JSON line."""
    fh.write(json.dumps(receipt, separators=(",", ":")) + "\n")


# =============================================================================
# LEDGER
# =============================================================================

class ReceiptLedger:
    """Bounded in-memory receipt history with an optional JSONL sink.

    Only the newest `limit` receipts are kept in memory; the sink, when
    given, receives every receipt.
    """

    def __init__(self, limit: int, sink: Optional[IO[str]] = None) -> None:
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=limit)
        self.sink = sink

    def record(self, receipt: Dict[str, Any]) -> Dict[str, Any]:
        self._entries.append(receipt)
        if self.sink is not None:
            write_receipt_jsonl(receipt, self.sink)
        return receipt

    def of_type(self, receipt_type: str) -> List[Dict[str, Any]]:
        return [r for r in self._entries if r["receipt_type"] == receipt_type]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Dict[str, Any]:
        return self._entries[index]


# =============================================================================
# STOPRULE EXCEPTION
# =============================================================================

class StopRule(Exception):
    """Fail-fast halt. Raised after the matching anomaly receipt is emitted."""
    pass
