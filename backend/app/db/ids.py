import re
import uuid
from typing import Optional

__all__ = [
    "HEX_RE",
    "is_hex_id",
    "normalize_hex_id",
    "hex_to_bin",
    "bin_to_hex",
    "new_id",
]

HEX_RE = re.compile(r"^[0-9a-fA-F]{32}$")


def is_hex_id(s: str | None) -> bool:
    if not s:
        return False
    return bool(HEX_RE.fullmatch(s.strip().lower()))


def normalize_hex_id(s: str | None) -> Optional[str]:
    if not s:
        return None
    ss = s.strip().lower()
    return ss if is_hex_id(ss) else None


def hex_to_bin(h: str | None) -> Optional[bytes]:
    """Convert a 32-char hex id to the 16-byte value stored in BINARY(16) columns."""
    hh = normalize_hex_id(h)
    if not hh:
        return None
    return bytes.fromhex(hh)


def bin_to_hex(b: bytes | bytearray | None) -> Optional[str]:
    if isinstance(b, (bytes, bytearray)):
        return b.hex()
    return None


def new_id() -> bytes:
    """Fresh random id for an insert (uuid4, 16 bytes)."""
    return uuid.uuid4().bytes
