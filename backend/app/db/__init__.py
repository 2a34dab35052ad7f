from .core import connect, cursor, ensure_schema, get_conn
from .ids import HEX_RE, bin_to_hex, hex_to_bin, is_hex_id, new_id, normalize_hex_id

__all__ = [
    "get_conn",
    "connect",
    "cursor",
    "ensure_schema",
    "HEX_RE",
    "is_hex_id",
    "normalize_hex_id",
    "hex_to_bin",
    "bin_to_hex",
    "new_id",
]
