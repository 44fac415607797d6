import re
from datetime import datetime, timezone

import base58

SUI_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_valid_sui_address(value) -> bool:
    """Addresses and object IDs share the same 32-byte hex form."""
    return isinstance(value, str) and bool(SUI_ADDRESS_RE.match(value))


def is_valid_digest(value) -> bool:
    """Transaction digests are base58 encoded 32-byte hashes."""
    if not isinstance(value, str) or not value:
        return False
    try:
        return len(base58.b58decode(value)) == 32
    except ValueError:
        return False


def nft_base_type(package_id: str, version: str) -> str:
    return f"{package_id}::xoa::{version}"


def qualify_token_type(package_id: str, token_type_name: str) -> str:
    """BRAAV1 -> <package>::xoa::BRAAV1; fully qualified names pass through."""
    if "::" in token_type_name:
        return token_type_name
    return nft_base_type(package_id, token_type_name)


def braav_label(type_name: str) -> str:
    match = re.search(r"BRAAV\d+", type_name)
    return match.group(0) if match else "Unknown BRAAV"


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
