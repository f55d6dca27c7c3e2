"""
Entity identifier service.

Every entity written to the remote store is keyed by a version-4 style UUID
in canonical textual form. Identifiers created by older releases of the
local app ("1", "bank_1699999999") are replaced before any remote call.
"""

import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

# 8-4-4-4-12 hex groups, version nibble 1-5, RFC 4122 variant nibble
_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def generate() -> str:
    """Return a new random version-4 identifier."""
    return str(uuid.uuid4())


def is_valid(token: Any) -> bool:
    """
    Check whether `token` is a canonical UUID string.

    Never raises: non-string input is simply not valid.
    """
    if not isinstance(token, str):
        return False
    return _UUID_PATTERN.match(token) is not None


def normalize(token: Any) -> str:
    """
    Return `token` if it is valid, otherwise a freshly generated identifier.

    The original token is discarded. Anything still referencing it is
    orphaned, so callers must compare the result with their input and adopt
    the new value (see ensure_entity_id).
    """
    if is_valid(token):
        return token
    return generate()


def ensure_entity_id(entity: Dict[str, Any], field: str = "id") -> bool:
    """
    Normalize the identifier of `entity` in place.

    Returns:
        True if the identifier was replaced
    """
    original = entity.get(field)
    normalized = normalize(original)
    if normalized == original:
        return False

    logger.warning(f"Replacing invalid identifier {original!r} with {normalized}")
    entity[field] = normalized
    return True


def derive_test_identifier(seed: str) -> str:
    """
    Derive a reproducible UUID-shaped token from `seed`, for fixtures only.

    The derivation is a 32-bit string hash stretched over the UUID groups.
    Distinct seeds can collide and the output is far from uniform, so it
    must never be used for production identity.
    """
    value = 0
    for char in seed:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000

    digest = format(abs(value), "x").rjust(8, "0")
    return f"{digest[:8]}-{digest[:4]}-4{digest[1:4]}-8{digest[:3]}-{digest}{digest[:4]}"


def generate_batch(count: int) -> List[str]:
    """Return `count` new identifiers."""
    return [generate() for _ in range(max(count, 0))]


def partition_identifiers(tokens: Iterable[Any]) -> Tuple[List[Any], List[Any]]:
    """Split tokens into (valid, invalid), preserving order."""
    valid: List[Any] = []
    invalid: List[Any] = []
    for token in tokens:
        (valid if is_valid(token) else invalid).append(token)
    return valid, invalid


def format_for_display(token: str, length: int = 8) -> str:
    """Shorten a valid identifier for log lines and UI labels."""
    if not is_valid(token):
        return token
    return token[:length] + "..."
