"""Entity identifiers.

Ids are 24 hex characters: 8 for the creation time in epoch seconds and 16
random. Anything else is rejected before it reaches a query.
"""

import re
import secrets
import time

_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def new_id() -> str:
    """Generate a new entity id."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_id(value) -> bool:
    """Check that value is a syntactically valid entity id."""
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None
