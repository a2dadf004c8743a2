"""Share tokens for joining an adventure by link."""
import re
from uuid import uuid4

SHARE_TOKEN_PREFIX = "ADV-"
SHARE_TOKEN_PATTERN = re.compile(r"^ADV-[0-9a-f]{12}$")


def build_share_token() -> str:
    """Return ``ADV-`` + 12 lowercase hex chars of a random UUID.

    Not checked for uniqueness here: the store's unique constraint rejects a
    collision and creation fails with ConflictError.
    """
    return f"{SHARE_TOKEN_PREFIX}{uuid4().hex[:12]}"
