from __future__ import annotations

import uuid


def new_id(prefix: str) -> str:
    """Random identifier with a readable prefix (``a_`` records, ``u_`` users)."""
    return f"{prefix}_{uuid.uuid4().hex}"
