from __future__ import annotations

from typing import Any

from flask import request


def json_body() -> dict[str, Any]:
    """Request JSON as a dict; a missing, malformed or non-object body reads as ``{}``."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
