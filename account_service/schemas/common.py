"""
Common schema types used across the API.
"""

from typing import Any, Dict, Iterable, List
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"


def format_errors(errors: Iterable[Dict[str, Any]], skip_body: bool = False) -> List[Dict[str, Any]]:
    """
    Flatten pydantic error dicts to ``{"field", "message"}`` pairs.

    Only ``loc`` and ``msg`` are kept; pydantic's ``input`` may hold a password.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if skip_body and loc and loc[0] == "body":
            loc = loc[1:]
        formatted.append({
            "field": ".".join(loc) or "__root__",
            "message": error["msg"],
        })
    return formatted
