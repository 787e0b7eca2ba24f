"""Response error extraction for load test observability.

Parses stock ledger API error responses into human-readable messages. Every
error (domain rejections and request validation alike) arrives as
``{"kind": "...", "message": "..."}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact ``kind: message`` string for Locust failures and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body, dict) and "kind" in body:
        return f"{body['kind']}: {body.get('message', '')}"

    return str(body)[:300]
