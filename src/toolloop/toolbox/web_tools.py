"""
HTTP tools the model can use to read web content.
"""

from __future__ import annotations

import json
from typing import Optional

import requests

from ..tools import tool

MAX_BODY_CHARS = 5000


@tool(
    description="Fetch a URL with an HTTP GET request and return status, content type and body",
    param_metadata={
        "url": {"description": "Absolute http(s) URL to fetch"},
        "headers": {"description": "Optional JSON object of request headers"},
        "timeout": {"description": "Request timeout in seconds"},
    },
)
def http_get(url: str, headers: Optional[str] = None, timeout: int = 30) -> str:
    """
    Make an HTTP GET request and return a textual summary of the response.

    Raises:
        ValueError: If ``headers`` is not a JSON object.
        requests.RequestException: On network errors.
    """
    headers_dict = None
    if headers:
        try:
            headers_dict = json.loads(headers)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in headers: {headers}") from exc
        if not isinstance(headers_dict, dict):
            raise ValueError("headers must be a JSON object")

    response = requests.get(url, headers=headers_dict, timeout=timeout)

    content_type = response.headers.get("Content-Type", "")
    lines = [
        f"Status: {response.status_code} {response.reason}",
        f"Content-Type: {content_type}",
        "",
    ]

    if "application/json" in content_type:
        try:
            lines.append(json.dumps(response.json(), indent=2))
        except ValueError:
            lines.append(response.text)
    else:
        text = response.text
        if len(text) > MAX_BODY_CHARS:
            text = text[:MAX_BODY_CHARS] + "\n... (truncated)"
        lines.append(text)

    return "\n".join(lines)
