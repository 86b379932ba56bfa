"""
Utility functions for the ModelLease SDK.
"""
import re
import urllib.parse
from typing import Any, Dict

_WHITESPACE_RUN = re.compile(r"\s+")


def validate_url(url_name: str, url: str) -> None:
    """
    Require https:// unless the URL points at localhost/127.0.0.1

    Raises:
        ValueError: If the URL uses another scheme for a remote host
    """
    parsed = urllib.parse.urlparse(url)
    # Check if it's a localhost or 127.0.0.1 address (with or without port)
    netloc_parts = parsed.netloc.split(':')
    host = netloc_parts[0] if netloc_parts else ''
    is_local = host in ('localhost', '127.0.0.1')
    if parsed.scheme != 'https' and not is_local:
        raise ValueError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace to a single space and strip the ends."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def sanitize_payload(payload: Any) -> Dict[str, Any]:
    """
    Remove sensitive data from a request payload for logging

    Args:
        payload: Dictionary payload to sanitize

    Returns:
        Sanitized payload for safe logging
    """
    if not isinstance(payload, dict):
        return {"type": str(type(payload))}

    result = payload.copy()
    for key in ("inputs", "prompt"):
        if key in result:
            result[key] = f"[REDACTED - {len(str(result[key]))} chars]"
    return result


def hex_str(value: Any) -> str:
    """Render a transaction hash (bytes or hex string) as a 0x-prefixed string."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)
