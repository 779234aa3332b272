"""
Unwrapping of PHP-serialized Drupal responses.

Drupal's page cache stores the ``Response`` object through PHP's
``serialize()``. The response body is its protected ``content`` property,
which appears in the serialized string as::

    ..."\\0*\\0content";s:<byte length>:"<body>";...

The body is not escaped by PHP, so it is located by pattern rather than by
parsing the whole object. The last body character is captured separately
and must not be a backslash, so an escaped quote at the end of the body is
never mistaken for the closing quote. Only this one layout is supported.
"""

import json
import re
from typing import Any, Optional

from shared.errors import CorruptPayloadError

CONTENT_PATTERN = re.compile(
    r'(.*"\x00\*\x00content";s:\d+:")([^\x00]+)([^\\])";.*',
    re.DOTALL
)


def extract_content(raw_data: Optional[str]) -> str:
    """Return the response body embedded in the serialized data."""
    match = CONTENT_PATTERN.match(raw_data or "")
    if match is None:
        raise CorruptPayloadError(
            "Serialized response has no content property",
            details={"length": len(raw_data or "")}
        )
    return match.group(2) + match.group(3)


def decode_payload(raw_data: Optional[str]) -> Any:
    """Extract the response body and decode it as JSON."""
    content = extract_content(raw_data)
    try:
        return json.loads(content)
    except ValueError as exc:
        raise CorruptPayloadError(
            "Cached response body is not valid JSON",
            details={"error": str(exc)}
        ) from exc
