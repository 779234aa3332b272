"""
Read-only access to Drupal's tag-invalidated Redis cache.

Entries are fetched from the ``page`` bin, checked for expiry and for the
checksum of their cache tag counters, and the JSON response body is unwrapped
from the PHP-serialized ``Response`` object Drupal stored. Nothing here writes
to Redis.
"""

from .keys import PAGE_BIN, TAG_BIN, resolve_key
from .models import CacheEntry, EntryVerdict
from .validator import check_entry, checksum_matches, evaluate_entry, is_valid_entry
from .envelope import decode_payload, extract_content
from .reader import DrupalCacheReader, LookupResult

__all__ = [
    "PAGE_BIN",
    "TAG_BIN",
    "resolve_key",
    "CacheEntry",
    "EntryVerdict",
    "check_entry",
    "checksum_matches",
    "evaluate_entry",
    "is_valid_entry",
    "decode_payload",
    "extract_content",
    "DrupalCacheReader",
    "LookupResult",
]
