"""
Data models for Drupal cache entries.
"""

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict


class EntryVerdict(str, Enum):
    """Why a cache entry can or cannot be served."""
    VALID = "valid"
    CANDIDATE = "candidate"
    ABSENT = "absent"
    MISSING_CID = "missing_cid"
    FLAGGED_INVALID = "flagged_invalid"
    EXPIRED = "expired"
    CHECKSUM_MISMATCH = "checksum_mismatch"


class CacheEntry(BaseModel):
    """A cache item as stored by Drupal's Redis backend in a hash."""

    model_config = ConfigDict(extra="allow", frozen=True)

    cid: str = ""
    data: str = ""
    expire: str = ""
    tags: str = ""
    checksum: str = ""
    valid: str = ""
    created: str = ""

    @classmethod
    def from_hash(cls, fields: Mapping[str, str]) -> "CacheEntry":
        """Build an entry from the field mapping returned by HGETALL."""
        return cls(**{str(name): value for name, value in fields.items()})
