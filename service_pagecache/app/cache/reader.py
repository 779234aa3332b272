"""
Lookup of Drupal page cache entries.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .keys import PAGE_BIN, TAG_BIN, resolve_key
from .models import CacheEntry, EntryVerdict
from .validator import evaluate_entry
from .envelope import decode_payload
from ..store import StoreReader


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single lookup."""
    key: str
    verdict: EntryVerdict
    payload: Any = None

    @property
    def hit(self) -> bool:
        return self.verdict is EntryVerdict.VALID


class DrupalCacheReader:
    """
    Reads and decodes entries written by Drupal's Redis cache backend.

    The store handle is owned by the caller and shared across lookups; it
    must provide async ``hgetall(key)`` and ``mget(keys)``. The reader keeps
    no state of its own, so concurrent lookups are independent.
    """

    def __init__(
        self,
        store: StoreReader,
        template: str,
        page_bin: str = PAGE_BIN,
        tag_bin: str = TAG_BIN
    ):
        self.store = store
        self.template = template
        self.page_bin = page_bin
        self.tag_bin = tag_bin

    def page_key(self, cid: str) -> str:
        """Redis key of the page cache entry for ``cid``."""
        return resolve_key(cid, self.page_bin, self.template)

    async def inspect(self, cid: str, now: Optional[float] = None) -> LookupResult:
        """Look up ``cid`` and report the verdict along with the payload."""
        key = self.page_key(cid)

        fields = await self.store.hgetall(key)
        if not fields:
            return LookupResult(key=key, verdict=EntryVerdict.ABSENT)

        entry = CacheEntry.from_hash(fields)
        verdict = await evaluate_entry(entry, self.template, self.store, tag_bin=self.tag_bin, now=now)
        if verdict is not EntryVerdict.VALID:
            return LookupResult(key=key, verdict=verdict)

        return LookupResult(key=key, verdict=verdict, payload=decode_payload(entry.data))

    async def lookup(self, cid: str) -> Optional[Any]:
        """
        Get the decoded payload cached for ``cid``.

        Returns None on a miss (absent or invalid entry). Raises
        CorruptPayloadError when a valid entry cannot be decoded; Redis
        errors propagate unchanged.
        """
        result = await self.inspect(cid)
        return result.payload
