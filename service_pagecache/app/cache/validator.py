"""
Validity checks for Drupal cache entries.

An entry is served only when it has a cid, is not flagged invalid, has not
expired, and the sum of its cache tag counters still matches the checksum
stored alongside it. The first three checks are local; the tag checksum
costs one MGET round trip and only runs once the local checks pass.
"""

import time
from typing import List, Optional

from .keys import TAG_BIN, resolve_key
from .models import CacheEntry, EntryVerdict
from ..store import StoreReader

# Drupal's Cache::PERMANENT
NEVER_EXPIRES = -1

FALSY_FLAGS = frozenset({"", "0", "false", "no", "off"})


def _parse_int(value) -> Optional[int]:
    """Parse a string-encoded integer; None when it is not one."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def is_truthy_flag(value: str) -> bool:
    """Interpret the string-encoded ``valid`` flag."""
    return str(value).strip().lower() not in FALSY_FLAGS


def check_entry(entry: CacheEntry, now: Optional[float] = None) -> EntryVerdict:
    """Run the checks that need no I/O."""
    if now is None:
        now = time.time()

    if not entry.cid:
        return EntryVerdict.MISSING_CID

    if not is_truthy_flag(entry.valid):
        return EntryVerdict.FLAGGED_INVALID

    expire = _parse_int(entry.expire)
    if expire is None:
        return EntryVerdict.EXPIRED
    if expire != NEVER_EXPIRES and expire < now:
        return EntryVerdict.EXPIRED

    return EntryVerdict.CANDIDATE


def tag_keys(entry: CacheEntry, template: str, tag_bin: str = TAG_BIN) -> List[str]:
    """Keys of the invalidation counters for each of the entry's tags."""
    # Splitting on a single space keeps Drupal's semantics: an empty tag list
    # still yields one (empty) tag name.
    return [resolve_key(tag, tag_bin, template) for tag in entry.tags.split(" ")]


async def checksum_matches(entry: CacheEntry, template: str, store: StoreReader, tag_bin: str = TAG_BIN) -> bool:
    """
    Compare the entry's checksum with the current tag counters.

    Counters missing from Redis are dropped rather than counted as zero.
    Store errors propagate to the caller.
    """
    values = await store.mget(tag_keys(entry, template, tag_bin))

    computed = 0
    for value in values:
        if not value:
            continue
        counter = _parse_int(value)
        if counter is None:
            return False
        computed += counter

    expected = _parse_int(entry.checksum)
    return expected is not None and expected == computed


async def evaluate_entry(
    entry: CacheEntry,
    template: str,
    store: StoreReader,
    tag_bin: str = TAG_BIN,
    now: Optional[float] = None
) -> EntryVerdict:
    """Run all validity checks and report the verdict."""
    verdict = check_entry(entry, now=now)
    if verdict is not EntryVerdict.CANDIDATE:
        return verdict

    if not await checksum_matches(entry, template, store, tag_bin):
        return EntryVerdict.CHECKSUM_MISMATCH

    return EntryVerdict.VALID


async def is_valid_entry(
    entry: CacheEntry,
    template: str,
    store: StoreReader,
    tag_bin: str = TAG_BIN,
    now: Optional[float] = None
) -> bool:
    """TRUE if the cache entry can still be used."""
    verdict = await evaluate_entry(entry, template, store, tag_bin=tag_bin, now=now)
    return verdict is EntryVerdict.VALID
