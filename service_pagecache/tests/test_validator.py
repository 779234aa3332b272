"""
Unit tests for cache entry validation.
"""

import time

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_pagecache.app.cache.models import CacheEntry, EntryVerdict
from service_pagecache.app.cache.validator import (
    check_entry, checksum_matches, evaluate_entry, is_valid_entry, is_truthy_flag, tag_keys
)
from shared.test_helpers import DEFAULT_TEMPLATE, create_mock_store, tag_key, test_data_factory


def make_entry(**kwargs) -> CacheEntry:
    return CacheEntry.from_hash(test_data_factory.create_cache_entry(**kwargs))


class TestCheckEntry:
    """Test cases for the local (no I/O) checks."""

    def test_candidate(self):
        assert check_entry(make_entry()) is EntryVerdict.CANDIDATE

    def test_empty_cid(self):
        assert check_entry(make_entry(cid="")) is EntryVerdict.MISSING_CID

    def test_missing_fields_default_to_empty(self):
        entry = CacheEntry.from_hash({"data": "x"})
        assert check_entry(entry) is EntryVerdict.MISSING_CID

    @pytest.mark.parametrize("flag", ["", "0", "false", "FALSE", "no", "off", " 0 "])
    def test_falsy_valid_flag(self, flag):
        assert check_entry(make_entry(valid=flag)) is EntryVerdict.FLAGGED_INVALID

    @pytest.mark.parametrize("flag", ["1", "true", "yes"])
    def test_truthy_valid_flag(self, flag):
        assert is_truthy_flag(flag)
        assert check_entry(make_entry(valid=flag)) is EntryVerdict.CANDIDATE

    def test_permanent_entry_ignores_time(self):
        entry = make_entry(expire=-1)
        for now in (0, time.time(), 10 ** 12):
            assert check_entry(entry, now=now) is EntryVerdict.CANDIDATE

    def test_expired_entry(self):
        entry = make_entry(expire=1000)
        assert check_entry(entry, now=1001) is EntryVerdict.EXPIRED

    def test_expiring_now_is_still_valid(self):
        entry = make_entry(expire=1000)
        assert check_entry(entry, now=1000) is EntryVerdict.CANDIDATE

    def test_future_expiry(self):
        entry = make_entry(expire=int(time.time()) + 3600)
        assert check_entry(entry) is EntryVerdict.CANDIDATE

    @pytest.mark.parametrize("expire", ["", "never", "12.5", "nan"])
    def test_unparseable_expiry_is_treated_as_expired(self, expire):
        entry = CacheEntry.from_hash({**test_data_factory.create_cache_entry(), "expire": expire})
        assert check_entry(entry) is EntryVerdict.EXPIRED


class TestChecksum:
    """Test cases for the tag checksum round trip."""

    @pytest.mark.asyncio
    async def test_sum_of_counters_matches(self):
        entry = make_entry(tags=["node:1", "node_list", "config:system.site"], checksum=7)
        store = create_mock_store(counters={
            tag_key("node:1"): "3",
            tag_key("node_list"): "4",
            tag_key("config:system.site"): "0",
        })

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is True
        store.mget.assert_awaited_once_with([
            tag_key("node:1"), tag_key("node_list"), tag_key("config:system.site")
        ])

    @pytest.mark.asyncio
    async def test_bumped_counter_invalidates(self):
        entry = make_entry(tags=["node:1", "node_list"], checksum=7)
        store = create_mock_store(counters={tag_key("node:1"): "3", tag_key("node_list"): "5"})

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is False

    @pytest.mark.asyncio
    async def test_tag_order_does_not_matter(self):
        counters = {tag_key("a"): "2", tag_key("b"): "5"}
        forward = make_entry(tags=["a", "b"], checksum=7)
        backward = make_entry(tags=["b", "a"], checksum=7)

        assert await checksum_matches(forward, DEFAULT_TEMPLATE, create_mock_store(counters=counters))
        assert await checksum_matches(backward, DEFAULT_TEMPLATE, create_mock_store(counters=counters))

    @pytest.mark.asyncio
    async def test_absent_counters_are_skipped(self):
        entry = make_entry(tags=["node:1", "never_bumped"], checksum=3)
        store = create_mock_store(counters={tag_key("node:1"): "3"})

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is True

    @pytest.mark.asyncio
    async def test_all_counters_absent_sums_to_zero(self):
        entry = make_entry(tags=["node:1", "node:2"], checksum=0)
        store = create_mock_store()

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is True

    @pytest.mark.asyncio
    async def test_all_counters_absent_with_nonzero_checksum(self):
        entry = make_entry(tags=["node:1"], checksum=1)
        store = create_mock_store()

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is False

    @pytest.mark.asyncio
    async def test_zero_tags_still_issues_round_trip(self):
        entry = make_entry(tags=[], checksum=0)
        store = create_mock_store()

        assert tag_keys(entry, DEFAULT_TEMPLATE) == ["cache:cachetags:"]
        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is True
        store.mget.assert_awaited_once_with(["cache:cachetags:"])

    @pytest.mark.asyncio
    async def test_single_tag(self):
        entry = make_entry(tags=["node:1"], checksum=12)
        store = create_mock_store(counters={tag_key("node:1"): "12"})

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is True
        store.mget.assert_awaited_once_with([tag_key("node:1")])

    @pytest.mark.asyncio
    async def test_custom_tag_bin(self):
        entry = make_entry(tags=["node:1"], checksum=2)
        store = create_mock_store(counters={"cache:tags:node:1": "2"})

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store, tag_bin="tags") is True

    @pytest.mark.asyncio
    async def test_non_numeric_counter_is_a_mismatch(self):
        entry = make_entry(tags=["node:1"], checksum=0)
        store = create_mock_store(counters={tag_key("node:1"): "garbage"})

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is False

    @pytest.mark.asyncio
    async def test_non_numeric_checksum_is_a_mismatch(self):
        entry = make_entry(tags=["node:1"], checksum=None)
        store = create_mock_store()

        assert await checksum_matches(entry, DEFAULT_TEMPLATE, store) is False

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        entry = make_entry(tags=["node:1"], checksum=0)
        store = create_mock_store()
        store.mget.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(RedisConnectionError):
            await checksum_matches(entry, DEFAULT_TEMPLATE, store)


class TestEvaluateEntry:
    """Test cases for the combined verdict."""

    @pytest.mark.asyncio
    async def test_valid_entry(self):
        entry = make_entry(tags=["node:1"], checksum=4)
        store = create_mock_store(counters={tag_key("node:1"): "4"})

        assert await evaluate_entry(entry, DEFAULT_TEMPLATE, store) is EntryVerdict.VALID
        assert await is_valid_entry(entry, DEFAULT_TEMPLATE, store) is True

    @pytest.mark.asyncio
    async def test_checksum_mismatch(self):
        entry = make_entry(tags=["node:1"], checksum=4)
        store = create_mock_store(counters={tag_key("node:1"): "5"})

        assert await evaluate_entry(entry, DEFAULT_TEMPLATE, store) is EntryVerdict.CHECKSUM_MISMATCH
        assert await is_valid_entry(entry, DEFAULT_TEMPLATE, store) is False

    @pytest.mark.asyncio
    async def test_flagged_invalid_skips_round_trip(self):
        entry = make_entry(valid="0")
        store = create_mock_store()

        assert await evaluate_entry(entry, DEFAULT_TEMPLATE, store) is EntryVerdict.FLAGGED_INVALID
        store.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_skips_round_trip_even_if_checksum_matches(self):
        entry = make_entry(tags=["node:1"], checksum=4, expire=1000)
        store = create_mock_store(counters={tag_key("node:1"): "4"})

        assert await evaluate_entry(entry, DEFAULT_TEMPLATE, store, now=2000) is EntryVerdict.EXPIRED
        store.mget.assert_not_awaited()
