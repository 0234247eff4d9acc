# -*- coding: utf-8 -*-
"""
Tests for the deduplication cache.
"""
import threading

from models import make_dedup_key
from triggers.auto_translation.dedup import DeduplicationCache


class TestDeduplicationCache:

    def test_unknown_key_is_not_processed(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=600, clock=fake_clock)

        assert cache.is_processed("C1:T1") is False

    def test_mark_then_check_within_ttl(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=600, clock=fake_clock)

        cache.mark_processed("C1:T1")
        fake_clock.advance(599)

        assert cache.is_processed("C1:T1") is True

    def test_entry_expires_after_ttl(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=600, clock=fake_clock)

        cache.mark_processed("C1:T1")
        fake_clock.advance(600)

        assert cache.is_processed("C1:T1") is False
        assert len(cache) == 0

    def test_lookup_evicts_every_expired_entry(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=10, clock=fake_clock)
        cache.mark_processed("C1:old-1")
        cache.mark_processed("C1:old-2")
        fake_clock.advance(5)
        cache.mark_processed("C1:fresh")
        fake_clock.advance(6)

        assert cache.is_processed("C1:other") is False
        assert len(cache) == 1
        assert cache.is_processed("C1:fresh") is True

    def test_len_excludes_expired_entries(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=600, clock=fake_clock)
        cache.mark_processed("C1:T1")
        cache.mark_processed("C1:T2")
        assert len(cache) == 2

        fake_clock.advance(600)

        # no lookup in between, len itself drops expired entries
        assert len(cache) == 0
        assert len(cache) == cache.stats().size

    def test_mark_refreshes_timestamp(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=10, clock=fake_clock)
        cache.mark_processed("C1:T1")
        fake_clock.advance(8)
        cache.mark_processed("C1:T1")
        fake_clock.advance(8)

        assert cache.is_processed("C1:T1") is True

    def test_stats_report_size_and_oldest_age(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=600, clock=fake_clock)
        assert cache.stats().size == 0
        assert cache.stats().oldest_entry_age is None

        cache.mark_processed("C1:T1")
        fake_clock.advance(30)
        cache.mark_processed("C1:T2")
        fake_clock.advance(10)

        stats = cache.stats()
        assert stats.size == 2
        assert stats.oldest_entry_age == 40

    def test_stats_exclude_expired_entries(self, fake_clock):
        cache = DeduplicationCache(ttl_seconds=60, clock=fake_clock)
        cache.mark_processed("C1:T1")
        fake_clock.advance(61)

        assert cache.stats().size == 0

    def test_keys_are_scoped_by_conversation(self, fake_clock):
        cache = DeduplicationCache(clock=fake_clock)
        cache.mark_processed(make_dedup_key("C1", "T1"))

        assert cache.is_processed(make_dedup_key("C2", "T1")) is False
        assert cache.is_processed(make_dedup_key("C1", "T1")) is True

    def test_clear(self, fake_clock):
        cache = DeduplicationCache(clock=fake_clock)
        cache.mark_processed("C1:T1")
        cache.clear()

        assert cache.is_processed("C1:T1") is False

    def test_concurrent_writers_on_different_keys(self):
        cache = DeduplicationCache()

        def worker(prefix: str):
            for i in range(200):
                cache.mark_processed(f"{prefix}:{i}")
                cache.is_processed(f"{prefix}:{i}")

        threads = [threading.Thread(target=worker, args=(f"C{n}",)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.stats().size == 800
