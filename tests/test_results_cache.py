"""Tests for the per-job results cache."""

from __future__ import annotations

import threading

from server_notification.results import PlanResultKey
from server_notification.results_cache import ResultsCache, ResultsContainer

KEY = PlanResultKey("PROJ-PLAN-JOB1", 42)


class TestResultsCache:
    def test_put_and_get(self, results_cache, job_container) -> None:
        results_cache.put(KEY, job_container)

        assert results_cache.get(KEY) is job_container
        assert results_cache.get("PROJ-PLAN-JOB1-42") is job_container
        assert KEY in results_cache
        assert len(results_cache) == 1

    def test_miss(self, results_cache) -> None:
        assert results_cache.get(KEY) is None
        assert KEY not in results_cache

    def test_remove_and_clear(self, results_cache) -> None:
        results_cache.put(KEY, ResultsContainer())
        results_cache.put(PlanResultKey("PROJ-PLAN-JOB2", 42), ResultsContainer())

        assert results_cache.remove(KEY) is not None
        assert results_cache.remove(KEY) is None
        results_cache.clear()
        assert len(results_cache) == 0

    def test_concurrent_puts(self) -> None:
        cache = ResultsCache()

        def fill(start: int) -> None:
            for number in range(start, start + 100):
                cache.put(PlanResultKey("PROJ-PLAN-JOB1", number), ResultsContainer())

        threads = [threading.Thread(target=fill, args=(i * 100,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 400
