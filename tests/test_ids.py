"""Tests for correlation identifier generation."""

import threading

import pytest

from surreal_engine import ids
from surreal_engine.ids import MAX_SAFE_ID, next_incremental_id


class TestNextIncrementalId:
    def test_increments(self) -> None:
        first = next_incremental_id()
        second = next_incremental_id()
        assert second == first + 1

    def test_wraps_after_max_safe_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(ids, "_last_id", MAX_SAFE_ID)
        assert next_incremental_id() == 1

    def test_unique_across_threads(self) -> None:
        seen: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [next_incremental_id() for _ in range(500)]
            with lock:
                seen.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == len(set(seen)) == 4000
