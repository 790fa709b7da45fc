import threading
import unittest
from datetime import datetime, timedelta, timezone

from fogcast.cache_store import CacheEntry, InMemoryForecastStore

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _entry(key, body="{}", expires_in=timedelta(hours=1)):
    return CacheEntry(key=key, body=body, last_modified=NOW, expires_at=NOW + expires_in)


class TestInMemoryForecastStore(unittest.TestCase):
    def test_put_get_delete(self):
        store = InMemoryForecastStore()
        self.assertIsNone(store.get("k"))

        entry = _entry("k")
        store.put(entry)
        self.assertIs(store.get("k"), entry)
        self.assertEqual(len(store), 1)

        store.delete("k")
        self.assertIsNone(store.get("k"))
        # deleting twice is fine
        store.delete("k")

    def test_freshness_boundary(self):
        entry = _entry("k", expires_in=timedelta(minutes=30))
        self.assertTrue(entry.is_fresh(NOW))
        self.assertFalse(entry.is_fresh(NOW + timedelta(minutes=30)))

    def test_clear(self):
        store = InMemoryForecastStore()
        store.put(_entry("a"))
        store.put(_entry("b"))
        store.clear()
        self.assertEqual(len(store), 0)

    def test_concurrent_writers_leave_one_complete_entry(self):
        store = InMemoryForecastStore()
        bodies = [f'{{"n": {i}}}' for i in range(20)]

        threads = [threading.Thread(target=store.put, args=(_entry("k", body=b),)) for b in bodies]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(store), 1)
        self.assertIn(store.get("k").body, bodies)


if __name__ == "__main__":
    unittest.main()
