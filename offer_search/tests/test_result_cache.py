import json
import logging
import sqlite3

from offer_search.db import CacheError, SqliteStore, count_entries, migrate
from offer_search.models import OfferSet
from offer_search.result_cache import MemoryStore, ResultCache

KEY = "2025-06-01_2025-06-10_JFK_LAX_2_USD"


def make_offers(price: str = "420.50") -> OfferSet:
    return OfferSet(
        count=1,
        offers=({"id": "1", "price": {"currency": "USD", "grandTotal": price}},),
        dictionaries={"carriers": {"AA": "AMERICAN AIRLINES"}},
    )


class BrokenStore:
    def get(self, key):
        raise CacheError("disk I/O error")

    def set(self, key, value):
        raise CacheError("database or disk is full")


def test_unknown_key_is_a_miss():
    cache = ResultCache(MemoryStore())
    assert cache.get(KEY) is None


def test_put_then_get():
    cache = ResultCache(MemoryStore())
    assert cache.put(KEY, make_offers())
    assert cache.get(KEY) == make_offers()


def test_put_overwrites():
    cache = ResultCache(MemoryStore())
    cache.put(KEY, make_offers("100"))
    cache.put(KEY, make_offers("200"))
    assert cache.get(KEY) == make_offers("200")


def test_corrupt_entries_are_misses(caplog):
    store = MemoryStore()
    store.data[KEY] = "{not json"
    store.data["list"] = json.dumps([1, 2, 3])
    store.data["bad-count"] = json.dumps({"meta": {"count": "many"}, "data": []})
    store.data["scalar-offer"] = json.dumps({"data": [1]})
    store.data["scalar-lookup"] = json.dumps({"data": [], "dictionaries": {"carriers": "AA"}})
    cache = ResultCache(store)

    caplog.set_level(logging.WARNING)
    assert cache.get(KEY) is None
    assert cache.get("list") is None
    assert cache.get("bad-count") is None
    assert cache.get("scalar-offer") is None
    assert cache.get("scalar-lookup") is None
    assert sum("corrupt cache entry" in r.getMessage() for r in caplog.records) == 5


def test_store_failures_are_absorbed(caplog):
    cache = ResultCache(BrokenStore())
    caplog.set_level(logging.WARNING)
    assert cache.get(KEY) is None
    assert cache.put(KEY, make_offers()) is False
    assert any("Cache write failed" in r.getMessage() for r in caplog.records)


def test_unserializable_offers_are_not_stored():
    store = MemoryStore()
    cache = ResultCache(store)
    offers = OfferSet(count=1, offers=({"id": object()},))
    assert cache.put(KEY, offers) is False
    assert store.data == {}


def test_sqlite_store_persists_across_instances(tmp_path):
    db_file = str(tmp_path / "cache.db")
    ResultCache(SqliteStore(db_file)).put(KEY, make_offers())

    reopened = ResultCache(SqliteStore(db_file))
    assert reopened.get(KEY) == make_offers()
    assert count_entries(db_path=db_file) == 1


def test_sqlite_store_overwrites_single_row(tmp_path):
    db_file = str(tmp_path / "cache.db")
    cache = ResultCache(SqliteStore(db_file))
    cache.put(KEY, make_offers("100"))
    cache.put(KEY, make_offers("200"))
    assert count_entries(db_path=db_file) == 1
    assert cache.get(KEY) == make_offers("200")


def test_migrate_is_idempotent(tmp_path):
    db_file = str(tmp_path / "cache.db")
    migrate(db_path=db_file)
    migrate(db_path=db_file)

    conn = sqlite3.connect(db_file)
    rows = conn.execute("SELECT version FROM schema_version").fetchall()
    conn.close()
    assert rows == [(1,)]


def test_sqlite_errors_become_cache_errors(tmp_path):
    db_file = str(tmp_path / "cache.db")
    store = SqliteStore(db_file)
    conn = sqlite3.connect(db_file)
    conn.execute("DROP TABLE result_cache")
    conn.commit()
    conn.close()

    cache = ResultCache(store)
    assert cache.get(KEY) is None
    assert cache.put(KEY, make_offers()) is False


def test_unopenable_sqlite_file_degrades_to_misses(tmp_path, caplog):
    db_file = str(tmp_path / "missing" / "cache.db")
    caplog.set_level(logging.WARNING)

    cache = ResultCache(SqliteStore(db_file))

    assert cache.get(KEY) is None
    assert cache.put(KEY, make_offers()) is False
    assert any("is unavailable" in r.getMessage() for r in caplog.records)
