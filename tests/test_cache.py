import json
import threading

import pytest

from kanji_terminator.cache import CACHE_STORE_KEY, JsonFileStore, MemoryStore, ReadingCache


def _fill(cache, count, prefix="漢"):
    keys = [f"{prefix}{index}" for index in range(count)]
    for index, key in enumerate(keys):
        cache.set(key, f"よみ{index}")
    return keys


def test_get_and_set():
    cache = ReadingCache(MemoryStore())
    assert cache.get("漢字") is None
    cache.set("漢字", "かんじ")
    assert cache.get("漢字") == "かんじ"
    assert "漢字" in cache
    assert len(cache) == 1


def test_save_below_limit_keeps_everything():
    store = MemoryStore()
    cache = ReadingCache(store)
    keys = _fill(cache, 499)
    cache.save()
    assert cache.keys() == keys
    assert len(json.loads(store.get(CACHE_STORE_KEY))) == 499


def test_save_at_limit_keeps_most_recent_three_quarters():
    store = MemoryStore()
    cache = ReadingCache(store)
    keys = _fill(cache, 500)
    cache.save()
    assert len(cache) == 375
    assert cache.keys() == keys[-375:]
    assert list(json.loads(store.get(CACHE_STORE_KEY))) == keys[-375:]


def test_save_above_limit_still_keeps_375():
    cache = ReadingCache(MemoryStore())
    keys = _fill(cache, 640)
    cache.save()
    assert cache.keys() == keys[-375:]


def test_eviction_ignores_reads():
    cache = ReadingCache(MemoryStore(), max_entries=4)
    keys = _fill(cache, 4)
    for _ in range(10):
        assert cache.get(keys[0]) == "よみ0"
    cache.save()
    assert cache.keys() == keys[1:]


def test_updating_a_key_keeps_its_position():
    cache = ReadingCache(MemoryStore(), max_entries=4)
    keys = _fill(cache, 4)
    cache.set(keys[0], "あたらしい")
    cache.save()
    assert keys[0] not in cache


def test_custom_ratio():
    cache = ReadingCache(MemoryStore(), max_entries=10, retain_ratio=0.5)
    keys = _fill(cache, 10)
    assert cache.evict() == 5
    assert cache.keys() == keys[5:]


@pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"retain_ratio": 1.5}, {"retain_ratio": -0.1}])
def test_invalid_limits(kwargs):
    with pytest.raises(ValueError):
        ReadingCache(MemoryStore(), **kwargs)


def test_load_round_trip_through_file_store(tmp_path):
    store = JsonFileStore(tmp_path / "cache")
    cache = ReadingCache(store)
    cache.set("漢字", "かんじ")
    cache.set("日本", "にほん")
    cache.save()

    fresh = ReadingCache(JsonFileStore(tmp_path / "cache"))
    assert fresh.load() == 2
    assert fresh.keys() == ["漢字", "日本"]
    assert fresh.get("日本") == "にほん"
    assert (tmp_path / "cache" / f"{CACHE_STORE_KEY}.json").exists()


def test_load_missing_store_is_empty(tmp_path):
    cache = ReadingCache(JsonFileStore(tmp_path))
    assert cache.load() == 0
    assert len(cache) == 0


@pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '"text"'])
def test_load_ignores_corrupt_payload(raw):
    store = MemoryStore()
    store.set(CACHE_STORE_KEY, raw)
    cache = ReadingCache(store)
    assert cache.load() == 0


def test_load_drops_non_string_values():
    store = MemoryStore()
    store.set(CACHE_STORE_KEY, json.dumps({"漢字": "かんじ", "日本": 3}, ensure_ascii=False))
    cache = ReadingCache(store)
    assert cache.load() == 1
    assert cache.get("日本") is None


def test_file_store_concurrent_writes(tmp_path):
    store = JsonFileStore(tmp_path)
    errors = []

    def write(worker):
        try:
            for index in range(50):
                store.set(CACHE_STORE_KEY, json.dumps({f"漢{worker}": str(index)}, ensure_ascii=False))
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=write, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(json.loads(store.get(CACHE_STORE_KEY))) == 1
    assert list(tmp_path.glob("*.tmp")) == []


def test_concurrent_saves_persist_latest_entries(tmp_path):
    cache = ReadingCache(JsonFileStore(tmp_path))
    errors = []

    def fill_and_save(worker):
        try:
            for index in range(20):
                cache.set(f"字{worker}-{index}", "じ")
                cache.save()
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=fill_and_save, args=(worker,)) for worker in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    fresh = ReadingCache(JsonFileStore(tmp_path))
    assert fresh.load() == 120
