from pathlib import Path

from taxonlink.cache_manager import (
    cached,
    clear_cache,
    close_all,
    get_cache_root,
    get_cache_stats,
    init_db,
    list_caches,
)


def test_init_db_creates_nested_directory(isolated_cache):
    assert not isolated_cache.exists()
    cache = init_db("wikidata")
    assert Path(cache.directory) == isolated_cache / "diskcache" / "wikidata"
    assert Path(cache.directory).is_dir()


def test_init_db_reuses_handle():
    assert init_db("names") is init_db("names")
    assert init_db("names") is not init_db("other")


def test_entries_survive_reopen():
    cache = init_db("names")
    cache.set("k", [1, 2, 3])
    close_all()
    assert init_db("names").get("k") == [1, 2, 3]


def test_cached_memoizes_results():
    calls = []

    @cached(cache_name="test", prefix="square")
    def square(x):
        calls.append(x)
        return x * x

    assert square(3) == 9
    assert square(3) == 9
    assert square(4) == 16
    assert calls == [3, 4]


def test_cached_skips_none_results():
    calls = []

    @cached(cache_name="test", prefix="maybe")
    def maybe(x):
        calls.append(x)
        return None

    maybe(1)
    maybe(1)
    assert calls == [1, 1]


def test_cached_refresh_bypasses_cache():
    calls = []

    @cached(cache_name="test", prefix="ident")
    def ident(x):
        calls.append(x)
        return x

    ident("a")
    ident("a", refresh_cache=True)
    assert calls == ["a", "a"]


def test_cached_does_not_store_failures():
    calls = []

    @cached(cache_name="test", prefix="flaky")
    def flaky(x):
        calls.append(x)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return x

    try:
        flaky(1)
    except RuntimeError:
        pass
    assert flaky(1) == 1
    assert calls == [1, 1]


def test_cached_ignores_self():
    class Resolver:
        def __init__(self):
            self.calls = 0

        @cached(cache_name="test", prefix="resolve")
        def resolve(self, name):
            self.calls += 1
            return name.upper()

    first, second = Resolver(), Resolver()
    assert first.resolve("agathis") == "AGATHIS"
    assert second.resolve("agathis") == "AGATHIS"
    assert first.calls == 1
    assert second.calls == 0


def test_function_clear_cache_only_touches_its_prefix():
    @cached(cache_name="test", prefix="one")
    def one(x):
        return x

    @cached(cache_name="test", prefix="two")
    def two(x):
        return x

    one(1)
    two(1)
    assert one.clear_cache() == 1
    assert len(init_db("test")) == 1


def test_clear_all_caches():
    init_db("a").set("x:1", 1)
    init_db("b").set("y:1", 1)
    init_db("b").set("y:2", 2)
    assert list_caches() == ["a", "b"]
    assert clear_cache() == 3
    assert len(init_db("a")) == 0
    assert len(init_db("b")) == 0


def test_cache_stats_counts_prefixes():
    cache = init_db("wikidata")
    cache.set("related_ids:abc", [])
    cache.set("related_ids:def", [])
    cache.set("plain", 1)

    stats = get_cache_stats()
    assert stats["root"] == str(get_cache_root())
    assert stats["caches"]["wikidata"]["entry_count"] == 3
    assert stats["caches"]["wikidata"]["prefix_counts"] == {"related_ids": 2, "other": 1}
    assert stats["db_file_count"] >= 1
