"""Thread Safety Example - Sharing One ReloadableMessageSource.

ReloadableMessageSource is thread-safe. Lookups run concurrently; bundles
are loaded once per (basename, locale) even when many threads ask at the
same time; reconfiguration takes an exclusive lock.

Demonstrates:
1. Concurrent lookups from a thread pool
2. Single-flight loading (one read per resource)
3. Hot reload while readers are active

Python 3.13+.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from autumn_messages import CacheConfig, MappingResourceResolver, ReloadableMessageSource


def example_1_concurrent_lookups() -> None:
    """Example 1: Many threads, many locales, one source."""
    print("=" * 60)
    print("Example 1: Concurrent Lookups")
    print("=" * 60)

    resolver = MappingResourceResolver(
        {
            "messages_en.properties": "hello=Hello, {0}!\n",
            "messages_de.properties": "hello=Hallo, {0}!\n",
            "messages_lv.properties": "hello=Sveiki, {0}!\n",
        }
    )
    source = ReloadableMessageSource(["messages"], resolver, default_locale="en")

    def greet(job: tuple[int, str]) -> str:
        worker_id, locale = job
        return source.get_message("hello", [f"Worker-{worker_id}"], locale)

    jobs = [(i, ("en", "de", "lv")[i % 3]) for i in range(9)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        for result in pool.map(greet, jobs):
            print(f"  {result}")


def example_2_single_flight() -> None:
    """Example 2: Concurrent first lookups share one load."""
    print("\n" + "=" * 60)
    print("Example 2: Single-Flight Loading")
    print("=" * 60)

    resolver = MappingResourceResolver({"messages.properties": "title=Dashboard\n"})
    source = ReloadableMessageSource(["messages"], resolver)

    barrier = threading.Barrier(8)

    def lookup() -> str:
        barrier.wait()
        return source.get_message("title", locale="fr")

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = [f.result() for f in [pool.submit(lookup) for _ in range(8)]]

    stats = source.get_cache_stats()
    print(f"  results: {set(results)}")
    print(f"  loads: {stats['loads']} (8 concurrent callers)")


def example_3_hot_reload() -> None:
    """Example 3: Bundles edited while readers run."""
    print("\n" + "=" * 60)
    print("Example 3: Hot Reload Under Load")
    print("=" * 60)

    resolver = MappingResourceResolver({"banner.properties": "text=Version 1\n"})
    source = ReloadableMessageSource(
        ["banner"], resolver, cache=CacheConfig(cache_seconds=0, concurrent_refresh=True)
    )
    seen: set[str] = set()
    seen_lock = threading.Lock()
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            text = source.get_message("text", locale="en")
            with seen_lock:
                seen.add(text)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()

    for version in range(2, 5):
        resolver.put("banner.properties", f"text=Version {version}\n")
        stop.wait(0.02)

    stop.set()
    for t in readers:
        t.join()

    print(f"  versions observed: {sorted(seen)}")
    print(f"  stale entries served during refresh: {source.get_cache_stats()['stale_served']}")


if __name__ == "__main__":
    example_1_concurrent_lookups()
    example_2_single_flight()
    example_3_hot_reload()

    print("\n" + "=" * 60)
    print("[SUCCESS] All examples complete!")
    print("=" * 60)
