"""
tagged_cache.py: minimal depcache example.

Caches a slow lookup, invalidates it through a tag, and shows the producer
running again only after the invalidation.

Usage:
    python examples/tagged_cache.py
"""

import logging
import time

from depcache import Cache, InMemoryCacheBackend, TagDependency, Ttl


def load_profile(user_id: int) -> dict:
    time.sleep(0.2)
    return {"id": user_id, "loaded_at": time.strftime("%H:%M:%S")}


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    cache = Cache(InMemoryCacheBackend(), default_ttl=Ttl.minutes(5))

    def profile() -> dict:
        return cache.get_or_set(
            ("profile", 42),
            lambda _: load_profile(42),
            dependency=TagDependency("user-42"),
        )

    print("first:", profile())
    print("cached:", profile())

    TagDependency.invalidate(cache, "user-42")
    print("after invalidation:", profile())


if __name__ == "__main__":
    main()
