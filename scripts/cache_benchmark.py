#!/usr/bin/env python3
"""
Cache benchmark utility for hit ratio and regeneration characterization.

Simulates a hot key read by several threads while its producer is slow, and
reports how often the producer ran with and without early expiration.

Usage examples:
  PYTHONPATH=src python scripts/cache_benchmark.py --backend inmemory --beta 1.0
  PYTHONPATH=src python scripts/cache_benchmark.py --backend redis --redis-url redis://localhost:6379/0
  PYTHONPATH=src python scripts/cache_benchmark.py --backend file --file-path /tmp/depcache-bench
"""

from __future__ import annotations

import argparse
import statistics
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

from depcache import Cache, CacheSettings, TagDependency, create_backend


def run_benchmark(
    *,
    backend: str,
    num_reads: int,
    concurrency: int,
    ttl_s: int,
    producer_ms: float,
    beta: float,
    invalidate_every: int,
    redis_url: str | None,
    file_path: str,
) -> None:
    if backend == "redis" and not redis_url:
        raise ValueError("--redis-url is required for redis backend")

    settings = CacheSettings(
        backend=backend,
        key_prefix=f"bench{uuid.uuid4().hex[:8]}",
        beta=beta,
        file_path=file_path,
        redis_url=redis_url,
    )
    cache = Cache(
        create_backend(settings),
        key_prefix=settings.key_prefix,
        beta=settings.beta,
    )

    producer_calls = 0
    calls_lock = threading.Lock()
    latencies: list[float] = []
    latencies_lock = threading.Lock()

    def producer(_: Cache) -> dict[str, float]:
        nonlocal producer_calls
        with calls_lock:
            producer_calls += 1
        time.sleep(producer_ms / 1000.0)
        return {"generated_at": time.time()}

    def read(index: int) -> None:
        if invalidate_every and index and index % invalidate_every == 0:
            TagDependency.invalidate(cache, "bench")
        started = time.perf_counter()
        cache.get_or_set("hot", producer, ttl=ttl_s, dependency=TagDependency("bench"))
        elapsed = time.perf_counter() - started
        with latencies_lock:
            latencies.append(elapsed)

    started = time.time()
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        list(pool.map(read, range(num_reads)))
    elapsed = time.time() - started
    cache.clear()

    p50 = statistics.median(latencies) if latencies else 0.0
    p95 = sorted(latencies)[int(0.95 * (len(latencies) - 1))] if latencies else 0.0
    hit_ratio = 1.0 - producer_calls / num_reads if num_reads else 0.0

    print(f"backend={backend}")
    print(f"reads={num_reads}")
    print(f"concurrency={concurrency}")
    print(f"beta={beta:.2f}")
    print(f"producer_calls={producer_calls}")
    print(f"hit_ratio={hit_ratio:.3f}")
    print(f"elapsed_s={elapsed:.3f}")
    print(f"read_p50_ms={p50 * 1000:.2f}")
    print(f"read_p95_ms={p95 * 1000:.2f}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cache benchmark utility")
    parser.add_argument("--backend", choices=("inmemory", "file", "redis"), default="inmemory")
    parser.add_argument("--num-reads", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=16)
    parser.add_argument("--ttl-s", type=int, default=2)
    parser.add_argument("--producer-ms", type=float, default=20.0)
    parser.add_argument("--beta", type=float, default=1.0)
    parser.add_argument("--invalidate-every", type=int, default=0)
    parser.add_argument("--redis-url", type=str, default=None)
    parser.add_argument("--file-path", type=str, default=".depcache-bench")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    run_benchmark(
        backend=args.backend,
        num_reads=args.num_reads,
        concurrency=args.concurrency,
        ttl_s=args.ttl_s,
        producer_ms=args.producer_ms,
        beta=args.beta,
        invalidate_every=args.invalidate_every,
        redis_url=args.redis_url,
        file_path=args.file_path,
    )


if __name__ == "__main__":
    main()
