"""
Prometheus metrics helpers shared by the flag service and its caches.
"""

from __future__ import annotations

from prometheus_client import Counter

CACHE_HITS = Counter(
    "channel_flag_cache_hits_total",
    "How many flag lookups were served from cache",
    ["query"],
)
CACHE_MISSES = Counter(
    "channel_flag_cache_misses_total",
    "How many flag lookups fell through to the flag store",
    ["query"],
)
FLAG_MUTATIONS = Counter(
    "channel_flag_mutations_total",
    "Add/delete requests grouped by outcome",
    ["operation", "outcome"],
)
