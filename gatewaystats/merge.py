from __future__ import annotations
from typing import Any, Dict, List, Sequence

Bucket = Dict[str, Any]

def merge(buckets: Sequence[Bucket], buckets_per_group: int) -> List[Bucket]:
    """Fold consecutive groups of ``buckets_per_group`` buckets into one mapping each.

    Buckets in a group are combined left to right and later fields overwrite
    earlier ones. Values are not summed.
    """
    if buckets_per_group < 1:
        raise ValueError("buckets_per_group must be at least 1")
    if len(buckets) % buckets_per_group:
        raise ValueError(f"{len(buckets)} buckets do not split into groups of {buckets_per_group}")

    merged: List[Bucket] = []
    for start in range(0, len(buckets), buckets_per_group):
        combined: Bucket = {}
        for bucket in buckets[start:start + buckets_per_group]:
            combined.update(bucket)
        merged.append(combined)
    return merged

def merge_one(buckets: Sequence[Bucket]) -> Bucket:
    if not buckets:
        return {}
    return merge(buckets, len(buckets))[0]
