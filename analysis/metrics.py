# analysis/metrics.py
from __future__ import annotations
from collections import Counter
from typing import Any, Dict, Iterable, Optional

import numpy as np


def gini(x: np.ndarray) -> float:
    """
    x must be non-negative.
    """
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return 0.0
    if np.allclose(x.sum(), 0.0):
        return 0.0
    x = np.sort(x)
    n = x.size
    cumx = np.cumsum(x)
    # Gini = 1 - 2 * area under Lorenz curve
    lorenz_area = (cumx / cumx[-1]).sum() / n
    return 1.0 - 2.0 * (lorenz_area - (0.5 / n))


def top_share(x: np.ndarray, frac: float) -> float:
    """
    frac=0.25 => share of the busiest 25% of senders
    """
    x = np.asarray(x, dtype=float)
    if x.size == 0 or np.allclose(x.sum(), 0.0):
        return 0.0
    n = x.size
    k = max(1, int(np.ceil(frac * n)))
    xs = np.sort(x)[::-1]
    return float(xs[:k].sum() / xs.sum())


def delivery_summary(records: Iterable[Any], node_ids: Optional[Iterable[int]] = None) -> Dict[str, Any]:
    """
    Summarise DeliveryRecords in arrival order.
    Only delivered packets are counted; drops never reach the dispatcher.
    node_ids adds zero counts for senders that delivered nothing, so they
    stay in the gini/top-share population.
    """
    records = list(records)
    per_src: Counter = Counter({nid: 0 for nid in (node_ids or ())})
    per_src.update(r.src for r in records)
    per_dst = Counter(r.dest for r in records)
    counts = np.fromiter(per_src.values(), dtype=float, count=len(per_src))

    if not records:
        return {
            "total": 0,
            "per_source": dict(sorted(per_src.items())),
            "per_destination": {},
            "first_ms": 0,
            "last_ms": 0,
            "mean_gap_ms": 0.0,
            "gini_sources": 0.0,
            "top25_share": 0.0,
        }

    t = np.asarray([r.elapsed_ms for r in records], dtype=float)
    gaps = np.diff(t)

    return {
        "total": len(records),
        "per_source": dict(sorted(per_src.items())),
        "per_destination": dict(sorted(per_dst.items())),
        "first_ms": int(t.min()),
        "last_ms": int(t.max()),
        "mean_gap_ms": round(float(gaps.mean()), 3) if gaps.size else 0.0,
        "gini_sources": round(gini(counts), 4),
        "top25_share": round(top_share(counts, 0.25), 4),
    }
