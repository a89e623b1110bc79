# faults.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Union

import numpy as np

SeedLike = Union[None, int, np.random.SeedSequence]

INT64_MIN = int(np.iinfo(np.int64).min)
INT64_MAX = int(np.iinfo(np.int64).max)


def spawn_seeds(seed: SeedLike, n: int) -> List[np.random.SeedSequence]:
    """
    n child seeds of one SeedSequence: independent streams per node,
    reproducible when `seed` is fixed.
    """
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return root.spawn(n)


@dataclass
class FaultConfig:
    # probability that one send attempt is lost
    packet_loss: float = 0.0        # 0.0 -> 1.0


class FaultInjector:
    """
    Random source owned by exactly one node:
    - packet loss (one uniform draw per send attempt)
    - random tag stamped on every delivered packet
    Each node gets its own generator, so no locking is needed between workers.
    """
    def __init__(self, cfg: FaultConfig, seed: SeedLike = None):
        self.cfg = cfg
        self.rng = np.random.default_rng(seed)

    def should_drop(self) -> bool:
        if self.cfg.packet_loss <= 0:
            return False
        return float(self.rng.random()) < self.cfg.packet_loss

    def random_tag(self) -> int:
        # signed 64-bit draw; the magnitude is what goes on the wire
        return abs(int(self.rng.integers(INT64_MIN, INT64_MAX, endpoint=True, dtype=np.int64)))
