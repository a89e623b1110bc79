# nodes/node.py
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Tuple

from faults import FaultConfig, FaultInjector, SeedLike
from nodes.packet import Packet
from simclock import SimClock

logger = logging.getLogger(__name__)


class ConstructionError(ValueError):
    """Invalid task or node parameters."""


class NodeState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


def _require_int(name: str, value) -> int:
    # bool is an int subclass but never a valid id/count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConstructionError(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class Task:
    dest_id: int
    delay_ms: int
    payload: str
    count: int

    def __post_init__(self):
        _require_int("dest_id", self.dest_id)
        _require_int("delay_ms", self.delay_ms)
        _require_int("count", self.count)
        if self.delay_ms < 0:
            raise ConstructionError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.count < 0:
            raise ConstructionError(f"count must be >= 0, got {self.count}")
        if not isinstance(self.payload, str):
            raise ConstructionError(f"payload must be a string, got {self.payload!r}")


@dataclass(frozen=True)
class DeliveryEvent:
    src_id: int
    dest_id: int
    packet: str


class Node:
    def __init__(
        self,
        node_id: int,
        tasks: Iterable[Task],
        error_rate: float,
        clock: SimClock,
        seed: SeedLike = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.id = _require_int("node_id", node_id)
        self.tasks: Tuple[Task, ...] = tuple(tasks)
        for t in self.tasks:
            if not isinstance(t, Task):
                raise ConstructionError(f"node {node_id}: expected Task, got {t!r}")
        if isinstance(error_rate, bool) or not isinstance(error_rate, (int, float)):
            raise ConstructionError(f"node {node_id}: error_rate must be a number, got {error_rate!r}")
        rate = float(error_rate)
        if not 0.0 <= rate <= 1.0:
            raise ConstructionError(f"node {node_id}: error_rate must be in [0, 1], got {rate}")
        self.error_rate = rate
        self.clock = clock
        self._fault = FaultInjector(FaultConfig(packet_loss=rate), seed=seed)
        self._sleep = sleep
        self._state = NodeState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> NodeState:
        return self._state

    @property
    def total_repetitions(self) -> int:
        return sum(t.count for t in self.tasks)

    def _make_packet(self, payload: str) -> str:
        return Packet(
            elapsed_ms=self.clock.elapsed_ms(),
            random_tag=self._fault.random_tag(),
            payload=payload,
        ).encode()

    def run(self, emit: Callable[[DeliveryEvent], None]) -> int:
        """
        Play every task in order, `count` times each:
        sleep delay_ms -> maybe drop -> emit one DeliveryEvent.
        Returns the number of emitted events.
        """
        with self._state_lock:
            if self._state is not NodeState.IDLE:
                raise RuntimeError(f"node {self.id} already {self._state.value}")
            self._state = NodeState.RUNNING

        sent = 0
        try:
            for task in self.tasks:
                for _ in range(task.count):
                    self._sleep(task.delay_ms / 1000.0)

                    if self._fault.should_drop():
                        logger.debug("Error occurred while sending packet from %s to %s", self.id, task.dest_id)
                        continue

                    emit(DeliveryEvent(src_id=self.id, dest_id=task.dest_id, packet=self._make_packet(task.payload)))
                    sent += 1
        finally:
            self._state = NodeState.FINISHED
        return sent

    def __repr__(self):
        return f"Node(id={self.id}, tasks={len(self.tasks)}, error_rate={self.error_rate}, state={self._state.value})"
