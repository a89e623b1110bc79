# dispatcher.py
from __future__ import annotations
import csv
import logging
import os
import queue
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from faults import SeedLike, spawn_seeds
from network import ConfigError, NetConfig
from nodes.node import ConstructionError, DeliveryEvent, Node, Task
from nodes.packet import DecodeError, decode_packet
from simclock import SimClock

logger = logging.getLogger(__name__)

_STOP = object()

CSV_FIELDS = ["seq", "elapsed_ms", "src", "dest", "random_tag", "payload"]


@dataclass(frozen=True)
class DeliveryRecord:
    seq: int
    elapsed_ms: int
    src: int
    dest: int
    random_tag: str
    payload: str
    line: str


def format_delivery(timestamp: str, dest_id: int, src_id: int, payload: str) -> str:
    return f"[{timestamp}]:({dest_id}) Message from {src_id} - '{payload}'"


class Aggregator:
    """
    Owns every node, runs one worker thread per node and a single consumer
    thread that handles DeliveryEvents one at a time, in arrival order.
    Nodes only put events on the queue; records/malformed are touched by
    the consumer alone.
    """

    def __init__(self, nodes: List[Node], clock: SimClock, sink: Callable[[str], None] = print):
        self.clock = clock
        self.sink = sink
        self._nodes: Dict[int, Node] = {}
        for n in nodes:
            if n.id in self._nodes:
                raise ConfigError(f"duplicate node id {n.id}")
            self._nodes[n.id] = n

        self.records: List[DeliveryRecord] = []
        self.malformed = 0

        self._queue: "queue.Queue[object]" = queue.Queue()
        self._workers: Optional[ThreadPoolExecutor] = None
        self._consumer: Optional[ThreadPoolExecutor] = None
        self._node_futures: List[Future] = []
        self._consumer_future: Optional[Future] = None

    # ---- construction ----
    @classmethod
    def build(
        cls,
        cfg: NetConfig,
        clock: SimClock,
        seed: SeedLike = None,
        sink: Callable[[str], None] = print,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "Aggregator":
        seeds = spawn_seeds(seed, len(cfg.nodes))
        nodes: List[Node] = []
        for spec, node_seed in zip(cfg.nodes, seeds):
            try:
                tasks = [Task(dest_id=t.dest_id, delay_ms=t.timeout_ms, payload=t.payload, count=t.count)
                         for t in spec.tasks]
                nodes.append(Node(spec.id, tasks, cfg.rate_for(spec), clock, seed=node_seed, sleep=sleep))
            except ConstructionError as e:
                raise ConfigError(f"node {spec.id}: {e}") from e
        logger.info("Built %d nodes (common error_rate=%.3f)", len(nodes), cfg.error_rate)
        return cls(nodes, clock, sink=sink)

    @property
    def nodes(self) -> Mapping[int, Node]:
        return MappingProxyType(self._nodes)

    # ---- lifecycle ----
    def start(self):
        """Launch the consumer and every node; does not wait for them."""
        if self._workers is not None:
            raise RuntimeError("aggregator already started")

        self._consumer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="aggregator")
        self._consumer_future = self._consumer.submit(self._consume)

        self._workers = ThreadPoolExecutor(max_workers=max(1, len(self._nodes)), thread_name_prefix="node")
        for node in self._nodes.values():
            self._node_futures.append(self._workers.submit(node.run, self._queue.put))
        logger.info("Started %d node workers", len(self._node_futures))

    def wait(self, timeout: Optional[float] = None) -> List[DeliveryRecord]:
        """
        Block until every node finished and the queue is drained.
        Worker/consumer exceptions are re-raised here.
        """
        if self._workers is None:
            raise RuntimeError("aggregator not started")

        done, pending = wait_futures(self._node_futures, timeout=timeout)
        if pending:
            # release the consumer and both pools so the process can still exit;
            # running nodes finish their current task list in the background
            self._queue.put(_STOP)
            self._workers.shutdown(wait=False, cancel_futures=True)
            self._consumer.shutdown(wait=False)
            raise TimeoutError(f"{len(pending)} node(s) still running after {timeout}s")

        # every producer is done, so the stop marker lands after their last event
        self._queue.put(_STOP)
        try:
            self._consumer_future.result(timeout=timeout)
        finally:
            self._workers.shutdown(wait=True)
            self._consumer.shutdown(wait=True)

        for f in self._node_futures:
            f.result()
        return list(self.records)

    def run(self, timeout: Optional[float] = None) -> List[DeliveryRecord]:
        self.start()
        return self.wait(timeout=timeout)

    # ---- single consumer ----
    def _consume(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self.on_delivery(item)

    def on_delivery(self, event: DeliveryEvent):
        decoded = decode_packet(event.packet)
        if isinstance(decoded, DecodeError):
            self.malformed += 1
            logger.warning("Error: Invalid packet format %r", decoded.text)
            return

        line = format_delivery(decoded.timestamp, event.dest_id, event.src_id, decoded.payload)
        self.records.append(DeliveryRecord(
            seq=len(self.records),
            elapsed_ms=decoded.elapsed_ms,
            src=event.src_id,
            dest=event.dest_id,
            random_tag=decoded.random_tag,
            payload=decoded.payload,
            line=line,
        ))
        self.sink(line)

    # ---- export ----
    def export_csv(self, path: str) -> str:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            w.writeheader()
            for r in self.records:
                w.writerow({
                    "seq": r.seq,
                    "elapsed_ms": r.elapsed_ms,
                    "src": r.src,
                    "dest": r.dest,
                    "random_tag": r.random_tag,
                    "payload": r.payload,
                })
        return path
