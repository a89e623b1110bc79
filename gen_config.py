# gen_config.py
# Writes random network scenarios in the format read by network.load_network.
from __future__ import annotations
import argparse
import json
import os
import random

from network import NetConfig, NodeSpec, TaskSpec, dump_network

PAYLOADS = ["hello", "ping", "status", "sync", "heartbeat", "report"]


def make_network(n_nodes: int, tasks_per_node: int, error_rate: float,
                 max_delay_ms: int = 500, max_count: int = 5, seed: int = 42) -> NetConfig:
    rng = random.Random(seed)
    ids = list(range(1, n_nodes + 1))
    nodes = []
    for nid in ids:
        peers = [p for p in ids if p != nid] or [nid]
        tasks = tuple(
            TaskSpec(
                dest_id=rng.choice(peers),
                timeout_ms=rng.randint(0, max_delay_ms),
                payload=f"{rng.choice(PAYLOADS)}-{nid}-{k}",
                count=rng.randint(1, max_count),
            )
            for k in range(tasks_per_node)
        )
        nodes.append(NodeSpec(id=nid, tasks=tasks))
    return NetConfig(error_rate=error_rate, nodes=tuple(nodes))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--nodes", type=int, default=5)
    ap.add_argument("--tasks", type=int, default=3, help="tasks per node")
    ap.add_argument("--error-rate", type=float, default=0.1)
    ap.add_argument("--max-delay-ms", type=int, default=500)
    ap.add_argument("--max-count", type=int, default=5)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--out", type=str, default="configs/random_network.json")
    args = ap.parse_args()

    cfg = make_network(args.nodes, args.tasks, args.error_rate,
                       max_delay_ms=args.max_delay_ms, max_count=args.max_count, seed=args.seed)

    parent = os.path.dirname(args.out)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(dump_network(cfg), f, indent=2)

    total = sum(t.count for n in cfg.nodes for t in n.tasks)
    print(f"Saved '{args.out}' ({len(cfg.nodes)} nodes, {total} send attempts)")


if __name__ == "__main__":
    main()
