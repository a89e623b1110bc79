# network.py
from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


class ConfigError(ValueError):
    """Unreadable or malformed network configuration."""


@dataclass(frozen=True)
class TaskSpec:
    dest_id: int
    timeout_ms: int
    payload: str
    count: int


@dataclass(frozen=True)
class NodeSpec:
    id: int
    tasks: Tuple[TaskSpec, ...] = ()
    error_rate: Optional[float] = None   # per-node override of common.error_rate


@dataclass(frozen=True)
class NetConfig:
    error_rate: float = 0.0              # common.error_rate, 0.0 -> 1.0
    nodes: Tuple[NodeSpec, ...] = field(default_factory=tuple)

    def rate_for(self, spec: NodeSpec) -> float:
        return self.error_rate if spec.error_rate is None else spec.error_rate


def _int(obj: Dict[str, Any], key: str, where: str) -> int:
    if key not in obj:
        raise ConfigError(f"{where}: missing '{key}'")
    v = obj[key]
    if isinstance(v, bool) or not isinstance(v, int):
        raise ConfigError(f"{where}: '{key}' must be an integer, got {v!r}")
    return v


def _rate(v: Any, where: str) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ConfigError(f"{where}: error_rate must be a number, got {v!r}")
    v = float(v)
    if not 0.0 <= v <= 1.0:
        raise ConfigError(f"{where}: error_rate must be in [0, 1], got {v}")
    return v


def _parse_task(obj: Any, where: str) -> TaskSpec:
    if not isinstance(obj, dict):
        raise ConfigError(f"{where}: task must be an object")
    payload = obj.get("payload")
    if not isinstance(payload, str):
        raise ConfigError(f"{where}: 'payload' must be a string, got {payload!r}")
    return TaskSpec(
        dest_id=_int(obj, "dest_id", where),
        timeout_ms=_int(obj, "timeout_ms", where),
        payload=payload,
        count=_int(obj, "count", where),
    )


def _parse_node(obj: Any, where: str) -> NodeSpec:
    if not isinstance(obj, dict):
        raise ConfigError(f"{where}: node must be an object")
    node_id = _int(obj, "id", where)
    where = f"node {node_id}"
    tasks_raw = obj.get("tasks", [])
    if not isinstance(tasks_raw, list):
        raise ConfigError(f"{where}: 'tasks' must be a list")
    tasks = tuple(_parse_task(t, f"{where} task {i}") for i, t in enumerate(tasks_raw))
    rate = obj.get("error_rate")
    return NodeSpec(id=node_id, tasks=tasks, error_rate=None if rate is None else _rate(rate, where))


def parse_network(doc: Any) -> NetConfig:
    """
    Validate an already-decoded JSON document:
    {"common": {"error_rate": 0.1}, "nodes": [{"id": 1, "tasks": [...]}, ...]}
    """
    if not isinstance(doc, dict):
        raise ConfigError("top-level JSON value must be an object")

    common = doc.get("common", {})
    if not isinstance(common, dict):
        raise ConfigError("'common' must be an object")
    error_rate = _rate(common.get("error_rate", 0.0), "common")

    nodes_raw = doc.get("nodes", [])
    if not isinstance(nodes_raw, list):
        raise ConfigError("'nodes' must be a list")
    nodes = tuple(_parse_node(n, f"nodes[{i}]") for i, n in enumerate(nodes_raw))

    seen = set()
    for n in nodes:
        if n.id in seen:
            raise ConfigError(f"duplicate node id {n.id}")
        seen.add(n.id)

    return NetConfig(error_rate=error_rate, nodes=nodes)


def load_network(path: Union[str, Path]) -> NetConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to open file: {path} ({e.strerror or e})") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse JSON data in {path}: {e}") from e
    return parse_network(doc)


def dump_network(cfg: NetConfig) -> Dict[str, Any]:
    nodes: List[Dict[str, Any]] = []
    for n in cfg.nodes:
        entry: Dict[str, Any] = {
            "id": n.id,
            "tasks": [
                {"dest_id": t.dest_id, "timeout_ms": t.timeout_ms, "payload": t.payload, "count": t.count}
                for t in n.tasks
            ],
        }
        if n.error_rate is not None:
            entry["error_rate"] = n.error_rate
        nodes.append(entry)
    return {"common": {"error_rate": cfg.error_rate}, "nodes": nodes}
