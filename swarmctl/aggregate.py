from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from natsort import natsorted, ns

from .models import (
    MB,
    NODE_STATE_DOWN,
    TASK_STATE_RUNNING,
    TASK_STATE_SHUTDOWN,
    NodeRecord,
    ServiceRecord,
    ServiceState,
    TaskRecord,
)


@dataclass(frozen=True)
class TaskCounts:
    running: Counter  # service_id -> running tasks on live nodes
    active: Counter  # service_id -> tasks not meant to be shut down


def count_tasks(tasks: Iterable[TaskRecord], nodes: Iterable[NodeRecord]) -> TaskCounts:
    """Count tasks per service in a single pass.

    A task only counts as running if its node is not down; the last state a
    dead node reported is not trusted.
    """
    active_nodes = {n.id for n in nodes if n.state != NODE_STATE_DOWN}

    running: Counter = Counter()
    active: Counter = Counter()
    for t in tasks:
        if t.desired_state != TASK_STATE_SHUTDOWN:
            active[t.service_id] += 1
        if t.node_id in active_nodes and t.state == TASK_STATE_RUNNING:
            running[t.service_id] += 1
    return TaskCounts(running=running, active=active)


def _to_mb(memory_bytes: int | None) -> int:
    # Rounded up, so a limit set outside swarmctl never reads lower than it is.
    return -(-(memory_bytes or 0) // MB)


def compute(
    services: Iterable[ServiceRecord],
    tasks: Iterable[TaskRecord],
    nodes: Iterable[NodeRecord],
) -> dict[str, ServiceState]:
    """Summarize replicated services as declared vs. running replicas.

    Services without a declared replica count (global mode) are left out.
    """
    counts = count_tasks(tasks, nodes)

    states: dict[str, ServiceState] = {}
    for s in services:
        if s.replicas is None:
            continue
        states[s.id] = ServiceState(
            id=s.id,
            name=s.name,
            image=s.image,
            replicas_required=s.replicas,
            replicas_running=counts.running.get(s.id, 0),
            memory_limit=_to_mb(s.memory_bytes),
        )
    return states


def sort_states(states: Iterable[ServiceState]) -> list[ServiceState]:
    """Natural name order: web-2 before web-10."""
    return natsorted(states, key=lambda s: s.name, alg=ns.IGNORECASE)
