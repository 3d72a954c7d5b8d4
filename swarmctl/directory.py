from __future__ import annotations

from typing import Iterable

from .models import Service, ServiceState


def to_service(state: ServiceState) -> Service:
    # The public view reports declared capacity, not what happens to be running.
    return Service(
        name=state.name,
        image=state.image,
        replicas=int(state.replicas_required),
        memory_limit=state.memory_limit,
    )


def to_state(service: Service, service_id: str = "", running: int = 0) -> ServiceState:
    return ServiceState(
        id=service_id,
        name=service.name,
        image=service.image,
        replicas_required=service.desired_replicas,
        replicas_running=running,
        memory_limit=service.memory_limit,
    )


def match_by_name(requested: Iterable[str], live: Iterable[ServiceState]) -> list[ServiceState]:
    """Pick the live services whose name was asked for.

    Order follows the request, then the live listing. A live service is
    returned at most once; names nothing matches are dropped.
    """
    live = list(live)
    seen: set[str] = set()
    out: list[ServiceState] = []
    for name in requested:
        for st in live:
            if st.name == name and st.id not in seen:
                seen.add(st.id)
                out.append(st)
    return out
