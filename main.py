from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from swarmctl import db
from swarmctl.api_models import CreatedOut, DeleteOut, EventOut, NetworkIn, ServiceIn, ServiceOut, ServiceStateOut
from swarmctl.docker_ops import DockerPlatform
from swarmctl.errors import PlatformUnavailable, SwarmctlError
from swarmctl.models import Service
from swarmctl.reconciler import ServiceReconciler


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.init_db()
    yield


app = FastAPI(title="swarmctl", lifespan=lifespan)

_platform = DockerPlatform()


def get_reconciler(
    timeout: float | None = Query(None, gt=0, description="Deadline in seconds for each docker call"),
) -> ServiceReconciler:
    return ServiceReconciler(_platform).with_timeout(timeout)


@app.exception_handler(ValueError)
async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(SwarmctlError)
async def _swarmctl_error(request: Request, exc: SwarmctlError) -> JSONResponse:
    code = 503 if isinstance(exc, PlatformUnavailable) else 502
    content: dict[str, Any] = {"detail": str(exc), "error": type(exc).__name__}
    service_name = getattr(exc, "service_name", None)
    if service_name:
        content["service"] = service_name
    return JSONResponse(status_code=code, content=content)


@app.get("/health")
def health(rec: ServiceReconciler = Depends(get_reconciler)) -> dict[str, Any]:
    ping = getattr(rec.platform, "ping", None)
    return {"status": "healthy", "docker": bool(ping()) if ping else False}


@app.get("/services", response_model=list[ServiceOut])
def list_services(rec: ServiceReconciler = Depends(get_reconciler)):
    return [
        ServiceOut(name=s.name, image=s.image, replicas=s.replicas, memory_limit=s.memory_limit) for s in rec.list()
    ]


@app.get("/services/status", response_model=list[ServiceStateOut])
def list_service_states(rec: ServiceReconciler = Depends(get_reconciler)):
    return [
        ServiceStateOut(
            id=st.id,
            name=st.name,
            image=st.image,
            replicas_required=st.replicas_required,
            replicas_running=st.replicas_running,
            memory_limit=st.memory_limit,
        )
        for st in rec.list_states()
    ]


@app.post("/services", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
def create_service(req: ServiceIn, rec: ServiceReconciler = Depends(get_reconciler)):
    service = Service(
        name=req.name,
        image=req.image,
        replicas=req.replicas,
        memory_limit=req.memory_limit,
        network=req.network,
    )
    service_id = rec.create(service)
    return CreatedOut(id=service_id, name=service.name)


def _delete(names: list[str], rec: ServiceReconciler) -> DeleteOut:
    removed = rec.delete_by_name(names)
    return DeleteOut(removed=removed, skipped=[n for n in names if n not in removed])


@app.delete("/services", response_model=DeleteOut)
def delete_services(name: list[str] = Query(...), rec: ServiceReconciler = Depends(get_reconciler)):
    return _delete(name, rec)


@app.delete("/services/{name}", response_model=DeleteOut)
def delete_service(name: str, rec: ServiceReconciler = Depends(get_reconciler)):
    return _delete([name], rec)


@app.post("/networks")
def ensure_network(req: NetworkIn, rec: ServiceReconciler = Depends(get_reconciler)) -> dict[str, Any]:
    return {"name": req.name, "created": rec.networks.ensure(req.name)}


@app.delete("/networks/{name}")
def remove_network(name: str, rec: ServiceReconciler = Depends(get_reconciler)) -> dict[str, Any]:
    return {"name": name, "removed": rec.networks.remove(name)}


@app.get("/events", response_model=list[EventOut])
def events(limit: int = 50, service: str | None = None):
    return [EventOut(**e.__dict__) for e in db.list_events(limit=limit, service_name=service)]
