from __future__ import annotations

from pydantic import BaseModel, Field


class ServiceIn(BaseModel):
    name: str = Field(..., description="Swarm service name")
    image: str = Field(..., description="Docker image (name:tag)")
    replicas: int = Field(1, ge=0, le=1000, description="Desired replicas; 0 means 1")
    memory_limit: int = Field(0, ge=0, description="Memory limit in MB; 0 = unlimited")
    network: str | None = Field(None, description="Overlay network; defaults to the configured one")


class ServiceOut(BaseModel):
    name: str
    image: str
    replicas: int
    memory_limit: int


class ServiceStateOut(BaseModel):
    id: str
    name: str
    image: str
    replicas_required: int
    replicas_running: int
    memory_limit: int


class CreatedOut(BaseModel):
    id: str
    name: str


class DeleteOut(BaseModel):
    removed: list[str]
    skipped: list[str]


class NetworkIn(BaseModel):
    name: str = Field(..., min_length=1)


class EventOut(BaseModel):
    id: int
    ts: str
    level: str
    service_name: str | None = None
    message: str
