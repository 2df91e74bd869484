"""
Project Routes

Public portfolio listing and admin management of projects.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from devfolio.auth import get_current_admin
from devfolio.backend.client import HostedBackend
from devfolio.dependencies import get_backend
from devfolio.schemas.content import Project, ProjectCreate, ProjectUpdate
from devfolio.services import content_service

router = APIRouter(tags=["Projects"])
admin_router = APIRouter(tags=["Admin: Projects"], dependencies=[Depends(get_current_admin)])


@router.get("/projects", response_model=list[Project])
async def list_projects(
    search: Optional[str] = Query(None, max_length=200),
    tech: Optional[str] = Query(None, max_length=100),
    backend: HostedBackend = Depends(get_backend),
):
    """List projects, newest first, optionally filtered by text search or technology."""
    projects = await content_service.list_projects(backend)
    return content_service.filter_projects(projects, search=search, tech=tech)


@router.get("/projects/technologies", response_model=list[str])
async def list_technologies(backend: HostedBackend = Depends(get_backend)):
    projects = await content_service.list_projects(backend)
    return content_service.collect_tech(projects)


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(project_id: str, backend: HostedBackend = Depends(get_backend)):
    return await content_service.get_project(backend, project_id)


@admin_router.post("/projects", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, backend: HostedBackend = Depends(get_backend)):
    return await content_service.create_project(backend, data)


@admin_router.patch("/projects/{project_id}", response_model=Project)
async def update_project(project_id: str, data: ProjectUpdate, backend: HostedBackend = Depends(get_backend)):
    return await content_service.update_project(backend, project_id, data)


@admin_router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, backend: HostedBackend = Depends(get_backend)) -> None:
    await content_service.delete_project(backend, project_id)
