"""
Project management API routes.

Provides endpoints for project CRUD operations within tenant context.
Project names are unique per tenant; creating a project under the name of
a deleted one restores it.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import or_
from uuid import UUID

from ...database.models import Project, ProjectStatus, RecordState
from ...schemas.common import PagedResult
from ...schemas.employee import ProjectCreateRequest, ProjectUpdateRequest, ProjectResponse
from ...auth.dependencies import get_tenant_scope
from ...services.errors import Conflict, InvalidArgument, NotFound
from ...services.tenant_scope import TenantScope
from ...services.time_entries import MAX_PAGE_SIZE, clean_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])

DEFAULT_PROJECT_PAGE_SIZE = 15


def _parse_status(value: Optional[str], default: Optional[ProjectStatus] = None) -> Optional[ProjectStatus]:
    if value is None or not value.strip():
        return default
    try:
        return ProjectStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ProjectStatus)
        raise InvalidArgument(f"status must be one of: {allowed}")


def _check_dates(project: Project):
    if (project.planned_start_date and project.planned_end_date
            and project.planned_end_date < project.planned_start_date):
        raise InvalidArgument("planned_end_date must not be before planned_start_date")


def _get_project(scope: TenantScope, project_id: UUID) -> Project:
    project = scope.get(Project, project_id)
    if not project or project.is_deleted:
        raise NotFound("Project not found")
    return project


# PUBLIC_INTERFACE
@router.get("/", response_model=PagedResult[ProjectResponse],
           summary="List projects",
           description="Get a paginated list of projects with optional filtering.")
async def list_projects(
    keyword: Optional[str] = Query(None, description="Name or code contains"),
    status: Optional[str] = Query(None, description="Filter by project status"),
    sort: Optional[str] = Query(None, description="name_asc or created_at_desc"),
    page: int = Query(1, description="Page number"),
    page_size: int = Query(DEFAULT_PROJECT_PAGE_SIZE, description="Items per page"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """List projects in the current tenant."""
    page = page if page > 0 else 1
    page_size = min(page_size if page_size > 0 else DEFAULT_PROJECT_PAGE_SIZE, MAX_PAGE_SIZE)

    query = scope.query(Project).filter(Project.state == RecordState.ACTIVE)

    if keyword and keyword.strip():
        term = keyword.strip()
        query = query.filter(or_(Project.name.contains(term), Project.code.contains(term)))

    project_status = _parse_status(status)
    if project_status is not None:
        query = query.filter(Project.status == project_status)

    if sort == "name_asc":
        query = query.order_by(Project.name.asc())
    else:
        query = query.order_by(Project.created_at.desc())

    total = query.count()
    projects = query.offset((page - 1) * page_size).limit(page_size).all()

    return PagedResult[ProjectResponse](
        items=[ProjectResponse.model_validate(p) for p in projects],
        total=total,
        page=page,
        page_size=page_size
    )


# PUBLIC_INTERFACE
@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
            summary="Create project",
            description="Create a project, or restore a deleted project with the same name.")
async def create_project(
    request: ProjectCreateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """
    Create a new project.

    If a deleted project already uses the name it is restored and its fields
    overwritten; an active project with the name is a conflict.
    """
    name = clean_text(request.name)
    if name is None:
        raise InvalidArgument("name must not be empty")
    project_status = _parse_status(request.status, ProjectStatus.ACTIVE)

    existing = scope.query(Project).filter(Project.name == name).first()
    if existing is not None and not existing.is_deleted:
        raise Conflict("Project with this name already exists")

    if existing is not None:
        project = existing
        project.restore()
    else:
        project = scope.add(Project(name=name))

    project.code = clean_text(request.code)
    project.status = project_status
    project.planned_start_date = request.planned_start_date
    project.planned_end_date = request.planned_end_date
    project.remark = clean_text(request.remark)
    _check_dates(project)

    scope.commit()
    scope.refresh(project)

    action = "Restored" if existing is not None else "Created"
    logger.info(f"{action} project {project.id} in tenant {scope.tenant_id}")
    return ProjectResponse.model_validate(project)


# PUBLIC_INTERFACE
@router.get("/{project_id}", response_model=ProjectResponse,
           summary="Get project details",
           description="Get detailed information about a specific project.")
async def get_project(
    project_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Get project details."""
    return ProjectResponse.model_validate(_get_project(scope, project_id))


# PUBLIC_INTERFACE
@router.put("/{project_id}", response_model=ProjectResponse,
           summary="Update project",
           description="Update a project; omitted fields are left unchanged.")
async def update_project(
    project_id: UUID,
    request: ProjectUpdateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Update a project."""
    project = _get_project(scope, project_id)

    if request.name is not None:
        name = clean_text(request.name)
        if name is None:
            raise InvalidArgument("name must not be empty")
        clash = scope.query(Project).filter(Project.name == name, Project.id != project_id).first()
        if clash is not None:
            raise Conflict("Project with this name already exists")
        project.name = name

    if request.code is not None:
        project.code = clean_text(request.code)
    if request.status is not None:
        project.status = _parse_status(request.status, project.status)
    if request.planned_start_date is not None:
        project.planned_start_date = request.planned_start_date
    if request.planned_end_date is not None:
        project.planned_end_date = request.planned_end_date
    if request.remark is not None:
        project.remark = clean_text(request.remark)
    _check_dates(project)

    scope.commit()
    scope.refresh(project)
    return ProjectResponse.model_validate(project)


# PUBLIC_INTERFACE
@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT,
              summary="Delete project",
              description="Soft delete a project; it can be restored by creating it again.")
async def delete_project(
    project_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Soft delete a project."""
    project = _get_project(scope, project_id)
    project.mark_deleted()
    scope.commit()
    logger.info(f"Deleted project {project_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
