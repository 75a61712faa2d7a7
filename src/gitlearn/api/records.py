"""Learning record API endpoints."""

from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.repositories import RecordRepository
from ..core.schemas.records import (
    CategoryCreate,
    CategoryRow,
    CommandResult,
    LearningRecordView,
    RecordCommand,
    RecordSaveRequest,
    RecordUpdateRequest,
)
from ..core.services import WorkbenchService
from ..core.session import GitHubSession
from ..database import get_db_session
from ..middleware.auth import get_record_session

router = APIRouter(prefix="/records", tags=["records"])


@router.get("/categories/", response_model=List[CategoryRow])
async def list_categories(
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """List all categories."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.list_categories()


@router.post("/categories/", response_model=CategoryRow, status_code=201)
async def create_category(
    request: CategoryCreate,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a category (returns the existing one on a name match)."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.create_category(github, request.name)


@router.get("/tags/", response_model=List[str])
async def list_tags(
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Get all tag names."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.list_tag_names()


@router.post("/validate-links", response_model=dict)
async def validate_reference_urls(
    links: List[str],
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
) -> Dict[str, bool]:
    """Check that reference URLs are reachable."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.validate_reference_urls(links)


@router.post("/commands", response_model=CommandResult)
async def run_command(
    command: RecordCommand,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Run a view, edit or delete command."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.handle(github, command)


@router.post("/", response_model=LearningRecordView, status_code=201)
async def create_record(
    request: RecordSaveRequest,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a record, writing its edited file to GitHub first."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.save_record(github, request)


@router.get("/", response_model=List[LearningRecordView])
async def list_records(
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """List the current user's records with tags and category resolved."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.refetch(github.owner_id)


@router.get("/{record_id}", response_model=LearningRecordView)
async def get_record(
    record_id: int,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a specific record."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.get_record(github, record_id)


@router.put("/{record_id}", response_model=LearningRecordView)
async def update_record(
    record_id: int,
    request: RecordUpdateRequest,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a record, writing its edited file to GitHub first."""
    workbench = WorkbenchService(RecordRepository(session))
    return await workbench.update_record(github, record_id, request)


@router.delete("/{record_id}", status_code=204)
async def delete_record(
    record_id: int,
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a record."""
    workbench = WorkbenchService(RecordRepository(session))
    await workbench.delete_record(github, record_id)
