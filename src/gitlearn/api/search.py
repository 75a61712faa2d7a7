"""Search API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..core.repositories import RecordRepository
from ..core.schemas.records import SearchFilters, SearchResponse, SortOrder
from ..core.services import WorkbenchService
from ..core.session import GitHubSession
from ..database import get_db_session
from ..middleware.auth import get_record_session

router = APIRouter(prefix="/search", tags=["search"])

settings = get_settings()


@router.get("/records", response_model=SearchResponse)
async def search_records(
    q: str = Query("", description="Text to find in title or explanation"),
    category: str = Query("all", description="'all' or a category name"),
    tags: Optional[List[str]] = Query(None, description="Records must carry every tag"),
    sort: SortOrder = Query("name-asc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    github: GitHubSession = Depends(get_record_session),
    session: AsyncSession = Depends(get_db_session),
):
    """Filter records by category, tags and text, sorted by title."""
    workbench = WorkbenchService(RecordRepository(session))
    filters = SearchFilters(category=category, tags=tags or [], text=q, sort=sort)
    return await workbench.search_records(github, filters, page=page, per_page=per_page)
