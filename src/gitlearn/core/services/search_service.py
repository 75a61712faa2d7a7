"""Search service implementation."""

import logging
import time
from typing import List, Optional, Sequence

from ..codec import collation_key
from ..schemas.records import LearningRecordView, SearchFilters, SearchResponse
from .interfaces import ISearchService

logger = logging.getLogger(__name__)


class SearchService(ISearchService):
    """Filters and sorts record views.

    Stages run in a fixed order: category, tags, text, sort. Each stage
    only sees what the previous one kept. Nothing here touches I/O, so the
    same views and filters always give the same result.
    """

    def search(self, views: Sequence[LearningRecordView], filters: SearchFilters) -> List[LearningRecordView]:
        results = list(views)

        if filters.category != "all":
            results = [view for view in results if view.category_name == filters.category]

        if filters.tags:
            wanted = set(filters.tags)
            # all requested tags must be present
            results = [view for view in results if wanted.issubset(view.tags)]

        text = filters.text.strip().lower()
        if text:
            results = [
                view
                for view in results
                if text in view.title.lower() or text in (view.explanatory_text or "").lower()
            ]

        # reverse=True keeps sort stability, so equal titles stay in prior order
        return sorted(
            results,
            key=lambda view: collation_key(view.title),
            reverse=filters.sort == "name-desc",
        )

    def search_page(
        self,
        views: Sequence[LearningRecordView],
        filters: SearchFilters,
        page: int = 1,
        per_page: int = 20,
        started_at: Optional[float] = None,
    ) -> SearchResponse:
        """Search, then cut one page out of the ordered result."""
        start_time = started_at if started_at is not None else time.time()
        results = self.search(views, filters)

        offset = (page - 1) * per_page
        items = results[offset:offset + per_page]
        search_time_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Search matched {len(results)} of {len(views)} records",
            extra={"filters": filters.model_dump(), "search_time_ms": round(search_time_ms, 2)},
        )
        return SearchResponse.create(
            items=items,
            total=len(results),
            page=page,
            per_page=per_page,
            filters_applied=filters.model_dump(),
            search_time_ms=search_time_ms,
        )
