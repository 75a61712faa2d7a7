"""Search service: category, tag, text and sort stages."""

import pytest

from gitlearn.core.schemas.records import LearningRecordView, SearchFilters
from gitlearn.core.services.search_service import SearchService


def view(id, title, tags=(), category=None, text=""):
    return LearningRecordView(
        id=id, title=title, explanatory_text=text, tags=list(tags), category_name=category, owner_id=1
    )


@pytest.fixture
def service():
    return SearchService()


@pytest.fixture
def views():
    return [
        view(1, "golang basics", ["go", "intro"], "Languages"),
        view(2, "Rust ownership", ["rust"], "Languages", text="Borrowing rules, like Go's escape analysis"),
        view(3, "Docker layers", ["devops"], "Tools"),
        view(4, "Channels", ["go", "concurrency"], "Languages"),
        view(5, "ábaco", [], None),
    ]


def titles(results):
    return [v.title for v in results]


def test_default_filters_sort_everything_ascending(service, views):
    results = service.search(views, SearchFilters())
    assert len(results) == len(views)
    assert titles(results) == ["ábaco", "Channels", "Docker layers", "golang basics", "Rust ownership"]


def test_category_is_exact(service, views):
    assert titles(service.search(views, SearchFilters(category="Tools"))) == ["Docker layers"]
    assert service.search(views, SearchFilters(category="tools")) == []


def test_tags_are_conjunctive(service):
    a = view(1, "A", ["x", "y"])
    b = view(2, "B", ["x"])
    assert service.search([a, b], SearchFilters(tags=["x", "y"])) == [a]
    assert service.search([a, b], SearchFilters(tags=["x"])) == [a, b]


def test_tags_are_case_sensitive(service, views):
    assert service.search(views, SearchFilters(tags=["Go"])) == []


def test_text_matches_title_or_explanation_case_insensitively(service, views):
    results = service.search(views, SearchFilters(text="Go"))
    assert titles(results) == ["golang basics", "Rust ownership"]


def test_text_is_trimmed(service, views):
    assert titles(service.search(views, SearchFilters(text="  docker  "))) == ["Docker layers"]


def test_stages_combine(service, views):
    filters = SearchFilters(category="Languages", tags=["go"], text="chan", sort="name-desc")
    assert titles(service.search(views, filters)) == ["Channels"]


def test_no_match_is_empty(service, views):
    assert service.search(views, SearchFilters(text="haskell")) == []


def test_descending(service, views):
    results = service.search(views, SearchFilters(sort="name-desc"))
    assert titles(results) == ["Rust ownership", "golang basics", "Docker layers", "Channels", "ábaco"]


def test_equal_titles_keep_prior_order_both_ways(service):
    first, second, other = view(1, "Same"), view(2, "Same"), view(3, "Alpha")
    assert service.search([first, second, other], SearchFilters()) == [other, first, second]
    assert service.search([first, second, other], SearchFilters(sort="name-desc")) == [first, second, other]


def test_idempotent(service, views):
    for filters in [SearchFilters(), SearchFilters(text="go", sort="name-desc"), SearchFilters(tags=["go"])]:
        once = service.search(views, filters)
        assert service.search(once, filters) == once


def test_input_is_not_mutated(service, views):
    before = list(views)
    service.search(views, SearchFilters(sort="name-desc"))
    assert views == before


def test_duplicate_filter_tags_are_a_set():
    assert SearchFilters(tags=["go", "go", "rust"]).tags == ["go", "rust"]


def test_search_page(service, views):
    page = service.search_page(views, SearchFilters(), page=2, per_page=2)

    assert titles(page.items) == ["Docker layers", "golang basics"]
    assert page.total == 5
    assert page.pages == 3
    assert page.has_next and page.has_prev
    assert page.filters_applied["sort"] == "name-asc"
    assert page.search_time_ms >= 0
