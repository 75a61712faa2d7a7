"""Validation rules of the record and content request schemas."""

import pytest
from pydantic import ValidationError

from gitlearn.core.schemas.content import FileWriteRequest, FolderCreateRequest
from gitlearn.core.schemas.records import (
    CommandKind,
    EditedFile,
    LearningRecordView,
    RecordCommand,
    RecordCreate,
    RecordUpdate,
    SearchFilters,
)


class TestRecordCreate:
    def test_defaults(self):
        record = RecordCreate(title="Channels")
        assert record.understanding_level == 3
        assert record.tags == []
        assert record.github_path is None

    @pytest.mark.parametrize("level", [-1, 6])
    def test_level_range(self, level):
        with pytest.raises(ValidationError):
            RecordCreate(title="x", understanding_level=level)

    def test_blank_optional_strings_become_none(self):
        record = RecordCreate(title="x", reference_url="  ", github_path=" go/a.md ")
        assert record.reference_url is None
        assert record.github_path == "go/a.md"

    def test_tags_strip_hash(self):
        assert RecordCreate(title="x", tags=["#go", " rust"]).tags == ["go", "rust"]

    @pytest.mark.parametrize("tags", [["go", "go"], ["two words"], ["a,b"], [""], ["x" * 51]])
    def test_bad_tags(self, tags):
        with pytest.raises(ValidationError):
            RecordCreate(title="x", tags=tags)

    def test_tags_are_case_sensitive(self):
        assert RecordCreate(title="x", tags=["Go", "go"]).tags == ["Go", "go"]


def test_update_tracks_set_fields():
    patch = RecordUpdate(title="New")
    assert patch.model_dump(exclude_unset=True) == {"title": "New"}


def test_view_is_frozen():
    view = LearningRecordView(id=1, title="x")
    with pytest.raises(ValidationError):
        view.title = "y"


@pytest.mark.parametrize("path", ["", "/", "a/../b", "a//b", "./a"])
def test_write_request_rejects_bad_paths(path):
    with pytest.raises(ValidationError):
        FileWriteRequest(path=path, content="x")


def test_write_request_strips_slashes():
    assert FileWriteRequest(path="/notes/a.md/", content="x").path == "notes/a.md"
    assert FolderCreateRequest(path="docs/notes/").path == "docs/notes"


def test_edited_file_path():
    assert EditedFile(path="/a.md", content="").path == "a.md"
    with pytest.raises(ValidationError):
        EditedFile(path=" / ", content="")


def test_search_filter_defaults():
    filters = SearchFilters()
    assert filters.category == "all"
    assert filters.tags == []
    assert filters.sort == "name-asc"
    with pytest.raises(ValidationError):
        SearchFilters(sort="date-desc")


def test_search_filter_tags_are_cleaned_like_stored_tags():
    filters = SearchFilters(tags=["#go", " go ", "sync", "  "])
    assert filters.tags == ["go", "sync"]


def test_command_kinds():
    assert RecordCommand(kind="view", path="a.md").kind == CommandKind.VIEW
    with pytest.raises(ValidationError):
        RecordCommand(kind="rename", id=1)
