from __future__ import annotations

import pytest

from student_portal.core.enums import Role
from student_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from student_portal.library.model import LibraryKind
from student_portal.library.service import LibraryService


@pytest.fixture
def service(library_repo):
    return LibraryService(library_repo)


def _archive(**extra):
    return {"title": "Minutes", "link": "https://example.edu/m.pdf", "archive_type": "minutes", **extra}


def test_add_and_list_archive(service):
    service.add(LibraryKind.ARCHIVE, user_id="u1", data=_archive(description="  "))

    (item,) = service.list(LibraryKind.ARCHIVE)
    assert item["title"] == "Minutes"
    assert item["archive_type"] == "minutes"
    assert item["description"] is None
    assert item["created_at"] == "2025-01-01T12:00:01.000Z"


def test_resources_have_no_archive_type(service):
    service.add(LibraryKind.RESOURCE, user_id="u1", data={"title": "Guide", "link": "https://x", "archive_type": "ignored"})

    (item,) = service.list(LibraryKind.RESOURCE)
    assert "archive_type" not in item


def test_missing_fields_message_names_the_kind_specific_fields(service):
    with pytest.raises(ValidationError, match="title, link, archive_type are required"):
        service.add(LibraryKind.ARCHIVE, user_id="u1", data={"title": "x", "link": "y"})
    with pytest.raises(ValidationError, match="Missing required fields: title, link are required"):
        service.add(LibraryKind.RESOURCE, user_id="u1", data={"title": "x"})
    with pytest.raises(ValidationError, match="id, title, link are required"):
        service.update(LibraryKind.RESOURCE, user_id="u1", data={"title": "x", "link": "y"})


def test_list_filters_by_archive_type(service):
    service.add(LibraryKind.ARCHIVE, user_id="u1", data=_archive())
    service.add(LibraryKind.ARCHIVE, user_id="u1", data=_archive(title="Bylaws", archive_type="legislation"))

    assert [i["title"] for i in service.list(LibraryKind.ARCHIVE, archive_type="legislation")] == ["Bylaws"]
    assert len(service.list(LibraryKind.ARCHIVE, archive_type="all")) == 2


def test_update_is_owner_only(service, library_repo):
    item_id = service.add(LibraryKind.ARCHIVE, user_id="owner", data=_archive())

    with pytest.raises(AuthorizationError, match="only edit your own archives"):
        service.update(LibraryKind.ARCHIVE, user_id="admin", data=_archive(id=item_id, title="Changed"))

    service.update(LibraryKind.ARCHIVE, user_id="owner", data=_archive(id=item_id, title="Changed"))
    assert library_repo.get(LibraryKind.ARCHIVE, item_id).title == "Changed"

    with pytest.raises(NotFoundError, match="Archive not found"):
        service.update(LibraryKind.ARCHIVE, user_id="owner", data=_archive(id=999))


def test_delete_allows_owner_or_moderator(service, library_repo):
    first = service.add(LibraryKind.RESOURCE, user_id="owner", data={"title": "a", "link": "b"})
    second = service.add(LibraryKind.RESOURCE, user_id="owner", data={"title": "c", "link": "d"})

    with pytest.raises(AuthorizationError):
        service.delete(LibraryKind.RESOURCE, user_id="other", current_role=Role.SENATOR, item_id=first)

    service.delete(LibraryKind.RESOURCE, user_id="owner", current_role=Role.SENATOR, item_id=first)
    service.delete(LibraryKind.RESOURCE, user_id="other", current_role=Role.COORDINATOR, item_id=second)
    assert library_repo.list(LibraryKind.RESOURCE) == []

    with pytest.raises(ValidationError, match="Resource ID is required"):
        service.delete(LibraryKind.RESOURCE, user_id="owner", current_role=None, item_id=None)


def test_clear_all_is_admin_only(service):
    service.add(LibraryKind.ARCHIVE, user_id="u1", data=_archive())
    service.add(LibraryKind.RESOURCE, user_id="u1", data={"title": "a", "link": "b"})

    with pytest.raises(AuthorizationError):
        service.clear_all(current_role=Role.COORDINATOR)

    assert service.clear_all(current_role=Role.ADMIN) == {
        "message": "All archives and resources deleted successfully",
        "archivesDeleted": 1,
        "resourcesDeleted": 1,
    }
