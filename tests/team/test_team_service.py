from __future__ import annotations

import io

import pytest
from werkzeug.datastructures import FileStorage

from student_portal.core.exceptions import ValidationError
from student_portal.team.service import TEAM_FILE, TeamService


@pytest.fixture
def service(tmp_path):
    return TeamService(str(tmp_path / "data"), str(tmp_path / "images"), clock_ms=lambda: 1736532000123)


def _upload(data: bytes = b"\x89PNG fake", *, mimetype: str = "image/png", filename: str = "me.png") -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=mimetype)


def test_members_start_empty(service):
    assert service.get_members() == {}


def test_update_member_merges_into_existing_entry(service, tmp_path):
    service.update_member(data={"position": "president", "name": "Pat", "image": "/images/a.png"})
    members = service.update_member(data={"position": "speaker", "name": "Sam", "image": "/images/b.png"})

    assert members == {
        "president": {"name": "Pat", "image": "/images/a.png"},
        "speaker": {"name": "Sam", "image": "/images/b.png"},
    }
    assert (tmp_path / "data" / TEAM_FILE).exists()


def test_update_member_validation(service):
    with pytest.raises(ValidationError, match="Missing required fields: position, name, image"):
        service.update_member(data={"position": "president", "name": "Pat"})
    with pytest.raises(ValidationError, match="Invalid position"):
        service.update_member(data={"position": "treasurer", "name": "Pat", "image": "x"})


def test_save_image_writes_file_and_returns_public_path(service, tmp_path):
    path = service.save_image(file=_upload(mimetype="image/jpeg", filename="portrait.jpeg"), position="vicePresident")

    assert path == "/images/vicePresident_1736532000123.jpg"
    assert (tmp_path / "images" / "vicePresident_1736532000123.jpg").read_bytes() == b"\x89PNG fake"


def test_save_image_rejections(service):
    with pytest.raises(ValidationError, match="No file uploaded"):
        service.save_image(file=None, position="president")
    with pytest.raises(ValidationError, match="Position is required"):
        service.save_image(file=_upload(), position="")
    with pytest.raises(ValidationError, match="Invalid file type"):
        service.save_image(file=_upload(mimetype="application/pdf", filename="cv.pdf"), position="president")
    with pytest.raises(ValidationError, match="File too large"):
        service.save_image(file=_upload(b"0" * (5 * 1024 * 1024 + 1)), position="president")
