"""
Unit tests for FileMetadataService against a moto DynamoDB table.
"""

import pytest

from file_manager.errors import AlreadyExistsError, ErrorCode
from tests.consts import TEST_USER_ID


def create_file(file_service, project_id="p1", file_id="f1", file_type="application/pdf", file_size=1024):
    return file_service.create_file_metadata(
        project_id=project_id,
        file_id=file_id,
        file_name=f"{file_id}.pdf",
        file_type=file_type,
        file_extension=".pdf",
        file_size=file_size,
        s3_key=f"{project_id}/{file_id}/{file_id}.pdf",
        uploaded_by=TEST_USER_ID,
    )


def test_new_file_is_pending(file_service):
    file = create_file(file_service)

    assert file["status"] == "pending"
    assert file["file_size"] == 1024
    assert file["uploaded_by"] == TEST_USER_ID
    assert file_service.get_file("p1", "f1") == file


def test_file_collision_is_rejected(file_service):
    create_file(file_service, file_size=1)

    with pytest.raises(AlreadyExistsError) as exc_info:
        create_file(file_service, file_size=2)

    assert exc_info.value.code == ErrorCode.FILE_ALREADY_EXISTS
    assert file_service.get_file("p1", "f1")["file_size"] == 1


def test_status_overwrite_has_no_guard(file_service):
    create_file(file_service)

    assert file_service.update_file_status("p1", "f1", "uploaded")["status"] == "uploaded"
    assert file_service.update_file_status("p1", "f1", "pending")["status"] == "pending"


def test_status_update_on_missing_file(file_service):
    assert file_service.update_file_status("p1", "ghost", "uploaded") is None
    assert file_service.get_file_row("p1", "ghost") is None


def test_soft_delete_hides_the_file_but_keeps_the_row(file_service):
    create_file(file_service)

    file_service.soft_delete_file("p1", "f1")

    assert file_service.get_file("p1", "f1") is None
    assert file_service.get_file_row("p1", "f1")["status"] == "deleted"


def test_hard_delete_removes_the_row(file_service):
    create_file(file_service)

    file_service.hard_delete_file("p1", "f1")

    assert file_service.get_file_row("p1", "f1") is None


def test_hard_delete_of_missing_row_is_not_an_error(file_service):
    file_service.hard_delete_file("p1", "ghost")


class TestListFiles:
    @pytest.fixture(autouse=True)
    def seed_files(self, file_service):
        create_file(file_service, file_id="doc", file_type="application/pdf")
        create_file(file_service, file_id="img", file_type="image/png")
        create_file(file_service, file_id="gone", file_type="image/png")
        create_file(file_service, project_id="p2", file_id="elsewhere")
        file_service.soft_delete_file("p1", "gone")
        self.file_service = file_service

    def test_deleted_files_are_hidden_by_default(self):
        page = self.file_service.list_files("p1")

        assert sorted(f["file_id"] for f in page.items) == ["doc", "img"]

    def test_filter_by_mime_type(self):
        page = self.file_service.list_files("p1", file_type="image/png")

        assert [f["file_id"] for f in page.items] == ["img"]

    def test_filter_by_status(self):
        page = self.file_service.list_files("p1", status="deleted")

        assert [f["file_id"] for f in page.items] == ["gone"]

    def test_mime_type_and_status_combine(self):
        page = self.file_service.list_files("p1", file_type="application/pdf", status="deleted")

        assert page.items == []


def test_following_cursors_yields_every_file_once(file_service):
    file_ids = [f"f{i:02d}" for i in range(11)]
    for file_id in file_ids:
        create_file(file_service, file_id=file_id)

    seen = []
    cursor = None
    for _ in range(20):
        page = file_service.list_files("p1", limit=4, cursor=cursor)
        seen.extend(f["file_id"] for f in page.items)
        cursor = page.next_cursor
        if cursor is None:
            break

    assert cursor is None
    assert seen == sorted(set(seen))
    assert seen == file_ids
