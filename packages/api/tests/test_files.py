# This project was developed with assistance from AI tools.
"""Tests for file upload, delete and download links."""

import pytest
from db.enums import UserRole
from fakes import SUPABASE_URL

from signal1.schemas.file import FileUpload, StoredFile
from signal1.services.access import PermissionDenied
from signal1.services.files import (
    FileDeleteError,
    FileService,
    FileValidationError,
    can_delete_file,
)

PDF = "application/pdf"


def _service(fake, **kwargs) -> FileService:
    return FileService(fake.client(), clock=lambda: 1_700_000_000.123, **kwargs)


def _upload(name="report.pdf", content_type=PDF, size=128) -> FileUpload:
    return FileUpload(file_name=name, content_type=content_type, data=b"x" * size)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_oversized_pdf_is_rejected_without_network(fake):
    """A 15 MB PDF against a 10 MB limit never reaches storage."""
    service = _service(fake)

    with pytest.raises(FileValidationError, match="10 MB"):
        await service.upload(UserRole.BROKER, "b1", _upload(size=15 * 1024 * 1024))

    assert fake.calls == []


@pytest.mark.asyncio
async def test_disallowed_type_is_rejected_without_network(fake):
    service = _service(fake)

    with pytest.raises(FileValidationError, match="image/png"):
        await service.upload(UserRole.LENDER, "l1", _upload("pic.png", "image/png"))

    assert fake.calls == []


def test_empty_file_is_rejected(fake):
    with pytest.raises(FileValidationError, match="empty"):
        _service(fake).validate(_upload(size=0))


def test_object_path_strips_directories():
    assert FileService.build_object_path("u1", "../../etc/passwd", 42) == "u1/42_passwd"
    assert FileService.build_object_path("u1", "C:\\docs\\deal.pdf", 7) == "u1/7_deal.pdf"
    assert FileService.build_object_path("u1", "", 7) == "u1/7_upload"


@pytest.mark.asyncio
async def test_admin_has_no_file_bucket(fake):
    with pytest.raises(ValueError, match="admin"):
        await _service(fake).list_files(UserRole.ADMIN, "a1")


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_upload_stores_object_then_records_row(fake):
    """The object lands under the owner's prefix and a metadata row points at it."""
    service = _service(fake)

    stored = await service.upload(UserRole.BROKER, "b1", _upload("deal.pdf"))

    assert stored.file_url_path == "b1/1700000000123_deal.pdf"
    assert stored.owner_id == "b1"
    assert ("broker_files", "b1/1700000000123_deal.pdf") in fake.objects
    rows = fake.rows("broker_files", broker_id="b1")
    assert len(rows) == 1
    assert rows[0]["file_name"] == "deal.pdf"
    assert rows[0]["file_size"] == 128
    assert rows[0]["file_type"] == PDF


@pytest.mark.asyncio
async def test_upload_row_failure_propagates_and_is_logged(fake, caplog):
    fake.fail("POST", "/rest/v1/lender_files", status=403, body={"message": "denied"})
    service = _service(fake)

    with pytest.raises(Exception, match="denied"):
        await service.upload(UserRole.LENDER, "l1", _upload())

    assert "failed to record it in lender_files" in caplog.text


@pytest.mark.asyncio
async def test_list_files_is_scoped_to_owner(fake):
    fake.add_row("lender_files", {"lender_id": "l1", "file_url_path": "l1/1_a.pdf"})
    fake.add_row("lender_files", {"lender_id": "l2", "file_url_path": "l2/1_b.pdf"})

    files = await _service(fake).list_files(UserRole.LENDER, "l1")

    assert [f.file_url_path for f in files] == ["l1/1_a.pdf"]


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


async def _stored(fake, owner="b1") -> StoredFile:
    return await _service(fake).upload(UserRole.BROKER, owner, _upload())


def test_can_delete_file_rules():
    file = StoredFile(id="f1", owner_id="b1", file_url_path="b1/1_a.pdf")
    assert can_delete_file(file, actor_id="b1", actor_role=UserRole.BROKER)
    assert can_delete_file(file, actor_id="a1", actor_role=UserRole.ADMIN)
    assert not can_delete_file(file, actor_id="b2", actor_role=UserRole.BROKER)
    assert not can_delete_file(file, actor_id="l1", actor_role=None)


@pytest.mark.asyncio
async def test_delete_removes_object_and_row(fake):
    stored = await _stored(fake)

    await _service(fake).delete(UserRole.BROKER, stored, actor_id="b1", actor_role=UserRole.BROKER)

    assert fake.objects == {}
    assert fake.rows("broker_files") == []


@pytest.mark.asyncio
async def test_delete_by_other_user_is_refused(fake):
    """Nothing is sent when the actor does not own the file."""
    stored = await _stored(fake)
    fake.calls.clear()

    with pytest.raises(PermissionDenied):
        await _service(fake).delete(UserRole.BROKER, stored, actor_id="b2", actor_role=UserRole.BROKER)

    assert fake.calls == []


@pytest.mark.asyncio
async def test_storage_failure_leaves_row_in_place(fake):
    stored = await _stored(fake)
    fake.fail("DELETE", "/storage/v1/object/broker_files", status=500)

    with pytest.raises(FileDeleteError) as exc_info:
        await _service(fake).delete(UserRole.BROKER, stored, actor_id="b1", actor_role=UserRole.BROKER)

    assert exc_info.value.phase == "storage"
    assert len(fake.rows("broker_files")) == 1
    assert fake.calls_to("/rest/v1/broker_files", "DELETE") == []


@pytest.mark.asyncio
async def test_metadata_failure_after_storage_delete(fake, caplog):
    """The object is gone but the row survives; the error names the metadata phase."""
    stored = await _stored(fake)
    fake.fail("DELETE", "/rest/v1/broker_files", status=500)

    with pytest.raises(FileDeleteError) as exc_info:
        await _service(fake).delete(UserRole.BROKER, stored, actor_id="a1", actor_role=UserRole.ADMIN)

    assert exc_info.value.phase == "metadata"
    assert fake.objects == {}
    assert len(fake.rows("broker_files")) == 1
    assert "row remains" in caplog.text


# ---------------------------------------------------------------------------
# Links and counts
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_download_url_is_signed(fake):
    stored = await _stored(fake)

    url = await _service(fake).download_url(UserRole.BROKER, stored)

    assert url.startswith(f"{SUPABASE_URL}/storage/v1/object/sign/broker_files/{stored.file_url_path}")


@pytest.mark.asyncio
async def test_counts_and_ids_span_both_tables(fake):
    fake.add_row("lender_files", {"id": "lf1", "lender_id": "l1", "file_url_path": "l1/a"})
    fake.add_row("broker_files", {"id": "bf1", "broker_id": "b1", "file_url_path": "b1/a"})
    fake.add_row("broker_files", {"id": "bf2", "broker_id": "b1", "file_url_path": "b1/b"})
    service = _service(fake)

    assert await service.count_all() == 3
    assert await service.all_file_ids() == {"broker_files": ["bf1", "bf2"], "lender_files": ["lf1"]}


def test_from_settings(fake, cfg):
    cfg.UPLOAD_MAX_SIZE_MB = 1
    service = FileService.from_settings(fake.client(), cfg)
    with pytest.raises(FileValidationError, match="1 MB"):
        service.validate(_upload(size=2 * 1024 * 1024))
