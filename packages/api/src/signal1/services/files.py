# This project was developed with assistance from AI tools.
"""Broker and lender file storage.

Objects live in the role's storage bucket under ``{owner_id}/...``; a row in
the matching ``*_files`` table records each one. Uploads are validated
(content type, size) before any request is sent. Deletion removes the object
first and the row second; the two steps are not transactional and a failure
in either raises ``FileDeleteError`` naming the phase.
"""

import logging
import os
import time
from collections.abc import Callable

from db.enums import StorageBucket, UserRole

from ..core.config import Settings
from ..schemas.file import FileUpload, StoredFile
from ..supabase import SupabaseClient, SupabaseError
from .access import PermissionDenied

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}

# role -> (metadata table, bucket, owner column)
FILE_LOCATIONS: dict[UserRole, tuple[str, StorageBucket, str]] = {
    UserRole.BROKER: ("broker_files", StorageBucket.BROKER_FILES, "broker_id"),
    UserRole.LENDER: ("lender_files", StorageBucket.LENDER_FILES, "lender_id"),
}


class FileValidationError(Exception):
    """Raised when an upload is rejected before any network call."""


class FileDeleteError(Exception):
    """Raised when one phase of a two-phase delete fails."""

    def __init__(self, phase: str, message: str):
        super().__init__(f"File delete failed during {phase}: {message}")
        self.phase = phase


def can_delete_file(file: StoredFile, *, actor_id: str, actor_role: UserRole | None) -> bool:
    """Admins may delete any file; everyone else only their own."""
    return actor_role == UserRole.ADMIN or file.owner_id == actor_id


def _location(owner_role: UserRole) -> tuple[str, StorageBucket, str]:
    try:
        return FILE_LOCATIONS[owner_role]
    except KeyError:
        raise ValueError(f"Role {owner_role.value} does not own files") from None


class FileService:
    def __init__(
        self,
        client: SupabaseClient,
        *,
        max_size_mb: int = 10,
        signed_url_ttl: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._max_bytes = max_size_mb * 1024 * 1024
        self._max_size_mb = max_size_mb
        self._signed_url_ttl = signed_url_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, client: SupabaseClient, cfg: Settings) -> "FileService":
        return cls(
            client,
            max_size_mb=cfg.UPLOAD_MAX_SIZE_MB,
            signed_url_ttl=cfg.SIGNED_URL_EXPIRES_IN,
        )

    def validate(self, upload: FileUpload) -> None:
        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise FileValidationError(
                f"File type '{upload.content_type}' is not allowed. "
                f"Accepted: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
            )
        if upload.size > self._max_bytes:
            raise FileValidationError(f"File exceeds maximum size of {self._max_size_mb} MB")
        if upload.size == 0:
            raise FileValidationError("File is empty")

    @staticmethod
    def build_object_path(owner_id: str, filename: str, timestamp_ms: int) -> str:
        """Build the object path ``{owner_id}/{timestamp_ms}_{filename}``.

        Strips path components from filename to prevent path traversal attacks.
        """
        safe_name = os.path.basename(filename.replace("\\", "/")) or "upload"
        return f"{owner_id}/{timestamp_ms}_{safe_name}"

    async def list_files(self, owner_role: UserRole, owner_id: str) -> list[StoredFile]:
        table, _, owner_column = _location(owner_role)
        rows = await self._client.table(table).select(
            filters={owner_column: owner_id}, order="created_at", desc=True
        )
        return [StoredFile.from_row(r, owner_column) for r in rows]

    async def upload(self, owner_role: UserRole, owner_id: str, upload: FileUpload) -> StoredFile:
        """Validate, store the object, then record its metadata row."""
        table, bucket, owner_column = _location(owner_role)
        self.validate(upload)

        path = self.build_object_path(owner_id, upload.file_name, int(self._clock() * 1000))
        await self._client.storage.upload(bucket.value, path, upload.data, upload.content_type)
        try:
            rows = await self._client.table(table).insert(
                {
                    owner_column: owner_id,
                    "file_name": os.path.basename(upload.file_name),
                    "file_url_path": path,
                    "file_type": upload.content_type,
                    "file_size": upload.size,
                }
            )
        except SupabaseError:
            logger.error("Stored %s/%s but failed to record it in %s", bucket.value, path, table)
            raise
        logger.info("Uploaded %s (%d bytes) to %s", path, upload.size, bucket.value)
        return StoredFile.from_row(rows[0], owner_column)

    async def delete(
        self,
        owner_role: UserRole,
        file: StoredFile,
        *,
        actor_id: str,
        actor_role: UserRole | None,
    ) -> None:
        table, bucket, _ = _location(owner_role)
        if not can_delete_file(file, actor_id=actor_id, actor_role=actor_role):
            raise PermissionDenied("You don't have permission to delete this file")

        try:
            await self._client.storage.remove(bucket.value, [file.file_url_path])
        except SupabaseError as exc:
            raise FileDeleteError("storage", exc.message) from exc

        try:
            await self._client.table(table).delete(filters={"id": file.id})
        except SupabaseError as exc:
            logger.error("Removed object %s but its %s row remains", file.file_url_path, table)
            raise FileDeleteError("metadata", exc.message) from exc

        logger.info("Deleted file %s (%s) by %s", file.id, file.file_url_path, actor_id)

    async def download_url(self, owner_role: UserRole, file: StoredFile) -> str:
        _, bucket, _ = _location(owner_role)
        return await self._client.storage.create_signed_url(
            bucket.value, file.file_url_path, self._signed_url_ttl
        )

    async def count_all(self) -> int:
        total = 0
        for table, _, _ in FILE_LOCATIONS.values():
            total += await self._client.table(table).count()
        return total

    async def all_file_ids(self) -> dict[str, list[str]]:
        """Ids of every stored file, keyed by metadata table."""
        result: dict[str, list[str]] = {}
        for table, _, _ in FILE_LOCATIONS.values():
            rows = await self._client.table(table).select("id")
            result[table] = [str(r["id"]) for r in rows]
        return result
