# This project was developed with assistance from AI tools.
"""Dashboard data views for lenders, brokers and admins.

Each view acts on behalf of the user held by the session store. Nothing is
updated optimistically: callers reload (or apply realtime events) after a
write succeeds.
"""

import logging
from collections.abc import Awaitable

from db.enums import UserRole
from pydantic import BaseModel

from ..core.auth import parse_role
from ..schemas.admin import DashboardStats, DirectoryEntry, RoleChangeResult, UserDetailUpdate
from ..schemas.dashboard import AdminDashboardView, RoleDashboardView
from ..schemas.file import FileUpload, StoredFile
from ..schemas.note import AdminNote
from ..schemas.profile import LenderProfile, ProfileUpdate, RoleProfile
from ..schemas.realtime import ChangeEvent
from ..supabase import SupabaseError
from .access import PermissionDenied
from .admin_proxy import AdminProxyClient, AdminProxyError
from .directory import UserDirectory
from .files import FileService
from .notes import AdminNotesService
from .profiles import ProfileRepository, ProfileValidationError, is_role_profile_complete
from .session import SessionManager

logger = logging.getLogger(__name__)


class _DashboardBase:
    role: UserRole

    def __init__(
        self,
        session: SessionManager,
        profiles: ProfileRepository,
        files: FileService,
        notes: AdminNotesService,
    ):
        self._session = session
        self._profiles = profiles
        self._files = files
        self._notes = notes

    @property
    def actor_id(self) -> str:
        if self._session.identity is None:
            raise PermissionDenied("Not signed in")
        return self._session.identity.id

    @property
    def actor_role(self) -> UserRole | None:
        profile = self._session.profile
        return profile.user_role if profile else None

    def _require_role(self) -> str:
        user_id = self.actor_id
        if self.actor_role != self.role:
            raise PermissionDenied(f"{self.role.value.capitalize()} dashboard requires the {self.role.value} role")
        return user_id


class RoleDashboard(_DashboardBase):
    """Own profile, files and notes for a lender or broker."""

    async def load(self) -> RoleDashboardView:
        user_id = self._require_role()
        role_profile = await self._profiles.get_role_profile(user_id, self.role)
        return RoleDashboardView(
            profile=self._session.profile,
            role_profile=role_profile,
            profile_complete=is_role_profile_complete(self.role, role_profile),
            files=await self._files.list_files(self.role, user_id),
            unread_notes=await self._notes.unread_for_user(user_id),
        )

    async def save_profile(self, update: BaseModel | dict) -> RoleProfile | None:
        user_id = self._require_role()
        return await self._profiles.upsert_role_profile(user_id, self.role, update)

    async def save_basic_info(self, update: ProfileUpdate) -> None:
        user_id = self._require_role()
        profile = await self._profiles.update_profile(user_id, update)
        if profile is not None:
            self._session.set_profile(profile)

    async def complete_onboarding(self, submission: BaseModel | dict) -> RoleProfile | None:
        user_id = self._require_role()
        return await self._profiles.complete_onboarding(user_id, self.role, submission)

    async def list_files(self) -> list[StoredFile]:
        return await self._files.list_files(self.role, self._require_role())

    async def upload_file(self, upload: FileUpload) -> StoredFile:
        return await self._files.upload(self.role, self._require_role(), upload)

    async def delete_file(self, file: StoredFile) -> None:
        user_id = self._require_role()
        await self._files.delete(self.role, file, actor_id=user_id, actor_role=self.role)

    async def download_url(self, file: StoredFile) -> str:
        self._require_role()
        return await self._files.download_url(self.role, file)

    async def notes(self) -> list[AdminNote]:
        return await self._notes.list_for_user(self._require_role())

    async def mark_note_read(self, note_id: str) -> AdminNote | None:
        return await self._notes.mark_read(
            actor_id=self._require_role(), actor_role=self.role, note_id=note_id
        )


class LenderDashboard(RoleDashboard):
    role = UserRole.LENDER

    async def upload_guideline(self, upload: FileUpload) -> LenderProfile | None:
        """Store a lending-guideline document and point the lender row at it."""
        user_id = self._require_role()
        stored = await self._files.upload(self.role, user_id, upload)
        return await self._profiles.upsert_role_profile(
            user_id, self.role, {"guideline_file_url": stored.file_url_path}
        )


class BrokerDashboard(RoleDashboard):
    role = UserRole.BROKER


class AdminDashboard(_DashboardBase):
    """User directory, role management, notes and file moderation."""

    role = UserRole.ADMIN

    def __init__(
        self,
        session: SessionManager,
        profiles: ProfileRepository,
        files: FileService,
        notes: AdminNotesService,
        proxy: AdminProxyClient,
        directory: UserDirectory | None = None,
    ):
        super().__init__(session, profiles, files, notes)
        self._proxy = proxy
        self.directory = directory or UserDirectory()

    async def load(self) -> AdminDashboardView:
        self._require_role()
        profiles = await self._profiles.list_profiles()
        lenders = await self._profiles.list_role_profiles(UserRole.LENDER)
        brokers = await self._profiles.list_role_profiles(UserRole.BROKER)
        file_ids = await self._files.all_file_ids()
        self.directory.load(profiles, lenders, brokers, file_ids)
        return AdminDashboardView(stats=self.directory.stats(), users=self.directory.entries())

    async def refresh_stats(self) -> DashboardStats:
        """Exact counts straight from the database."""
        self._require_role()
        return DashboardStats(
            total_lenders=await self._profiles.count_role_profiles(UserRole.LENDER),
            total_brokers=await self._profiles.count_role_profiles(UserRole.BROKER),
            total_files=await self._files.count_all(),
        )

    def search(self, term: str = "", role: UserRole | None = None) -> list[DirectoryEntry]:
        return self.directory.search(term, role)

    def apply_change(self, event: ChangeEvent | dict) -> bool:
        return self.directory.apply_change(event)

    # -- User management --

    async def _step(
        self, result: RoleChangeResult, name: str, call: Awaitable, *, missing: str | None = None
    ) -> None:
        """Run one step; with ``missing`` set, a None result counts as a failure."""
        try:
            value = await call
        except (SupabaseError, AdminProxyError) as exc:
            logger.warning("Role change step %s failed: %s", name, exc.message)
            result.failed_steps.append(name)
            result.last_error = exc.message
            return
        if missing is not None and value is None:
            logger.warning("Role change step %s failed: %s", name, missing)
            result.failed_steps.append(name)
            result.last_error = missing
            return
        result.completed_steps.append(name)

    async def change_role(self, user_id: str, role: str) -> RoleChangeResult:
        """Move a user to a new role: profile, then role row, then identity metadata.

        The steps are not transactional; every step runs and the last
        failure is reported.
        """
        self._require_role()
        parsed = parse_role(role)
        if parsed is None:
            raise ProfileValidationError(f"Invalid role '{role}'")

        result = RoleChangeResult()
        await self._step(
            result, "profile", self._profiles.set_role(user_id, parsed), missing=f"No profile found for user {user_id}"
        )
        await self._step(result, "role_profile", self._profiles.ensure_role_profile(user_id, parsed))
        await self._step(result, "identity", self._proxy.set_user_role(user_id, parsed.value))
        return result

    async def update_user(self, user_id: str, update: UserDetailUpdate) -> RoleChangeResult:
        """Save the profile fields, role change and role-specific data an admin edited."""
        self._require_role()
        current = self.directory.get(user_id)
        new_role = parse_role(update.role) if update.role else None
        if update.role and new_role is None:
            raise ProfileValidationError(f"Invalid role '{update.role}'")

        result = RoleChangeResult()
        fields = ProfileUpdate(full_name=update.full_name, country=update.country)
        if fields.model_dump(exclude_none=True):
            await self._step(result, "profile", self._profiles.update_profile(user_id, fields))

        current_role = current.profile.user_role if current else None
        if new_role is not None and new_role != current_role:
            change = await self.change_role(user_id, new_role.value)
            result.completed_steps += change.completed_steps
            result.failed_steps += change.failed_steps
            result.last_error = change.last_error or result.last_error

        target_role = new_role or current_role
        if update.role_data and target_role in (UserRole.LENDER, UserRole.BROKER):
            await self._step(
                result,
                "role_data",
                self._profiles.upsert_role_profile(user_id, target_role, update.role_data),
            )
        return result

    async def delete_user(self, user_id: str) -> None:
        """Delete a user through the admin proxy. Admin accounts are protected."""
        admin_id = self._require_role()
        if user_id == admin_id:
            raise PermissionDenied("Admins cannot delete their own account")
        target = self.directory.get(user_id)
        target_role = target.profile.user_role if target else None
        if target is None:
            profile = await self._profiles.get_profile(user_id)
            target_role = profile.user_role if profile else None
        if target_role == UserRole.ADMIN:
            raise PermissionDenied("Admin users cannot be deleted")

        await self._proxy.delete_user(user_id)
        for table in ("profiles", "lenders", "brokers"):
            self.directory.apply_change(
                {"table": table, "type": "DELETE", "old_record": {"id": user_id}}
            )
        logger.info("Admin %s deleted user %s", admin_id, user_id)

    # -- Files --

    async def user_files(self, user_id: str, role: UserRole) -> list[StoredFile]:
        self._require_role()
        return await self._files.list_files(role, user_id)

    async def delete_file(self, owner_role: UserRole, file: StoredFile) -> None:
        admin_id = self._require_role()
        await self._files.delete(owner_role, file, actor_id=admin_id, actor_role=UserRole.ADMIN)

    async def download_url(self, owner_role: UserRole, file: StoredFile) -> str:
        self._require_role()
        return await self._files.download_url(owner_role, file)

    # -- Notes --

    async def notes_for(self, user_id: str, *, mine_only: bool = False) -> list[AdminNote]:
        admin_id = self._require_role()
        return await self._notes.list_for_user(user_id, created_by=admin_id if mine_only else None)

    async def add_note(self, user_id: str, text: str) -> AdminNote:
        admin_id = self._require_role()
        return await self._notes.create(
            actor_id=admin_id, actor_role=UserRole.ADMIN, user_id=user_id, text=text
        )

    async def edit_note(self, note_id: str, text: str) -> AdminNote | None:
        self._require_role()
        return await self._notes.edit(actor_role=UserRole.ADMIN, note_id=note_id, text=text)

    async def delete_note(self, note_id: str) -> None:
        self._require_role()
        await self._notes.delete(actor_role=UserRole.ADMIN, note_id=note_id)
