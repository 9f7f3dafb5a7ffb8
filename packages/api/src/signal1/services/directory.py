# This project was developed with assistance from AI tools.
"""Admin user directory: profiles joined with their role rows.

Kept current by realtime change events. Events on different tables arrive
on independent channels, so they can be late, duplicated or out of order;
each row remembers the commit timestamp it was last changed at (a delete
keeps its timestamp as a tombstone), which makes applying an event
idempotent.
"""

import logging
from datetime import datetime

from db.enums import UserRole

from ..schemas.admin import DashboardStats, DirectoryEntry
from ..schemas.profile import BrokerProfile, LenderProfile, Profile
from ..schemas.realtime import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

_ROW_MODELS = {
    "profiles": Profile,
    "lenders": LenderProfile,
    "brokers": BrokerProfile,
}

_FILE_TABLES = ("broker_files", "lender_files")


def matches_search(entry: DirectoryEntry, term: str) -> bool:
    """Case-insensitive substring match over full name, role and country."""
    needle = term.strip().lower()
    if not needle:
        return True
    p = entry.profile
    return any(needle in (value or "").lower() for value in (p.full_name, p.role, p.country))


class UserDirectory:
    def __init__(self):
        self._rows: dict[str, dict[str, object]] = {table: {} for table in _ROW_MODELS}
        self._files: dict[str, set[str]] = {table: set() for table in _FILE_TABLES}
        self._versions: dict[tuple[str, str], datetime] = {}

    def load(
        self,
        profiles: list[Profile],
        lenders: list[LenderProfile],
        brokers: list[BrokerProfile],
        file_ids: dict[str, list[str]] | None = None,
    ) -> None:
        """Replace the directory with a freshly fetched snapshot."""
        self._rows = {
            "profiles": {p.id: p for p in profiles},
            "lenders": {r.id: r for r in lenders},
            "brokers": {r.id: r for r in brokers},
        }
        self._files = {table: set((file_ids or {}).get(table, [])) for table in _FILE_TABLES}
        self._versions.clear()

    # -- Queries --

    def entries(self) -> list[DirectoryEntry]:
        """All users, newest first."""
        profiles = sorted(
            self._rows["profiles"].values(),
            key=lambda p: p.created_at.timestamp() if p.created_at else 0.0,
            reverse=True,
        )
        return [
            DirectoryEntry(
                profile=p,
                lender=self._rows["lenders"].get(p.id),
                broker=self._rows["brokers"].get(p.id),
            )
            for p in profiles
        ]

    def get(self, user_id: str) -> DirectoryEntry | None:
        profile = self._rows["profiles"].get(user_id)
        if profile is None:
            return None
        return DirectoryEntry(
            profile=profile,
            lender=self._rows["lenders"].get(user_id),
            broker=self._rows["brokers"].get(user_id),
        )

    def search(self, term: str = "", role: UserRole | None = None) -> list[DirectoryEntry]:
        return [
            e
            for e in self.entries()
            if matches_search(e, term) and (role is None or e.profile.user_role == role)
        ]

    def stats(self) -> DashboardStats:
        return DashboardStats(
            total_lenders=len(self._rows["lenders"]),
            total_brokers=len(self._rows["brokers"]),
            total_files=sum(len(ids) for ids in self._files.values()),
        )

    # -- Realtime --

    def apply_change(self, event: ChangeEvent | dict) -> bool:
        """Apply one change event; returns False when it was stale or irrelevant."""
        if isinstance(event, dict):
            event = ChangeEvent.from_payload(event)

        row_id = event.row_id
        if row_id is None or (event.table not in _ROW_MODELS and event.table not in _FILE_TABLES):
            logger.debug("Ignoring change on %s without a usable id", event.table)
            return False

        key = (event.table, row_id)
        stamp = event.commit_timestamp
        if stamp is not None:
            seen = self._versions.get(key)
            if seen is not None and stamp <= seen:
                return False
            self._versions[key] = stamp

        if event.table in _FILE_TABLES:
            return self._apply_file_change(event, row_id)

        rows = self._rows[event.table]
        if event.type == ChangeType.DELETE:
            rows.pop(row_id, None)
            return True

        current = rows.get(row_id)
        merged = {**(current.model_dump() if current is not None else {}), **event.record}
        rows[row_id] = _ROW_MODELS[event.table].model_validate(merged)
        return True

    def _apply_file_change(self, event: ChangeEvent, row_id: str) -> bool:
        ids = self._files[event.table]
        if event.type == ChangeType.DELETE:
            ids.discard(row_id)
        else:
            ids.add(row_id)
        return True
