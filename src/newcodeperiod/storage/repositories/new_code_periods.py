"""Repository for branch, project and global new code period settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import uuid4

from newcodeperiod.core.types import NewCodePeriodSetting, setting_from_record
from newcodeperiod.storage.repositories.base import (
    BaseRepository,
    RowDict,
    fetch_one_dict,
)
from newcodeperiod.storage.schemas import NEW_CODE_PERIODS_TABLE

log = logging.getLogger(__name__)

_COLUMNS = "uuid, project_uuid, branch_uuid, type, value, created_at, updated_at"


@dataclass(frozen=True)
class NewCodePeriodRecord:
    """Stored setting row together with its scope and audit columns."""

    uuid: str
    project_uuid: str | None
    branch_uuid: str | None
    setting: NewCodePeriodSetting
    created_at: int
    updated_at: int

    @classmethod
    def from_row(cls, row: RowDict) -> NewCodePeriodRecord:
        """
        Build a record from a ``new_code_periods`` row.

        Returns
        -------
        NewCodePeriodRecord
            Parsed record.
        """
        return cls(
            uuid=row["uuid"],
            project_uuid=row["project_uuid"],
            branch_uuid=row["branch_uuid"],
            setting=setting_from_record(row["type"], row["value"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _scope_clause(project_uuid: str | None, branch_uuid: str | None) -> tuple[str, list[object]]:
    if project_uuid is None and branch_uuid is not None:
        message = "A branch-level setting requires a project uuid"
        raise ValueError(message)
    clauses: list[str] = []
    params: list[object] = []
    for column, value in (("project_uuid", project_uuid), ("branch_uuid", branch_uuid)):
        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column} = ?")
            params.append(value)
    return " AND ".join(clauses), params


def _latest_in_scope_sql(columns: str, where: str) -> str:
    # Scopes hold one row; the newest wins if a writer bypassed upsert.
    return f"""
        SELECT {columns}
        FROM {NEW_CODE_PERIODS_TABLE}
        WHERE {where}
        ORDER BY updated_at DESC, uuid
        LIMIT 1
    """  # noqa: S608


@dataclass(frozen=True)
class NewCodePeriodRepository(BaseRepository):
    """Read and write new code period settings within one store session."""

    def select_by_branch(self, project_uuid: str, branch_uuid: str) -> NewCodePeriodSetting | None:
        """
        Return the setting defined on a specific branch.

        Returns
        -------
        NewCodePeriodSetting | None
            Branch-level setting when configured.
        """
        return self._select_scope(project_uuid, branch_uuid)

    def select_by_project(self, project_uuid: str) -> NewCodePeriodSetting | None:
        """
        Return the setting defined on a project, ignoring branch-level rows.

        Returns
        -------
        NewCodePeriodSetting | None
            Project-level setting when configured.
        """
        return self._select_scope(project_uuid, None)

    def select_global(self) -> NewCodePeriodSetting | None:
        """
        Return the instance-wide setting.

        Returns
        -------
        NewCodePeriodSetting | None
            Global setting when configured.
        """
        return self._select_scope(None, None)

    def select_record(
        self, project_uuid: str | None = None, branch_uuid: str | None = None
    ) -> NewCodePeriodRecord | None:
        """
        Return the full stored row for a scope.

        Returns
        -------
        NewCodePeriodRecord | None
            Record when the scope is configured.
        """
        where, params = _scope_clause(project_uuid, branch_uuid)
        sql = _latest_in_scope_sql(_COLUMNS, where)
        row = fetch_one_dict(self.con, sql, params)
        return NewCodePeriodRecord.from_row(row) if row is not None else None

    def upsert(
        self,
        setting: NewCodePeriodSetting,
        *,
        project_uuid: str | None = None,
        branch_uuid: str | None = None,
    ) -> NewCodePeriodRecord:
        """
        Insert or replace the setting stored for a scope.

        Returns
        -------
        NewCodePeriodRecord
            Stored record after the write.
        """
        now = self.clock()
        existing = self.select_record(project_uuid, branch_uuid)
        if existing is None:
            self.con.execute(
                f"INSERT INTO {NEW_CODE_PERIODS_TABLE} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",  # noqa: S608
                [str(uuid4()), project_uuid, branch_uuid, setting.type.value, setting.value, now, now],
            )
        else:
            self.con.execute(
                f"UPDATE {NEW_CODE_PERIODS_TABLE} SET type = ?, value = ?, updated_at = ? WHERE uuid = ?",  # noqa: S608
                [setting.type.value, setting.value, now, existing.uuid],
            )
        log.debug(
            "Stored %s setting for project=%s branch=%s",
            setting.type.value,
            project_uuid,
            branch_uuid,
        )
        record = self.select_record(project_uuid, branch_uuid)
        if record is None:  # pragma: no cover - row was just written
            message = "Setting disappeared after write"
            raise RuntimeError(message)
        return record

    def delete(self, *, project_uuid: str | None = None, branch_uuid: str | None = None) -> bool:
        """
        Remove the setting stored for a scope.

        Returns
        -------
        bool
            True when a row was removed.
        """
        existing = self.select_record(project_uuid, branch_uuid)
        if existing is None:
            return False
        self.con.execute(
            f"DELETE FROM {NEW_CODE_PERIODS_TABLE} WHERE uuid = ?",  # noqa: S608
            [existing.uuid],
        )
        return True

    def _select_scope(
        self, project_uuid: str | None, branch_uuid: str | None
    ) -> NewCodePeriodSetting | None:
        log.debug("Selecting new code period for project=%s branch=%s", project_uuid, branch_uuid)
        where, params = _scope_clause(project_uuid, branch_uuid)
        sql = _latest_in_scope_sql("type, value", where)
        row = fetch_one_dict(self.con, sql, params)
        if row is None:
            return None
        return setting_from_record(row["type"], row["value"])


__all__ = ["NewCodePeriodRecord", "NewCodePeriodRepository"]
