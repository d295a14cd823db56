"""
Master Data Service.

List / create / update / delete for the pricing master-data tables
(engagement models, fee formulas, complexity levels, pricing plans).
Payloads are validated against ``models.master_data.WRITE_SCHEMAS``
before they reach the remote store, and every successful write is
recorded as a structured audit event.

All methods return ServiceResult for a consistent contract with the
view layer.
"""

from __future__ import annotations

from typing import Mapping, Optional

from pydantic import ValidationError

from marketplace_console.database import DatabaseManager
from marketplace_console.exceptions import RecordNotFoundError, UnknownTableError
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.master_data import WRITE_SCHEMAS
from marketplace_console.models.service_models import ServiceResult
from marketplace_console.repositories.base_repository import BaseRepository, Row
from marketplace_console.services.base_service import BaseService
from marketplace_console.utils.audit import ensure_audit_table, log_audit_event


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"]) or "payload"
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


class MasterDataService(BaseService):
    """
    Service layer for pricing master-data administration.

    ``repositories`` maps the logical table names used in
    ``AppConfig.PRICING_TABLES`` to the repository owning that table.
    """

    def __init__(
        self,
        repositories: Mapping[str, BaseRepository],
        db: DatabaseManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repos = dict(repositories)
        self._db = db
        with self._db.write_lock:
            ensure_audit_table(self._db.sqlite)

    @property
    def tables(self) -> list[str]:
        """Logical table names that accept writes."""
        return sorted(name for name in self._repos if name in WRITE_SCHEMAS)

    def list_records(
        self,
        table: str,
        filters: Optional[Mapping[str, object]] = None,
        order_by: Optional[str] = None,
    ) -> ServiceResult[list[Row]]:
        try:
            rows = self._repo(table).list_rows(filters, order_by)
            return ServiceResult(success=True, data=rows)
        except UnknownTableError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        except Exception as exc:
            return self._failed(f"listing {table}", exc)

    def create_record(
        self,
        table: str,
        payload: Mapping[str, object],
        user_id: str,
    ) -> ServiceResult[Row]:
        """
        Validate *payload* and insert it.

        Returns:
            ServiceResult with the stored row, a 400 on validation errors,
            or a 500 when the remote store rejects the write.
        """
        try:
            repo = self._repo(table)
            validated = WRITE_SCHEMAS[table].model_validate(dict(payload))
        except UnknownTableError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        except ValidationError as exc:
            return ServiceResult(success=False, error=_validation_message(exc), status_code=400)

        try:
            created = repo.insert(validated.model_dump())
        except Exception as exc:
            return self._failed(f"creating {table} record", exc)

        self._audit(
            "CREATE", repo, str(created.get("id", "")), user_id,
            sorted(validated.model_fields_set),
        )
        return ServiceResult(success=True, data=created, status_code=201)

    def update_record(
        self,
        table: str,
        record_id: str,
        patch: Mapping[str, object],
        user_id: str,
    ) -> ServiceResult[Row]:
        """
        Validate *patch* against the stored row and apply it.

        The stored row is merged with *patch* and the result validated as
        a whole; only the patched columns are sent to the store.
        """
        try:
            repo = self._repo(table)
        except UnknownTableError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)

        schema = WRITE_SCHEMAS[table]
        unknown = sorted(set(patch) - set(schema.model_fields))
        if unknown:
            return ServiceResult(
                success=False,
                error=f"Unknown fields for {table}: {', '.join(unknown)}",
                status_code=400,
            )

        try:
            existing = repo.list_rows({"id": record_id})
            if not existing:
                raise RecordNotFoundError(repo.TABLE, record_id)
            current = {k: v for k, v in existing[0].items() if k in schema.model_fields}
            validated = schema.model_validate({**current, **dict(patch)})
            updated = repo.update(record_id, validated.model_dump(include=set(patch)))
        except ValidationError as exc:
            return ServiceResult(success=False, error=_validation_message(exc), status_code=400)
        except RecordNotFoundError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=404)
        except Exception as exc:
            return self._failed(f"updating {table} record {record_id}", exc)

        self._audit("UPDATE", repo, record_id, user_id, sorted(patch))
        return ServiceResult(success=True, data=updated)

    def delete_record(self, table: str, record_id: str, user_id: str) -> ServiceResult[str]:
        try:
            repo = self._repo(table)
            repo.delete(record_id)
        except UnknownTableError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        except Exception as exc:
            return self._failed(f"deleting {table} record {record_id}", exc)

        self._audit("DELETE", repo, record_id, user_id, [])
        return ServiceResult(success=True, data=record_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _repo(self, table: str) -> BaseRepository:
        if table not in self._repos or table not in WRITE_SCHEMAS:
            raise UnknownTableError(f"'{table}' is not an editable pricing table")
        return self._repos[table]

    def _audit(
        self,
        action: str,
        repo: BaseRepository,
        record_id: str,
        user_id: str,
        fields: list[str],
    ) -> None:
        with self._db.write_lock:
            log_audit_event(
                self._logger,
                action=action,
                entity_type=repo.TABLE,
                entity_id=record_id,
                user_id=user_id,
                details={"fields": ",".join(fields)} if fields else None,
                conn=self._db.sqlite,
            )
