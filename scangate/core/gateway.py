"""Persistence gateway — keyed updates of run records by container ID."""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scangate.container.lifecycle import ScanContainer
from scangate.core.exceptions import PersistenceError
from scangate.core.logging import get_logger
from scangate.models.container_record import ContainerRecord

logger = get_logger(__name__)

# Fields an analyzer or the pipeline may set after the record exists
UPDATABLE_FIELDS = frozenset(
    {"output", "result", "status", "exit_code", "started_at", "finished_at"}
)


class PersistenceGateway(Protocol):
    async def update_one_by_cid(self, cid: str, fields: dict[str, Any]) -> None:
        ...


class SqlContainerGateway:
    """SQLAlchemy implementation backed by the ``scan_containers`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save_container(
        self,
        container: ScanContainer,
        *,
        command_template: str,
        repository_url: str,
        branch: str,
        analyzer: str | None = None,
    ) -> ContainerRecord:
        """Insert the record for a container that has finished its run."""
        if container.cid is None:
            raise PersistenceError("container was never created; nothing to save")

        record = ContainerRecord(
            cid=container.cid,
            image_name=container.image.name,
            image_tag=container.image.tag,
            canonical_url=container.image.canonical_url or None,
            command=command_template,
            repository_url=repository_url,
            branch=branch,
            analyzer=analyzer,
            status=container.status.value if container.status else "created",
            exit_code=container.exit_code,
            started_at=container.started_at,
            finished_at=container.finished_at,
        )
        async with self._session_factory() as session:
            try:
                session.add(record)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Saving container record failed", cid=container.cid, error=str(exc))
                raise PersistenceError(str(exc)) from exc
        logger.debug("Container record saved", cid=container.cid)
        return record

    async def update_one_by_cid(self, cid: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise PersistenceError(f"unknown record fields: {sorted(unknown)}")
        if not fields:
            return

        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(ContainerRecord).where(ContainerRecord.cid == cid).values(**fields)
                )
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Updating container record failed", cid=cid, error=str(exc))
                raise PersistenceError(str(exc)) from exc

        if result.rowcount == 0:
            logger.warning("No container record matched", cid=cid, fields=sorted(fields))

    async def get_by_cid(self, cid: str) -> ContainerRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(select(ContainerRecord).where(ContainerRecord.cid == cid))
            return result.scalar_one_or_none()
