"""pytest fixtures shared across all tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from scangate.core.config import Settings
from scangate.core.gateway import SqlContainerGateway
from scangate.models.base import Base

# SQLite in-memory — no PostgreSQL required, fresh DB per test function.
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

CID = "4f1c2d3e5a6b7c8d9e0f1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8f9a0b1c2d"


@pytest.fixture
def settings() -> Settings:
    """Settings with short pull/wait timings so retry loops finish quickly."""
    return Settings(
        _env_file=None,
        docker_api_addr="docker.test",
        image_pull_interval=0.01,
        image_pull_timeout=0.5,
        container_wait_timeout=5,
    )


@pytest.fixture
def docker_client() -> MagicMock:
    """A docker.DockerClient stand-in whose happy path is a clean scan."""
    client = MagicMock(name="DockerClient")
    api = client.api
    api.images.return_value = [{"Id": "sha256:abc", "RepoTags": ["retirejs:latest"]}]
    api.create_container.return_value = {"Id": CID, "Warnings": []}
    api.wait.return_value = {"StatusCode": 0, "Error": None}
    api.logs.return_value = b'{"data": []}\r\n'
    return client


@pytest.fixture
def client_factory(docker_client):
    def factory(settings: Settings) -> MagicMock:
        return docker_client

    return factory


class MemoryGateway:
    """Persistence gateway that records every update in memory."""

    def __init__(self) -> None:
        self.updates: list[tuple[str, dict[str, Any]]] = []

    async def update_one_by_cid(self, cid: str, fields: dict[str, Any]) -> None:
        self.updates.append((cid, dict(fields)))

    def fields_for(self, cid: str) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for update_cid, fields in self.updates:
            if update_cid == cid:
                merged.update(fields)
        return merged


@pytest.fixture
def memory_gateway() -> MemoryGateway:
    return MemoryGateway()


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory SQLite engine per test function."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def sql_gateway(engine) -> SqlContainerGateway:
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=True)
    return SqlContainerGateway(factory)
