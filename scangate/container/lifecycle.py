"""Scan container lifecycle — create, start, wait, collect output, remove.

A :class:`ContainerLifecycle` drives exactly one scanner container through
``created -> running -> finished`` and always attempts to delete it from the
daemon before ``run`` returns, whatever happened in between.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import docker
import requests
import structlog

from scangate.container.client import build_docker_client
from scangate.container.command import resolve_command
from scangate.container.executor import DOCKER_ERRORS, run_blocking
from scangate.container.images import Image, ImageManager
from scangate.core.config import Settings, get_settings
from scangate.core.exceptions import (
    ConnectionSetupError,
    ContainerAPIError,
    InvalidCommandError,
    WaitTimeoutError,
)
from scangate.core.logging import get_logger


class ContainerStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    FINISHED = "finished"


_STATUS_ORDER = (ContainerStatus.CREATED, ContainerStatus.RUNNING, ContainerStatus.FINISHED)


@dataclass
class ScanContainer:
    """In-memory record of one scanner run. Outlives the container itself."""

    image: Image
    command: str = ""
    cid: str | None = None
    status: ContainerStatus | None = None
    output: str = ""
    exit_code: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def advance(self, status: ContainerStatus) -> None:
        """Move to ``status``; the lifecycle never goes backwards."""
        if self.status is not None and _STATUS_ORDER.index(status) < _STATUS_ORDER.index(self.status):
            raise ValueError(f"cannot move container from {self.status.value} to {status.value}")
        self.status = status


ClientFactory = Callable[[Settings], docker.DockerClient]


class ContainerLifecycle:
    """Runs one scanner image against one repository/branch.

    Each instance owns its own Docker client; do not share an instance
    between concurrent runs.
    """

    def __init__(
        self,
        image: Image,
        command_template: str = "",
        settings: Settings | None = None,
        logger: structlog.BoundLogger | None = None,
        client_factory: ClientFactory = build_docker_client,
    ) -> None:
        self.settings = settings or get_settings()
        self.command_template = command_template
        self.container = ScanContainer(image=image)
        self.logger = (logger or get_logger(__name__)).bind(image=image.reference)
        self._client_factory = client_factory
        self._client: docker.DockerClient | None = None

    # ── Connection ───────────────────────────────────────────────────────────

    async def connect(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = await run_blocking(self._client_factory, self.settings)
            except ConnectionSetupError as exc:
                self.logger.error("Docker connection setup failed", error=str(exc))
                raise
        return self._client

    @property
    def api(self) -> docker.APIClient:
        if self._client is None:
            raise ConnectionSetupError("not connected; call connect() first")
        return self._client.api

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ── Orchestration ────────────────────────────────────────────────────────

    async def run(self, repository_url: str, branch: str) -> ScanContainer:
        """Execute the scanner and return the populated :class:`ScanContainer`.

        Infrastructure failures propagate. A non-zero exit status does not:
        it belongs to the scanner and is judged by the analyzer.
        """
        client = await self.connect()

        await ImageManager(
            client, self.container.image, settings=self.settings, logger=self.logger
        ).ensure_image()

        await self.create(repository_url, branch)
        try:
            await self.start()
            await self.wait()
            await self.read_output()
        finally:
            await self._cleanup()

        return self.container

    async def create(self, repository_url: str, branch: str) -> str:
        command = resolve_command(repository_url, branch, self.command_template)
        if not command:
            self.logger.error(
                "Empty scanner command",
                repository_url=repository_url,
                branch=branch,
            )
            raise InvalidCommandError(
                "command template resolved to an empty command "
                "(repository URL, branch and template are all required)"
            )
        self.container.command = command

        try:
            created = await run_blocking(
                self.api.create_container,
                self.container.image.reference,
                command=["/bin/sh", "-c", command],
                tty=True,
            )
        except DOCKER_ERRORS as exc:
            self.logger.error("Container create failed", error=str(exc))
            raise ContainerAPIError("create", str(exc)) from exc

        cid = created["Id"]
        self.container.cid = cid
        self.container.advance(ContainerStatus.CREATED)
        self.logger = self.logger.bind(cid=cid[:12])
        self.logger.info("Container created")
        return cid

    async def start(self) -> None:
        self.container.started_at = datetime.now(timezone.utc)
        try:
            await run_blocking(self.api.start, self.container.cid)
        except DOCKER_ERRORS as exc:
            self.container.advance(ContainerStatus.FINISHED)
            self.logger.error("Container start failed", error=str(exc))
            raise ContainerAPIError("start", str(exc), cid=self.container.cid) from exc
        self.container.advance(ContainerStatus.RUNNING)
        self.logger.info("Container started")

    async def wait(self) -> int:
        timeout = self.settings.container_wait_timeout
        try:
            result = await run_blocking(self.api.wait, self.container.cid, timeout=timeout)
        except requests.exceptions.ReadTimeout as exc:
            self.container.advance(ContainerStatus.FINISHED)
            self.logger.error("Container did not exit in time", timeout=timeout)
            raise WaitTimeoutError(self.container.cid, timeout) from exc
        except DOCKER_ERRORS as exc:
            self.container.advance(ContainerStatus.FINISHED)
            self.logger.error("Container wait failed", error=str(exc))
            raise ContainerAPIError("wait", str(exc), cid=self.container.cid) from exc

        exit_code = int(result.get("StatusCode", -1))
        self.container.exit_code = exit_code
        if exit_code != 0:
            self.logger.warning(
                "Scanner exited with non-zero status",
                exit_code=exit_code,
                error=(result.get("Error") or {}).get("Message"),
            )
        return exit_code

    async def read_output(self) -> str:
        self.container.finished_at = datetime.now(timezone.utc)
        try:
            raw = await run_blocking(
                self.api.logs, self.container.cid, stdout=True, stderr=True
            )
        except DOCKER_ERRORS as exc:
            self.logger.error("Reading container output failed", error=str(exc))
            raise ContainerAPIError("logs", str(exc), cid=self.container.cid) from exc
        finally:
            self.container.advance(ContainerStatus.FINISHED)

        self.container.output = raw.decode("utf-8", errors="replace")
        self.logger.info("Container finished", exit_code=self.container.exit_code)
        return self.container.output

    async def _cleanup(self) -> None:
        try:
            await self.remove(force=True)
        except ContainerAPIError:
            # already logged by remove(); the scan result stands
            pass

    # ── Administrative operations ────────────────────────────────────────────

    async def stop(self, cid: str | None = None) -> None:
        cid = cid or self.container.cid
        try:
            await run_blocking(self.api.stop, cid)
        except DOCKER_ERRORS as exc:
            self.logger.error("Container stop failed", target=cid, error=str(exc))
            raise ContainerAPIError("stop", str(exc), cid=cid) from exc
        self.logger.info("Container stopped", target=cid)

    async def remove(self, cid: str | None = None, force: bool = False) -> None:
        cid = cid or self.container.cid
        try:
            await run_blocking(self.api.remove_container, cid, force=force)
        except DOCKER_ERRORS as exc:
            self.logger.error("Container remove failed", target=cid, error=str(exc))
            raise ContainerAPIError("remove", str(exc), cid=cid) from exc
        self.logger.info("Container removed", target=cid)

    async def list_images(self) -> list[dict[str, Any]]:
        try:
            return await run_blocking(self.api.images)
        except DOCKER_ERRORS as exc:
            self.logger.error("Image list failed", error=str(exc))
            raise ContainerAPIError("image list", str(exc)) from exc

    async def remove_image(self, image_id: str) -> None:
        try:
            await run_blocking(self.api.remove_image, image_id, force=True)
        except DOCKER_ERRORS as exc:
            self.logger.error("Image remove failed", image_id=image_id, error=str(exc))
            raise ContainerAPIError("image remove", str(exc)) from exc
        self.logger.info("Image removed", image_id=image_id)


async def health_check(
    settings: Settings | None = None,
    client_factory: ClientFactory = build_docker_client,
) -> None:
    """Ping the Docker daemon. Raises when it is unreachable."""
    logger = get_logger(__name__)
    client = await run_blocking(client_factory, settings or get_settings())
    try:
        await run_blocking(client.ping)
    except DOCKER_ERRORS as exc:
        logger.error("Docker health check failed", error=str(exc))
        raise ContainerAPIError("ping", str(exc)) from exc
    finally:
        client.close()
