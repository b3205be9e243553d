"""Image availability — make sure a scanner image is loaded before use.

Registry pulls are slow and occasionally rate-limited, so ``ensure_image``
polls for the image on a fixed interval, issuing a pull whenever it is still
missing, until an overall deadline. A missing image is retried; an error
reported by the daemon is not.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import docker
import structlog
from docker.utils import parse_repository_tag

from scangate.container.executor import DOCKER_ERRORS, run_blocking
from scangate.core.config import Settings, get_settings
from scangate.core.exceptions import ContainerAPIError, ImageNotFoundTransient, PullTimeoutError
from scangate.core.logging import get_logger


@dataclass(frozen=True)
class Image:
    """A scanner image. ``canonical_url`` is what gets pulled."""

    name: str
    tag: str = "latest"
    canonical_url: str = ""

    @property
    def reference(self) -> str:
        return f"{self.name}:{self.tag}"

    @property
    def pull_reference(self) -> str:
        return self.canonical_url or self.reference

    @property
    def pull_tag(self) -> str | None:
        """Tag to send with ``pull_reference`` when the reference has none.

        docker-py falls back to ``latest`` for an untagged repository, which
        would never satisfy the ``name:tag`` presence check.
        """
        _, tag = parse_repository_tag(self.pull_reference)
        return None if tag else self.tag


class ImageManager:
    def __init__(
        self,
        client: docker.DockerClient,
        image: Image,
        settings: Settings | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.client = client
        self.image = image
        self.interval = settings.image_pull_interval
        self.timeout = settings.image_pull_timeout
        self.logger = (logger or get_logger(__name__)).bind(image=image.reference)

    async def is_loaded(self) -> bool:
        """True when an image matching exactly ``name:tag`` exists locally."""
        try:
            images = await run_blocking(self.client.api.images, name=self.image.reference)
        except DOCKER_ERRORS as exc:
            self.logger.error("Image lookup failed", error=str(exc))
            raise ContainerAPIError("image list", str(exc)) from exc
        return len(images) > 0

    async def check(self) -> None:
        """Raise :class:`ImageNotFoundTransient` if the image is not loaded yet."""
        if not await self.is_loaded():
            raise ImageNotFoundTransient(self.image.reference)

    async def pull(self) -> None:
        self.logger.info("Pulling image", pull=self.image.pull_reference, tag=self.image.pull_tag)
        try:
            await run_blocking(
                self.client.api.pull, self.image.pull_reference, tag=self.image.pull_tag
            )
        except DOCKER_ERRORS as exc:
            self.logger.error("Image pull failed", error=str(exc))
            raise ContainerAPIError("image pull", str(exc)) from exc

    async def ensure_image(self) -> None:
        """Return once the image is loaded.

        Raises:
            PullTimeoutError: the image was still missing at the deadline.
            ContainerAPIError: the daemon rejected a lookup or a pull.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        attempt = 0

        while True:
            attempt += 1
            try:
                await self.check()
            except ImageNotFoundTransient:
                self.logger.info("Image not loaded yet", attempt=attempt)
            else:
                self.logger.info("Image available", attempt=attempt)
                return

            if loop.time() >= deadline:
                break
            # docker-py pulls without a read timeout, so the deadline bounds the pull too
            try:
                await asyncio.wait_for(self.pull(), timeout=deadline - loop.time())
            except asyncio.TimeoutError:
                self.logger.warning("Image pull still running at deadline", attempt=attempt)
                break
            # presence is re-checked on the next tick, not inferred from the pull
            await asyncio.sleep(max(0.0, min(self.interval, deadline - loop.time())))

        self.logger.error("Timed out waiting for image", timeout=self.timeout, attempts=attempt)
        raise PullTimeoutError(self.image.reference, self.timeout)
