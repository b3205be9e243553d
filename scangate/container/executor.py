"""Run blocking docker-py calls off the event loop."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import requests
from docker.errors import DockerException

T = TypeVar("T")

# docker-py lets transport failures through as plain requests exceptions
DOCKER_ERRORS = (DockerException, requests.exceptions.RequestException)


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))
