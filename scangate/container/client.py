"""Docker daemon connection built from scangate settings."""

from __future__ import annotations

import docker
from docker.errors import DockerException, TLSParameterError
from docker.tls import TLSConfig
from docker.utils import kwargs_from_env

from scangate.core.config import Settings, get_settings
from scangate.core.exceptions import ConnectionSetupError
from scangate.core.logging import get_logger

logger = get_logger(__name__)


def docker_environment(settings: Settings) -> dict[str, str]:
    """Translate settings into the DOCKER_* variables docker-py understands.

    The mapping is handed to ``kwargs_from_env`` directly, so the process
    environment is never modified and concurrent controllers cannot see each
    other's configuration.
    """
    return {
        "DOCKER_HOST": f"tcp://{settings.docker_api_addr}:{settings.docker_api_port}",
        "DOCKER_CERT_PATH": settings.docker_api_cert_path,
        # docker-py: empty string disables verification, any other value enables it
        "DOCKER_TLS_VERIFY": "1" if settings.docker_api_tls_verify else "",
    }


def build_docker_client(settings: Settings | None = None) -> docker.DockerClient:
    """Create a new client for the configured daemon.

    Raises:
        ConnectionSetupError: TLS material is missing/invalid or the daemon
            could not be reached for API version negotiation.
    """
    settings = settings or get_settings()
    environment = docker_environment(settings)

    try:
        params = kwargs_from_env(environment=environment)
    except TLSParameterError as exc:
        logger.error(
            "Invalid Docker TLS configuration",
            cert_path=settings.docker_api_cert_path,
            error=str(exc),
        )
        raise ConnectionSetupError(f"invalid TLS configuration: {exc}") from exc

    # the daemon endpoint is always TLS; DOCKER_API_TLS_VERIFY only controls verification
    params.setdefault("tls", TLSConfig(verify=False))

    try:
        client = docker.DockerClient(
            version=settings.docker_api_version,
            timeout=settings.docker_api_timeout,
            **params,
        )
    except DockerException as exc:
        logger.error("Cannot create Docker client", host=environment["DOCKER_HOST"], error=str(exc))
        raise ConnectionSetupError(f"cannot connect to {environment['DOCKER_HOST']}: {exc}") from exc

    logger.debug("Docker client ready", host=environment["DOCKER_HOST"], tls=bool(params.get("tls")))
    return client
