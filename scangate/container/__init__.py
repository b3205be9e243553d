"""Docker-side plumbing: daemon connection, images, container lifecycle."""

from scangate.container.images import Image, ImageManager
from scangate.container.lifecycle import (
    ContainerLifecycle,
    ContainerStatus,
    ScanContainer,
    health_check,
)

__all__ = [
    "ContainerLifecycle",
    "ContainerStatus",
    "Image",
    "ImageManager",
    "ScanContainer",
    "health_check",
]
