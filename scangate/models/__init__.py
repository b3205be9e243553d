"""SQLAlchemy ORM models."""

from scangate.models.base import Base
from scangate.models.container_record import ContainerRecord

__all__ = ["Base", "ContainerRecord"]
