"""ContainerRecord model — one persisted scan run, addressed by container ID."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scangate.models.base import Base, RecordMixin


class ContainerRecord(RecordMixin, Base):
    __tablename__ = "scan_containers"

    # Runtime-assigned container ID, used as the correlation key
    cid: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)

    # Scanner image
    image_name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_tag: Mapped[str] = mapped_column(String(128), nullable=False)
    canonical_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # Unresolved template; the resolved command may hold credentials
    command: Mapped[str] = mapped_column(Text, nullable=False)

    repository_url: Mapped[str] = mapped_column(String(512), nullable=False)
    branch: Mapped[str] = mapped_column(String(255), nullable=False)
    analyzer: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="created",
        index=True,
        # Values: created | running | finished
    )
    exit_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Evaluation
    output: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        index=True,
        # Values: passed | failed
    )

    def __repr__(self) -> str:
        return f"<ContainerRecord cid={self.cid[:12]!r} status={self.status!r} result={self.result!r}>"
