"""SQLAlchemy ORM models for the resource catalog."""

from sqlalchemy import BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class ResourceRecord(Base):
    """Shared link extracted from a chat message."""

    __tablename__ = "resources"
    __table_args__ = (
        Index("ix_resources_description", "description"),
        Index("ix_resources_type", "type_id"),
        Index("ix_resources_user", "user_id"),
    )

    # Insertion order; search results are sorted on it, newest first
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    channel_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    url: Mapped[str] = mapped_column(String(2000), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type_id: Mapped[int] = mapped_column(Integer, nullable=False)
    shash: Mapped[str] = mapped_column(String(32), nullable=False)


class Channel(Base):
    """Chat channel and the resource type it collects."""

    __tablename__ = "channels"
    __table_args__ = (Index("ix_channels_channel_id", "channel_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[int] = mapped_column(Integer, nullable=False)


class ResourceType(Base):
    """Lookup of resource type ids to names."""

    __tablename__ = "types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[int] = mapped_column(Integer, nullable=False)
    type_name: Mapped[str] = mapped_column(String(255), nullable=False)
