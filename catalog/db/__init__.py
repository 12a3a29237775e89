"""Database module for the resource catalog."""

from .connection import build_connect_args, create_engine, create_session_factory, session_scope
from .models import Base, Channel, ResourceRecord, ResourceType

__all__ = [
    "build_connect_args",
    "create_engine",
    "create_session_factory",
    "session_scope",
    "Base",
    "Channel",
    "ResourceRecord",
    "ResourceType",
]
