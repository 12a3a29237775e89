"""Catalog of links shared in chat channels."""

from catalog.models import ChatMessage, Embed, Resource, ResourcePage
from catalog.normalization import build_resource, fingerprint
from catalog.store import ResourceStore, connect

__all__ = [
    "ChatMessage",
    "Embed",
    "Resource",
    "ResourcePage",
    "build_resource",
    "fingerprint",
    "ResourceStore",
    "connect",
]
