"""Book source SPI and implementations."""

from __future__ import annotations

from ..config import SourceKind, SourceSettings
from .base import BookSource
from .http import HttpBookSource
from .mock import MockBookSource


def build_source(settings: SourceSettings) -> BookSource:
    if settings.kind is SourceKind.HTTP:
        return HttpBookSource(
            settings.base_url or "",
            timeout=settings.timeout,
            headers=settings.headers,
        )
    return MockBookSource()


__all__ = ["BookSource", "HttpBookSource", "MockBookSource", "build_source"]
