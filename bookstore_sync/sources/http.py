"""HTTP catalogue client returning JSON book listings."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog

from ..errors import SourceUnavailable
from ..models import CandidateRecord
from .base import BookSource


class HttpBookSource(BookSource):
    """Fetch ``GET {base_url}/books?count=N`` and parse ``[{title, price}, ...]``.

    A single attempt is made per run; retrying is left to the next scheduled
    tick.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("bookstore_sync.source")
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers=headers or None,
        )

    def close(self) -> None:
        self._client.close()

    def fetch(self, count: int, timeout: float | None = None) -> list[CandidateRecord]:
        url = f"{self.base_url}/books"
        effective_timeout = min(timeout, self.timeout) if timeout is not None else self.timeout
        try:
            response = self._client.get(
                url, params={"count": count}, timeout=effective_timeout
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailable(
                f"Book source answered {exc.response.status_code} for {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Book source unreachable at {url}: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailable(f"Book source returned invalid JSON: {exc}") from exc

        records = self._parse(payload)
        self.logger.info("source_fetched", url=url, requested=count, received=len(records))
        return records

    @staticmethod
    def _parse(payload: Any) -> list[CandidateRecord]:
        if isinstance(payload, dict):
            payload = payload.get("books", payload.get("items"))
        if not isinstance(payload, list):
            raise SourceUnavailable("Book source payload must be a list of books")
        records: list[CandidateRecord] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise SourceUnavailable(f"Book #{index} is not an object")
            title = item.get("title")
            try:
                price = Decimal(str(item.get("price")))
            except InvalidOperation as exc:
                raise SourceUnavailable(f"Book #{index} has invalid price {item.get('price')!r}") from exc
            records.append(CandidateRecord(title="" if title is None else str(title), price=price))
        return records


__all__ = ["HttpBookSource"]
