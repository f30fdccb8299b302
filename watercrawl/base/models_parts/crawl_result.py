"""
Crawl result resource (one crawled page).

``result`` is either an absolute URL to the stored document (the default for
list endpoints) or the inline document itself when the server was asked to
include it.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class CrawlResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    uuid: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    result: Union[str, Dict[str, Any], None] = None
    attachments: Optional[List[Dict[str, Any]]] = None
    created_at: Optional[str] = None

    @property
    def result_url(self) -> Optional[str]:
        """Download URL for the document, when the result is not inline."""
        return self.result if isinstance(self.result, str) else None


class CrawlResultList(BaseModel):
    """One page of results for a crawl request."""

    model_config = ConfigDict(extra="allow")

    count: Optional[int] = None
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[CrawlResult]


__all__ = ["CrawlResult", "CrawlResultList"]
