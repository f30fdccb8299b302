"""
Crawl request resource as returned by the API.

Only ``uuid`` is required; the remaining fields are informational and may be
absent on older servers. Unknown keys are preserved on the model.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class CrawlRequest(BaseModel):
    """A crawl job.

    Attributes:
        uuid: Server-assigned identifier used by every per-job endpoint.
        url: Start URL.
        status: Job status (``new``, ``running``, ``cancelling``, ``canceled``,
            ``failed``, ``finished``).
        options: Options the job was created with.
        number_of_documents: Documents produced so far.
    """

    model_config = ConfigDict(extra="allow")

    uuid: str
    url: Optional[str] = None
    status: Optional[str] = None
    options: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    duration: Optional[str] = None
    number_of_documents: Optional[int] = None


class CrawlRequestList(BaseModel):
    """One page of crawl requests."""

    model_config = ConfigDict(extra="allow")

    count: Optional[int] = None
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[CrawlRequest]


__all__ = ["CrawlRequest", "CrawlRequestList"]
