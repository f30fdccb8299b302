"""
Crawl option groups sent when creating a crawl request.

The service accepts three option groups under ``options``. Spider and page
options have a known core of fields; unknown keys are passed through so new
server-side options work without a client release. Plugin options are a
free-form mapping keyed by plugin name.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SpiderOptions(BaseModel):
    """How far and where the spider is allowed to go.

    Attributes:
        max_depth: Maximum link depth from the start URL.
        page_limit: Maximum number of pages to crawl.
        allowed_domains: Domains the spider may follow links into.
        exclude_paths: Path globs never crawled.
        include_paths: Path globs that restrict the crawl.
    """

    model_config = ConfigDict(extra="allow")

    max_depth: Optional[int] = Field(default=None, ge=0)
    page_limit: Optional[int] = Field(default=None, ge=1)
    allowed_domains: Optional[List[str]] = None
    exclude_paths: Optional[List[str]] = None
    include_paths: Optional[List[str]] = None


class PageOptions(BaseModel):
    """How each page is fetched and which content is kept."""

    model_config = ConfigDict(extra="allow")

    exclude_tags: Optional[List[str]] = None
    include_tags: Optional[List[str]] = None
    wait_time: Optional[int] = Field(default=None, ge=0)
    include_html: Optional[bool] = None
    only_main_content: Optional[bool] = None
    include_links: Optional[bool] = None
    timeout: Optional[int] = Field(default=None, ge=0)
    accept_cookies_selector: Optional[str] = None
    locale: Optional[str] = None
    extra_headers: Optional[Dict[str, str]] = None
    actions: Optional[List[Dict[str, Any]]] = None


PluginOptions = Dict[str, Any]


def dump_options(options: BaseModel | Dict[str, Any] | None) -> Dict[str, Any]:
    """Serialize an option group for the request body; ``None`` becomes ``{}``.

    Unset fields are omitted so the server applies its own defaults.
    """
    if options is None:
        return {}
    if isinstance(options, BaseModel):
        return options.model_dump(exclude_none=True)
    return dict(options)


__all__ = ["SpiderOptions", "PageOptions", "PluginOptions", "dump_options"]
