"""Resource models public surface (re-exports ``models_parts``)."""

from .models_parts import (
    CrawlRequest,
    CrawlRequestList,
    CrawlResult,
    CrawlResultList,
    PageOptions,
    PluginOptions,
    SpiderOptions,
    dump_options,
)

__all__ = [
    "CrawlRequest",
    "CrawlRequestList",
    "CrawlResult",
    "CrawlResultList",
    "PageOptions",
    "PluginOptions",
    "SpiderOptions",
    "dump_options",
]
