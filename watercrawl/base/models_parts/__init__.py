"""Resource models split into single-concern modules."""

from .crawl_request import CrawlRequest, CrawlRequestList
from .crawl_result import CrawlResult, CrawlResultList
from .options import PageOptions, PluginOptions, SpiderOptions, dump_options

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
