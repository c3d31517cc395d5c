"""Web resource fetching"""

from .url_fetcher import FetchedPage, URLContentFetcher

__all__ = ["FetchedPage", "URLContentFetcher"]
