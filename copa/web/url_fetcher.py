"""
Web page fetching for ``{{@https://...}}`` placeholders
"""

from dataclasses import dataclass

import aiohttp
from bs4 import BeautifulSoup, Comment

from copa.config.settings import Settings, get_settings
from copa.errors import FetchError
from copa.utils.mixins import LoggerMixin

TEXT_CONTENT_TYPES = (
    "text/",
    "application/json",
    "application/xml",
    "application/xhtml",
    "application/javascript",
)


@dataclass
class FetchedPage:
    """A fetched page reduced to text"""

    url: str
    status: int
    content_type: str
    text: str


def is_html(content_type: str) -> bool:
    return "text/html" in content_type or "application/xhtml" in content_type


def is_text(content_type: str) -> bool:
    return any(kind in content_type for kind in TEXT_CONTENT_TYPES)


class URLContentFetcher(LoggerMixin):
    """Fetch web resources and reduce them to readable text"""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.headers = {
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.7",
            "Accept-Encoding": "gzip, deflate",
        }
        self.timeout = aiohttp.ClientTimeout(
            total=settings.web_timeout_seconds,
            connect=settings.web_connect_timeout_seconds,
        )
        self.max_content_bytes = settings.web_max_content_bytes

    async def fetch(self, url: str) -> FetchedPage:
        """
        Fetch ``url`` and return its text.

        HTML is reduced to its main content; other text types come back
        unchanged; anything else becomes an explanatory placeholder string.

        Raises:
            FetchError: on a non-2xx status, a timeout or a client error
        """
        self.logger.debug("Fetching URL content", url=url)
        try:
            async with (
                aiohttp.ClientSession(
                    timeout=self.timeout, headers=self.headers
                ) as session,
                session.get(url) as response,
            ):
                if not 200 <= response.status < 300:
                    self.logger.warning(
                        "HTTP error when fetching URL", url=url, status=response.status
                    )
                    raise FetchError(
                        f"Failed to fetch {url}: HTTP {response.status} {response.reason or ''}".rstrip()
                    )

                content_type = response.headers.get("content-type", "").lower()
                if not is_text(content_type):
                    self.logger.debug(
                        "Unsupported content type", url=url, content_type=content_type
                    )
                    kind = content_type.split(";")[0].strip() or "unknown"
                    return FetchedPage(
                        url=url,
                        status=response.status,
                        content_type=content_type,
                        text=f"[Content type '{kind}' from URL is not supported]",
                    )

                raw_content = await response.read()
                if len(raw_content) > self.max_content_bytes:
                    self.logger.warning(
                        "Content too large, truncating", url=url, size=len(raw_content)
                    )
                    raw_content = raw_content[: self.max_content_bytes]

                charset = response.charset or "utf-8"
                if is_html(content_type):
                    soup = BeautifulSoup(raw_content, "html.parser")
                    text = self._extract_main_content(soup)
                else:
                    text = raw_content.decode(charset, errors="replace")

                self.logger.debug(
                    "URL content fetched successfully", url=url, content_length=len(text)
                )
                return FetchedPage(
                    url=url,
                    status=response.status,
                    content_type=content_type,
                    text=text,
                )

        except TimeoutError as e:
            self.logger.warning("Timeout when fetching URL", url=url)
            raise FetchError(f"Timed out fetching {url}") from e

        except aiohttp.ClientError as e:
            self.logger.warning("Client error when fetching URL", url=url, error=str(e))
            raise FetchError(f"Failed to fetch {url}: {e}") from e

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        """Main readable text of an HTML page"""
        for element in soup(["script", "style", "meta", "link", "noscript"]):
            element.decompose()

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        main_selectors = [
            "main",
            "article",
            ".content",
            ".main-content",
            "#content",
            "#main",
            ".post-content",
            ".entry-content",
            ".article-body",
            "body",
        ]

        for selector in main_selectors:
            elements = soup.select(selector)
            if elements:
                main_element = elements[0]
                break
        else:
            main_element = soup

        unwanted_selectors = [
            "nav",
            "header",
            "footer",
            "aside",
            ".sidebar",
            ".navigation",
            ".menu",
            ".ads",
            ".advertisement",
        ]

        for selector in unwanted_selectors:
            for unwanted in main_element.select(selector):
                unwanted.decompose()

        text = main_element.get_text(separator="\n", strip=True)
        lines = [line.strip() for line in text.split("\n") if line.strip()]

        # Collapse consecutive duplicate lines
        cleaned_lines: list[str] = []
        for line in lines:
            if not cleaned_lines or line != cleaned_lines[-1]:
                cleaned_lines.append(line)

        return "\n".join(cleaned_lines)
