"""
Content Scraper Service
Best-effort extraction of article text used as context for rewrites
"""

from typing import List, Optional, Sequence

import httpx
import structlog
from bs4 import BeautifulSoup

from ...exceptions import ScrapeError
from ...utils.url_utils import is_social_url, supports_web_url

logger = structlog.get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

JUNK_SELECTORS = [
    "script", "style", "nav", "footer", "header", "aside", "iframe",
    ".ads", ".advertisement", ".menu", ".sidebar",
]

CONTENT_SELECTORS = [
    "article",
    "[itemprop='articleBody']",
    ".post-content",
    ".story-content",
    ".main-content",
    ".article-body",
    "#content-body",
    ".entry-content",
]

MIN_PARAGRAPH_LENGTH = 20
MIN_CONTEXT_LENGTH = 50


class ContentScraperService:
    """Extracts plain article text from arbitrary news pages"""

    def __init__(
        self,
        timeout_seconds: float = 8.0,
        max_chars: int = 15000,
        skip_domains: Optional[Sequence[str]] = None
    ):
        self.timeout_seconds = timeout_seconds
        self.max_chars = max_chars
        self.skip_domains = tuple(skip_domains or ("twitter.com", "x.com"))

    def should_skip(self, url: Optional[str]) -> bool:
        if not supports_web_url(url):
            return True
        return is_social_url(url, domains=self.skip_domains)

    async def scrape(self, url: Optional[str]) -> Optional[str]:
        """
        Fetch ``url`` and return a HEADLINE/DESCRIPTION/BODY text block.

        Returns None for skipped domains, short pages and any network or
        parse error.
        """
        if self.should_skip(url):
            return None

        try:
            html = await self._fetch_html(url)
            context = self.extract_text(html)
        except ScrapeError as e:
            logger.warning("scrape_fetch_failed", url=url, error=str(e))
            return None
        except Exception as e:
            logger.warning("scrape_failed", url=url, error=str(e))
            return None

        if not context:
            logger.info("scrape_no_content", url=url)
            return None

        logger.info("scrape_completed", url=url, length=len(context))
        return context

    async def _fetch_html(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT}
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise ScrapeError(f"Timed out after {self.timeout_seconds}s") from e
            except httpx.HTTPStatusError as e:
                raise ScrapeError(f"HTTP {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise ScrapeError(str(e)) from e
            return response.text

    def extract_text(self, html: str) -> Optional[str]:
        soup = BeautifulSoup(html, "html.parser")

        for element in soup.select(", ".join(JUNK_SELECTORS)):
            element.decompose()

        headline = ""
        h1 = soup.find("h1")
        if h1:
            headline = h1.get_text(strip=True)
        if not headline and soup.title:
            headline = soup.title.get_text(strip=True)

        description = ""
        meta = soup.find("meta", attrs={"name": "description"})
        if meta and meta.get("content"):
            description = meta["content"].strip()

        paragraphs = self._extract_paragraphs(soup)

        body = "\n".join(paragraphs)
        context = f"HEADLINE: {headline}\nDESCRIPTION: {description}\nBODY:\n{body}".strip()

        if len(context) < MIN_CONTEXT_LENGTH:
            return None
        return context[:self.max_chars]

    def _extract_paragraphs(self, soup: BeautifulSoup) -> List[str]:
        container = None
        for selector in CONTENT_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                break

        target = container or soup.body or soup
        paragraphs = []
        for p in target.find_all("p"):
            text = p.get_text(strip=True)
            if len(text) > MIN_PARAGRAPH_LENGTH:
                paragraphs.append(text)
        return paragraphs
