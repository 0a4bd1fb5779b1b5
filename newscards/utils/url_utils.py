import random
import re
from urllib.parse import urlparse, urlunparse
from typing import Optional


SOCIAL_DOMAINS = ("twitter.com", "x.com")

_NUMERIC_SEGMENT = re.compile(r'^\d+$')
_HTML_SUFFIX = re.compile(r'\.html?$', re.IGNORECASE)


def normalize_url(url: Optional[str]) -> str:
    """
    Canonical form used as the URL dedup key: query string dropped and
    trailing slash removed. Input that does not parse as an
    absolute URL comes back unchanged.
    """
    if not url:
        return ""
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return url
        clean_url = urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, "", parsed.fragment))
    except ValueError:
        return url
    return clean_url.rstrip("/")


def extract_slug_from_url(url: Optional[str]) -> str:
    if not url:
        return ""
    try:
        path = urlparse(url).path
        segments = [segment for segment in path.split("/") if segment]
        if not segments:
            return ""
        slug = segments[-1]
        if _NUMERIC_SEGMENT.match(slug) and len(segments) > 1:
            slug = segments[-2]
        slug = _HTML_SUFFIX.sub("", slug)
        return slug.replace("_", "-").lower()
    except (ValueError, AttributeError):
        return ""


def generate_post_id() -> int:
    return random.randint(100_000_000, 999_999_999)


def extract_domain(url: str) -> str:
    parsed = urlparse(url)
    return parsed.netloc


def supports_web_url(url: Optional[str]) -> bool:
    if not url:
        return False
    return url.startswith(('http://', 'https://'))


def is_social_url(url: Optional[str], domains=SOCIAL_DOMAINS) -> bool:
    if not url:
        return False
    try:
        host = extract_domain(url).lower().split(":")[0]
    except ValueError:
        return False
    return any(host == domain or host.endswith("." + domain) for domain in domains)


def build_tweet_url(handle: str, tweet_id: str) -> str:
    return f"https://x.com/{handle.lstrip('@')}/status/{tweet_id}"
