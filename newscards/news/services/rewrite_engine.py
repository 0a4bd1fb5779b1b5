"""
Rewrite Engine
Turns raw text (plus optional scraped context) into a structured Telugu news card
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog

from ..prompts import NEWS_CARD_SYSTEM_PROMPT, build_news_card_prompt
from .content_scraper import ContentScraperService
from ...exceptions import LLMServiceError
from ...services.llm_service import LLMService, LLMProvider

logger = structlog.get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


@dataclass
class RewriteResult:
    title: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[str] = None
    slug: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RewriteResult":
        def text(key: str) -> Optional[str]:
            value = payload.get(key)
            if value is None:
                return None
            return str(value).strip()

        return cls(
            title=text("title"),
            summary=text("summary"),
            category=text("category"),
            slug=text("slug_en") or text("slug"),
        )


def strip_code_fences(response: str) -> str:
    return _CODE_FENCE.sub("", response or "").strip()


def parse_rewrite_response(response: str) -> Optional[RewriteResult]:
    cleaned = strip_code_fences(response)
    if not cleaned:
        return None
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return RewriteResult.from_payload(payload)


class RewriteEngine:
    """Wraps the generation call. Returns None on any failure, never raises."""

    def __init__(
        self,
        llm_service: LLMService,
        scraper: Optional[ContentScraperService] = None,
        preferred_provider: Optional[LLMProvider] = LLMProvider.GOOGLE,
        categories: Optional[List[str]] = None,
        temperature: float = 0.4,
        max_tokens: int = 2048
    ):
        self.llm_service = llm_service
        self.scraper = scraper or ContentScraperService()
        self.preferred_provider = preferred_provider
        self.categories = categories
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def rewrite(
        self,
        text: str,
        source_url: Optional[str] = None,
        prompt_type: Optional[str] = None
    ) -> Optional[RewriteResult]:
        context = None
        if source_url:
            try:
                context = await self.scraper.scrape(source_url)
            except Exception as e:
                logger.warning("rewrite_context_failed", url=source_url, error=str(e))

        prompt = build_news_card_prompt(
            text=text,
            context=context,
            prompt_type=prompt_type,
            categories=self.categories,
        )

        try:
            response = await self.llm_service.generate_with_fallback(
                system_prompt=NEWS_CARD_SYSTEM_PROMPT,
                user_prompt=prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                preferred_provider=self.preferred_provider,
                json_output=True,
            )
        except LLMServiceError as e:
            logger.error("rewrite_generation_failed", url=source_url, error=str(e))
            return None
        except Exception as e:
            logger.error("rewrite_generation_error", url=source_url, error=str(e), exc_info=True)
            return None

        result = parse_rewrite_response(response)
        if result is None:
            logger.error("rewrite_unparseable_response", url=source_url, response_preview=(response or "")[:200])
            return None

        logger.info("rewrite_completed", url=source_url, category=result.category, has_context=context is not None)
        return result
