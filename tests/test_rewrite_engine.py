import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from newscards.exceptions import LLMServiceError
from newscards.news.services.rewrite_engine import RewriteEngine, parse_rewrite_response
from newscards.services.llm_service import LLMProvider

CARD = {
    "title": "హైదరాబాద్‌లో భారీ వర్షం",
    "summary": "నగరంలో మూడు గంటల్లో 10 సెం.మీ. వర్షపాతం నమోదైంది.",
    "category": "General",
    "slug_en": "hyderabad heavy rain",
}


class TestParseRewriteResponse:
    def test_plain_json(self):
        result = parse_rewrite_response(json.dumps(CARD))
        assert result.title == CARD["title"]
        assert result.slug == "hyderabad heavy rain"

    def test_fenced_json(self):
        result = parse_rewrite_response("```json\n" + json.dumps(CARD) + "\n```")
        assert result.category == "General"

    @pytest.mark.parametrize("response", ["", "not json at all", "[1, 2, 3]", "```\n```"])
    def test_unusable_responses(self, response):
        assert parse_rewrite_response(response) is None


class TestRewriteEngine:
    @pytest.fixture
    def llm_service(self):
        service = MagicMock()
        service.generate_with_fallback = AsyncMock(return_value=json.dumps(CARD))
        return service

    @pytest.fixture
    def scraper(self):
        scraper = MagicMock()
        scraper.scrape = AsyncMock(return_value="HEADLINE: Rains\nDESCRIPTION: \nBODY:\nLong body text")
        return scraper

    @pytest.mark.asyncio
    async def test_rewrite_with_scraped_context(self, llm_service, scraper):
        engine = RewriteEngine(llm_service, scraper=scraper, categories=["Politics", "General"])

        result = await engine.rewrite("Title: Rains\nSummary: Heavy rain", "https://news.example.com/rains", "NEWS_ARTICLE")

        assert result.title == CARD["title"]
        scraper.scrape.assert_awaited_once_with("https://news.example.com/rains")
        kwargs = llm_service.generate_with_fallback.call_args.kwargs
        assert "Context: HEADLINE: Rains" in kwargs["user_prompt"]
        assert "Politics, General" in kwargs["user_prompt"]
        assert kwargs["json_output"] is True
        assert kwargs["preferred_provider"] == LLMProvider.GOOGLE

    @pytest.mark.asyncio
    async def test_rewrite_without_url_skips_scraper(self, llm_service, scraper):
        engine = RewriteEngine(llm_service, scraper=scraper)

        result = await engine.rewrite("x")

        assert result is not None
        scraper.scrape.assert_not_called()
        assert "Context:" not in llm_service.generate_with_fallback.call_args.kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_provider_failure_returns_none(self, llm_service, scraper):
        llm_service.generate_with_fallback = AsyncMock(side_effect=LLMServiceError("quota exceeded"))
        engine = RewriteEngine(llm_service, scraper=scraper)

        assert await engine.rewrite("text", "https://news.example.com/a") is None

    @pytest.mark.asyncio
    async def test_malformed_output_returns_none(self, llm_service, scraper):
        llm_service.generate_with_fallback = AsyncMock(return_value="Sorry, I cannot help with that.")
        engine = RewriteEngine(llm_service, scraper=scraper)

        assert await engine.rewrite("text") is None

    @pytest.mark.asyncio
    async def test_scraper_exception_does_not_block_rewrite(self, llm_service, scraper):
        scraper.scrape = AsyncMock(side_effect=RuntimeError("boom"))
        engine = RewriteEngine(llm_service, scraper=scraper)

        assert await engine.rewrite("text", "https://news.example.com/a") is not None
