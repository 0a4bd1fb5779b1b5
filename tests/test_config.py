import pytest
from pydantic import ValidationError

from newscards.config import Settings


class TestSettings:
    def test_missing_gemini_key_fails(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_gemini_key_alias(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-secret")

        assert Settings(_env_file=None).google_api_key == "gemini-secret"

    def test_missing_twitter_key_fails(self, monkeypatch):
        monkeypatch.delenv("TWITTER_API_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_pipeline_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.worker_batch_size == 3
        assert settings.worker_item_delay_seconds == 5.0
        assert settings.title_similarity_threshold == 0.65
        assert settings.recent_posts_window_hours == 72
        assert settings.feed_items_per_source == 5
        assert settings.scraper_max_chars == 15000
        assert settings.fallback_image_slug == "latest-telugu-news"
        assert settings.dedup_url_match == "contains"
        assert settings.queue_failure_policy == "drop"

    def test_comma_separated_categories(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_CATEGORIES", "Politics, Sports ,General")

        assert Settings(_env_file=None).allowed_categories == ["Politics", "Sports", "General"]

    def test_invalid_failure_policy(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, queue_failure_policy="forever")
