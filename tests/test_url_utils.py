import pytest

from newscards.utils.url_utils import (
    build_tweet_url,
    extract_slug_from_url,
    generate_post_id,
    is_social_url,
    normalize_url,
)


class TestNormalizeUrl:
    def test_drops_query_and_trailing_slash(self):
        assert normalize_url("https://news.example.com/story/?utm_source=x") == "https://news.example.com/story"

    def test_keeps_fragment(self):
        assert normalize_url("https://example.com/a#part") == "https://example.com/a#part"

    def test_is_idempotent(self):
        once = normalize_url("https://example.com/path//?a=1")
        assert normalize_url(once) == once

    def test_unparseable_input_returned_unchanged(self):
        assert normalize_url("not a url") == "not a url"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_input(self, value):
        assert normalize_url(value) == ""


class TestExtractSlugFromUrl:
    def test_last_segment_without_extension(self):
        assert extract_slug_from_url("https://site.com/news/Big_Story-Today.html") == "big-story-today"

    def test_numeric_last_segment_uses_previous(self):
        assert extract_slug_from_url("https://site.com/telangana/rain-alert/123456") == "rain-alert"

    def test_root_path_gives_empty_slug(self):
        assert extract_slug_from_url("https://site.com/") == ""

    def test_missing_url(self):
        assert extract_slug_from_url(None) == ""


def test_generate_post_id_is_nine_digits():
    for _ in range(50):
        assert 100_000_000 <= generate_post_id() <= 999_999_999


class TestSocialUrls:
    @pytest.mark.parametrize("url", [
        "https://x.com/user/status/1",
        "https://twitter.com/user",
        "https://mobile.twitter.com/user",
    ])
    def test_social_hosts(self, url):
        assert is_social_url(url)

    def test_lookalike_host_is_not_social(self):
        assert not is_social_url("https://notx.com/article")

    def test_build_tweet_url_strips_at(self):
        assert build_tweet_url("@TV9Telugu", "42") == "https://x.com/TV9Telugu/status/42"
