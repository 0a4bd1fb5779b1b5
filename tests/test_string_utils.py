from newscards.utils.string_utils import best_match, slugify_tag, title_similarity


class TestTitleSimilarity:
    def test_identical_strings(self):
        assert title_similarity("CM meets PM in Delhi", "CM meets PM in Delhi") == 1.0

    def test_disjoint_strings(self):
        assert title_similarity("abcd", "wxyz") == 0.0

    def test_whitespace_is_ignored(self):
        assert title_similarity("heavy rain", "heavyrain") == 1.0

    def test_empty_and_single_character(self):
        assert title_similarity("", "") == 0.0
        assert title_similarity("a", "ab") == 0.0

    def test_near_duplicate_headlines_score_high(self):
        rating = title_similarity(
            "Heavy rains lash Hyderabad, IMD issues orange alert",
            "Heavy rains lash Hyderabad; IMD issues orange alert",
        )
        assert rating > 0.65


class TestBestMatch:
    def test_returns_highest_rated_candidate(self):
        rating, candidate = best_match("Budget session begins", ["Cricket final today", "Budget session begins today"])
        assert candidate == "Budget session begins today"
        assert rating > 0.65

    def test_no_candidates(self):
        assert best_match("anything", []) == (0.0, None)


def test_slugify_tag():
    assert slugify_tag("  Andhra Pradesh! ") == "andhra-pradesh"
