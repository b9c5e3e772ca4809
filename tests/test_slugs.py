# =============================================================================
# tests/test_slugs.py - Slug Generation Tests
# =============================================================================
# Run with: pytest tests/test_slugs.py -v
# =============================================================================

import pytest

from lib.slugs import company_slug, id_fragment, person_slug, slug_fragment, slugify


class TestSlugify:
    """Tests for free-text normalization."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Jane Doe", "jane-doe"),
            ("Dr. Jane", "dr-jane"),
            ("José O'Neil", "jose-o-neil"),
            ("  lots   of   space  ", "lots-of-space"),
            ("a--b", "a-b"),
        ],
    )
    def test_normalizes(self, text, expected):
        assert slugify(text) == expected

    def test_empty_input(self):
        assert slugify(None) == ""
        assert slugify("!!!") == ""

    def test_ampersand_spelled_only_when_asked(self):
        assert slugify("Smith & Sons", spell_ampersand=True) == "smith-and-sons"
        assert slugify("Smith & Sons") == "smith-sons"


class TestPersonSlug:
    """Tests for directory person slugs."""

    def test_name_plus_fragment(self):
        assert person_slug("Jane Doe", "usr-8fK2mQ") == "jane-doe-8fk2mq"

    def test_deterministic(self):
        assert person_slug("Jane Doe", "usr-8fK2mQ") == person_slug("Jane Doe", "usr-8fK2mQ")

    def test_same_name_different_people(self):
        assert person_slug("Jane Doe", "usr-aaaaaa") != person_slug("Jane Doe", "usr-bbbbbb")

    def test_missing_name_never_empty(self):
        assert person_slug(None, "usr-8fK2mQ") == "u-8fk2mq"
        assert person_slug("", None).startswith("u-")

    def test_short_identifier(self):
        assert person_slug("Al", "x1") == "al-x1"


class TestCompanySlug:
    def test_plain_name(self):
        assert company_slug("Acme Labs") == "acme-labs"

    def test_fallback_for_unusable_name(self):
        slug = company_slug("???", fallback_id="c0ffee-1234")
        assert slug.startswith("company-")
        assert len(slug) > len("company-")


class TestFragments:
    def test_id_fragment_hash_fallback(self):
        first = id_fragment(None, fallback_seed="Jane")
        assert len(first) == 6
        assert first == id_fragment("---", fallback_seed="Jane")

    def test_slug_fragment_round_trip(self):
        assert slug_fragment(person_slug("Jane Doe", "usr-8fK2mQ")) == "8fk2mq"

    @pytest.mark.parametrize("slug", ["jane", "jane-doe", "jane-ABCDEF", "", "jane-abc-12"])
    def test_slug_fragment_absent(self, slug):
        assert slug_fragment(slug) is None
