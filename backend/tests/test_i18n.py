"""
Inkwell Backend — Localization Tests
=====================================
"""

from inkwell.services.i18n import negotiate_locale, parse_accept_language, translate


class TestAcceptLanguage:

    def test_orders_by_weight(self):
        assert parse_accept_language("th;q=0.5, en-US, en;q=0.9") == [
            ("en-US", 1.0),
            ("en", 0.9),
            ("th", 0.5),
        ]

    def test_ignores_wildcard_and_zero_weight(self):
        assert parse_accept_language("*, en;q=0") == []

    def test_weight_after_other_parameters(self):
        assert parse_accept_language("en;level=1;q=0, th;q=0.5") == [("th", 0.5)]
        assert parse_accept_language("en; Q=0.3, th") == [("th", 1.0), ("en", 0.3)]

    def test_empty_header(self):
        assert parse_accept_language(None) == []
        assert parse_accept_language("") == []


class TestNegotiateLocale:

    def test_explicit_wins(self):
        assert negotiate_locale(explicit="en", accept_language="th", user_pref="th") == "en"

    def test_user_preference_beats_header(self):
        assert negotiate_locale(accept_language="en-US", user_pref="th") == "th"

    def test_header_region_is_reduced_to_language(self):
        assert negotiate_locale(accept_language="en-GB,en;q=0.8") == "en"

    def test_unsupported_values_fall_through(self):
        assert negotiate_locale(explicit="fr", accept_language="de, en;q=0.5") == "en"

    def test_refused_language_is_skipped(self):
        assert negotiate_locale(accept_language="en;level=1;q=0, th;q=0.5") == "th"

    def test_default(self):
        assert negotiate_locale() == "th"


class TestTranslate:

    def test_english_and_thai(self):
        assert translate("article.approved", "en") == "Article approved and published"
        assert translate("article.approved", "th") == "อนุมัติและเผยแพร่บทความแล้ว"

    def test_interpolation(self):
        assert translate("application.approved", "en", name="Somchai") == (
            "Application approved. Somchai is now an author."
        )

    def test_unknown_locale_uses_default(self):
        assert translate("application.rejected", "fr") == "ปฏิเสธใบสมัครแล้ว"

    def test_unknown_key_returns_key(self):
        assert translate("no.such.key", "en") == "no.such.key"
