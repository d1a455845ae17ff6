"""
Inkwell Backend — Localization Helpers
=======================================

What:  Locale negotiation and a small message catalogue for the
       confirmation messages returned by moderation and review endpoints.
How:   negotiate_locale() picks, in order:
           1. an explicit `?lang=` value
           2. the signed-in user's saved language preference
           3. the best Accept-Language match (q-weighted, primary subtag)
           4. settings.default_locale
       translate() looks the key up in the requested locale, then the
       default locale, then falls back to the key itself.
"""

import logging
from typing import Dict, List, Optional, Tuple

from inkwell.config import settings

logger = logging.getLogger(__name__)

# Used for og:locale
OG_LOCALES = {"en": "en_US", "th": "th_TH"}

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "article.submitted": "Article submitted for review",
        "article.approved": "Article approved and published",
        "article.rejected": "Article rejected and returned to draft",
        "article.unpublished": "Article unpublished successfully",
        "application.submitted": "Your author application has been submitted",
        "application.approved": "Application approved. {name} is now an author.",
        "application.rejected": "Application rejected",
        "reading_history.deleted": "Reading history deleted successfully",
    },
    "th": {
        "article.submitted": "ส่งบทความเพื่อรอการตรวจสอบแล้ว",
        "article.approved": "อนุมัติและเผยแพร่บทความแล้ว",
        "article.rejected": "ปฏิเสธบทความและส่งกลับเป็นฉบับร่างแล้ว",
        "article.unpublished": "ยกเลิกการเผยแพร่บทความแล้ว",
        "application.submitted": "ส่งใบสมัครเป็นผู้เขียนเรียบร้อยแล้ว",
        "application.approved": "อนุมัติใบสมัครแล้ว {name} เป็นผู้เขียนแล้ว",
        "application.rejected": "ปฏิเสธใบสมัครแล้ว",
        "reading_history.deleted": "ลบประวัติการอ่านแล้ว",
    },
}


def _normalize(tag: Optional[str]) -> Optional[str]:
    """'en-US' → 'en' if supported, else None."""
    if not tag:
        return None
    primary = tag.strip().split("-")[0].split("_")[0].lower()
    if primary in settings.supported_locales_list:
        return primary
    return None


def parse_accept_language(header: Optional[str]) -> List[Tuple[str, float]]:
    """
    Parse an Accept-Language header into (tag, q) pairs, best first.

    >>> parse_accept_language("en-US,en;q=0.9,th;q=0.8")
    [('en-US', 1.0), ('en', 0.9), ('th', 0.8)]
    """
    if not header:
        return []
    entries = []
    for position, part in enumerate(header.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, *params = piece.split(";")
        q = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    q = float(value.strip())
                except ValueError:
                    q = 0.0
                break
        if q > 0 and tag.strip() != "*":
            entries.append((tag.strip(), q, position))
    # Stable on header order for equal weights
    entries.sort(key=lambda e: (-e[1], e[2]))
    return [(tag, q) for tag, q, _ in entries]


def negotiate_locale(
    explicit: Optional[str] = None,
    accept_language: Optional[str] = None,
    user_pref: Optional[str] = None,
) -> str:
    for candidate in (explicit, user_pref):
        locale = _normalize(candidate)
        if locale:
            return locale
    for tag, _ in parse_accept_language(accept_language):
        locale = _normalize(tag)
        if locale:
            return locale
    return settings.default_locale


def translate(key: str, locale: Optional[str] = None, **values: str) -> str:
    """Look up `key` for `locale` and interpolate `{name}` placeholders."""
    catalogue = MESSAGES.get(locale or settings.default_locale, {})
    template = catalogue.get(key) or MESSAGES.get(settings.default_locale, {}).get(key)
    if template is None:
        logger.debug("Missing translation for '%s' (%s)", key, locale)
        return key
    try:
        return template.format(**values)
    except KeyError:
        return template
