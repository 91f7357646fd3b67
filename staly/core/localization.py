"""
Japanese/English message selection.
"""

import locale

from staly.config import settings


def is_japanese() -> bool:
    """Whether user-facing text should be rendered in Japanese."""
    language = settings.app_language.strip().lower()
    if language == "ja":
        return True
    if language == "en":
        return False
    system_locale = locale.getlocale()[0] or ""
    return system_locale.lower().startswith("ja")


def localized_text(japanese: str, english: str) -> str:
    """Pick the message matching the configured language."""
    return japanese if is_japanese() else english
