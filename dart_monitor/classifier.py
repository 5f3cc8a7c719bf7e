"""
Headline gate. Runs before any document fetch, so it only ever sees the
report title.
"""

from dart_monitor import keywords as kw


def is_interesting(title: str) -> bool:
    return bool(kw.INTERESTING_TITLE.search(title or ""))


def is_discouraging(title: str) -> bool:
    return bool(kw.DISCOURAGING_TITLE.search(title or ""))


def classify(title: str) -> bool:
    """True when the title is worth a document fetch. Exclusion beats inclusion."""
    if is_discouraging(title):
        return False
    return is_interesting(title)


def is_earnings_title(title: str) -> bool:
    return bool(kw.EARNINGS_TITLE.search(title or ""))


def display_label(title: str, body: str = "") -> str:
    """Coarse group shown at the top of an alert."""
    for label, pattern, scope in kw.DISPLAY_LABELS:
        text = title if scope == "title" else f"{title} {body}"
        if pattern.search(text):
            return label
    return kw.DEFAULT_DISPLAY_LABEL
