"""
Final pass/reject call for one filing.

There is no scoring across categories: the extractor that owned the filing
already applied its own thresholds, this only turns that into a Verdict.
"""

from dart_monitor.extractors import extract
from dart_monitor.models import NO_SIGNAL, ExtractionResult, Verdict

TITLE_REJECTED = Verdict(passed=False, tag="title-rejected")
NO_SIGNAL_VERDICT = Verdict(passed=False, tag="no-signal")


def decide(title: str, title_accepted: bool, extraction: ExtractionResult) -> Verdict:
    if not title_accepted:
        return TITLE_REJECTED
    if extraction is NO_SIGNAL or extraction.category is None:
        return NO_SIGNAL_VERDICT
    return Verdict(
        passed=bool(extraction.accepted),
        tag=extraction.tag,
        annotation=extraction.annotation,
        category=extraction.category,
    )


def evaluate(title: str, title_accepted: bool, body: str) -> Verdict:
    """Extract and decide in one step; body is the usable (sentinel-free) text."""
    if not title_accepted:
        return TITLE_REJECTED
    return decide(title, True, extract(title, body))
