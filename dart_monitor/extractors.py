"""
Signal extractors over a normalized filing body.

Four categories are tried in a fixed order and the first one whose trigger
fires owns the filing, even if its own thresholds then reject it:

    supply contract -> earnings -> clinical/tech -> ownership change

The numeric helpers at the top never raise; unparseable input gives None.
"""

import re

from dart_monitor import keywords as kw
from dart_monitor.models import (
    NO_SIGNAL,
    Category,
    ClinicalOrTech,
    Earnings,
    ExtractionResult,
    OwnershipChange,
    Severity,
    SupplyContract,
)

SUPPLY_MIN_RATIO = 30.0
SUPPLY_LARGE_RATIO = 70.0
SUPPLY_NOISE_RATIO = 1000.0   # anything at or above this is a mis-read, not a percentage

EARNINGS_MIN_OP_PCT = 70.0
EARNINGS_MIN_OP_AMOUNT = 100.0   # 억원
EARNINGS_MIN_NET_PCT = 0.0

EXCERPT_LIMIT = 300
EXCERPT_FALLBACK = 250
NOT_FOUND_ACTOR = "본문 참조"

NUMBER_TOKEN = re.compile(r"\(?-?\d[\d,]*(?:\.\d+)?\)?%?")
RATIO_RE = re.compile(r"\(\s*(-?\d[\d,]*(?:\.\d+)?)\s*%\s*\)")
AMOUNT_RE = re.compile(r"\s*(-?\d[\d,]*(?:\.\d+)?)")
SENTENCE_SPLIT = re.compile(r"(?<=\.)\s+(?!\d)|\s+(?=\d{1,2}\.\s)|\s+-\s+")
CORPORATE_PREFIX = re.compile(r"^(?:\(주\)|주식회사)\s*")
CORPORATE_SUFFIX = re.compile(r"\s*(?:\(주\)|주식회사)$")
ACTOR_STOPS = ("회사와의", "회사 와의", "(", " 관계", " 최근", " 비고")

UNIT_DIVISOR = {"원": 1e8, "천원": 1e5, "백만원": 1e2, "억원": 1.0}
ROW_MARKERS = ("-", "흑자전환", "적자전환", "흑자지속", "적자지속")


# =========================
# Numeric helpers
# =========================
def parse_number(token: str | None) -> float | None:
    """'1,234.5' -> 1234.5, '(12)' -> -12.0, anything else -> None."""
    if not token:
        return None
    t = token.strip().rstrip("%")
    if not NUMBER_TOKEN.fullmatch(t):
        return None
    negative = t.startswith("(") and t.endswith(")")
    t = t.strip("()").replace(",", "")
    try:
        v = float(t)
    except ValueError:
        return None
    return -v if negative else v


def extract_ratio(text: str | None) -> float | None:
    """Percentage inside the first '(<n>%)' group, e.g. '14.9억 (86.3%)' -> 86.3."""
    m = RATIO_RE.search(text or "")
    return parse_number(m.group(1)) if m else None


def extract_amount(text: str | None) -> float | None:
    """Leading numeral before the unit token, e.g. '14.9억 (86.3%)' -> 14.9."""
    m = AMOUNT_RE.match(text or "")
    return parse_number(m.group(1)) if m else None


# =========================
# Supply contract
# =========================
def triggers_supply(title: str, body: str) -> bool:
    return bool(kw.SUPPLY_TITLE.search(title))


def find_counterparty(body: str) -> str:
    m = kw.COUNTERPARTY_RE.search(body)
    if not m:
        return ""
    return m.group(1).strip(" :-")[:40]


def extract_supply(title: str, body: str) -> SupplyContract:
    counterparty = find_counterparty(body)
    m = kw.SUPPLY_RATIO_RE.search(body)
    if m:
        ratio = parse_number(m.group(1))
        severity = None
        if ratio is not None and SUPPLY_MIN_RATIO <= ratio < SUPPLY_NOISE_RATIO:
            severity = Severity.LARGE_SCALE if ratio >= SUPPLY_LARGE_RATIO else Severity.SUPPLY
        return SupplyContract(ratio=ratio, severity=severity, counterparty=counterparty)
    if kw.SUPPLY_CORRECTION.search(title):
        return SupplyContract(ratio=None, severity=Severity.CORRECTION,
                              counterparty=counterparty, is_correction=True)
    return SupplyContract(ratio=None, severity=None, counterparty=counterparty)


# =========================
# Earnings
# =========================
def triggers_earnings(title: str, body: str) -> bool:
    return bool(kw.EARNINGS_TITLE.search(title))


def table_unit_divisor(body: str) -> float:
    """What the table's amounts are divided by to get 억원. Defaults to 원."""
    m = kw.UNIT_RE.search(body)
    return UNIT_DIVISOR[m.group(1)] if m else UNIT_DIVISOR["원"]


def _is_row_value(token: str) -> bool:
    return token in ROW_MARKERS or parse_number(token) is not None


def row_values(body: str, label_re: re.Pattern) -> list[str] | None:
    """
    Cells that follow a line-item label: current, previous, change amount,
    change ratio. Labels that appear in running text (a heading, a footnote)
    are skipped because they are not followed by a run of numbers.
    """
    for m in label_re.finditer(body):
        values, skipped = [], 0
        for tok in body[m.end():m.end() + 200].split():
            if _is_row_value(tok):
                values.append(tok)
                if len(values) == 4:
                    break
            elif values:
                break
            else:
                skipped += 1
                if skipped > 2:
                    break
        if len(values) >= 3:
            return values
    return None


def row_change(values: list[str] | None, divisor: float) -> tuple[float | None, float | None]:
    """(change amount in 억원, change ratio) of a row, unrounded; None for a non-numeric cell."""
    if not values or len(values) < 4:
        return None, None
    amount, pct = parse_number(values[2]), parse_number(values[3])
    return (amount / divisor if amount is not None else None), pct


def judge_changes(op_pct: float | None, op_amount: float | None, net_pct: float | None,
                  is_turnaround: bool = False, revenue_pct: float | None = None) -> Earnings:
    beat = (
        op_pct is not None and op_amount is not None and net_pct is not None
        and op_pct >= EARNINGS_MIN_OP_PCT
        and op_amount >= EARNINGS_MIN_OP_AMOUNT
        and net_pct >= EARNINGS_MIN_NET_PCT
    )
    return Earnings(
        op_change_pct=op_pct,
        op_change_amount=op_amount,
        net_change_pct=net_pct,
        is_turnaround=is_turnaround,
        accepted=beat or is_turnaround,
        revenue_change_pct=revenue_pct,
    )


def judge_earnings(op_line: str | None, net_line: str | None,
                   is_turnaround: bool = False, revenue_line: str | None = None) -> Earnings:
    """Same call on '<amount>억 (<ratio>%)' summary lines."""
    return judge_changes(extract_ratio(op_line), extract_amount(op_line), extract_ratio(net_line),
                         is_turnaround=is_turnaround, revenue_pct=extract_ratio(revenue_line))


def extract_earnings(title: str, body: str) -> Earnings:
    divisor = table_unit_divisor(body)
    _, revenue_pct = row_change(row_values(body, kw.REVENUE_ROW_RE), divisor)
    op_amount, op_pct = row_change(row_values(body, kw.OPERATING_ROW_RE), divisor)
    _, net_pct = row_change(row_values(body, kw.NET_ROW_RE), divisor)
    turnaround = bool(kw.TURNAROUND_MARKERS.search(body))
    return judge_changes(op_pct, op_amount, net_pct, is_turnaround=turnaround, revenue_pct=revenue_pct)


# =========================
# Clinical / technology
# =========================
def triggers_clinical(title: str, body: str) -> bool:
    if kw.CLINICAL_TITLE.search(title):
        return True
    return bool(kw.HOT_KEYWORDS.search(f"{title} {body}"))


def clinical_excerpt(body: str) -> str:
    if not body:
        return ""
    m = kw.RESULT_LABEL_RE.search(body)
    if m:
        excerpt = body[m.end():m.end() + EXCERPT_LIMIT]
    else:
        excerpt = body[:EXCERPT_FALLBACK]
    relevant = [s.strip() for s in SENTENCE_SPLIT.split(excerpt)
                if s.strip() and kw.OUTCOME_VOCABULARY.search(s)]
    if relevant:
        excerpt = " ".join(relevant)
    return excerpt.strip()[:EXCERPT_LIMIT]


def extract_clinical(title: str, body: str) -> ClinicalOrTech:
    is_success = bool(kw.SUCCESS_MARKERS.search(f"{title} {body}"))
    return ClinicalOrTech(is_success=is_success, excerpt=clinical_excerpt(body))


# =========================
# Ownership / investment
# =========================
def triggers_ownership(title: str, body: str) -> bool:
    return bool(kw.OWNERSHIP_TITLE.search(title))


def clean_actor(raw: str) -> str:
    name = CORPORATE_PREFIX.sub("", raw.strip())
    for stop in ACTOR_STOPS:
        name = name.split(stop)[0]
    name = CORPORATE_SUFFIX.sub("", name.strip())
    name = " ".join(name.split()[:4])[:30].strip()
    return name or NOT_FOUND_ACTOR


def find_actor(body: str) -> str:
    m = kw.ACTOR_RE.search(body)
    return clean_actor(m.group(1)) if m else NOT_FOUND_ACTOR


def extract_ownership(title: str, body: str) -> OwnershipChange:
    actor = find_actor(body)
    major = actor != NOT_FOUND_ACTOR and bool(kw.MAJOR_INVESTORS.search(actor))
    return OwnershipChange(actor_name=actor, is_major_investor=major)


# =========================
# Dispatch
# =========================
EXTRACTORS = (
    (Category.SUPPLY_CONTRACT, triggers_supply, extract_supply),
    (Category.EARNINGS, triggers_earnings, extract_earnings),
    (Category.CLINICAL_OR_TECH, triggers_clinical, extract_clinical),
    (Category.OWNERSHIP_CHANGE, triggers_ownership, extract_ownership),
)


def triggered_category(title: str, body: str) -> Category | None:
    for category, triggers, _ in EXTRACTORS:
        if triggers(title, body):
            return category
    return None


def extract(title: str, body: str) -> ExtractionResult:
    """Run the first extractor whose trigger fires; NO_SIGNAL when none does."""
    title, body = title or "", body or ""
    for _, triggers, run in EXTRACTORS:
        if triggers(title, body):
            return run(title, body)
    return NO_SIGNAL
