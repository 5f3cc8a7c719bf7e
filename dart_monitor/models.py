"""
Data carried through one scan: listing rows, extractor findings, verdicts
and the notifications built from them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from dart_monitor.config import DART_VIEWER_URL
from dart_monitor.market_hours import market_now


@dataclass(frozen=True)
class FilingSummary:
    """One row of the OpenDART listing."""
    report_title: str
    corp_name: str
    receipt_no: str
    corp_code: str = ""
    stock_code: str = ""
    corp_cls: str = ""
    receipt_date: str = ""

    @classmethod
    def from_api(cls, row: dict) -> "FilingSummary":
        return cls(
            report_title=(row.get("report_nm") or "").strip(),
            corp_name=(row.get("corp_name") or "").strip(),
            receipt_no=(row.get("rcept_no") or "").strip(),
            corp_code=row.get("corp_code") or "",
            stock_code=row.get("stock_code") or "",
            corp_cls=row.get("corp_cls") or "",
            receipt_date=row.get("rcept_dt") or "",
        )

    @property
    def key(self) -> str:
        # dedup identity; the title may be edited between listings
        return f"{self.corp_name}_{self.receipt_no}"

    @property
    def link(self) -> str:
        return DART_VIEWER_URL.format(rcept_no=self.receipt_no)


class Category(Enum):
    SUPPLY_CONTRACT = "supply-contract"
    EARNINGS = "earnings"
    CLINICAL_OR_TECH = "clinical-or-tech"
    OWNERSHIP_CHANGE = "ownership-change"


class Severity(Enum):
    SUPPLY = "supply"
    LARGE_SCALE = "large-scale"
    CORRECTION = "correction"


# =========================
# Extraction results
# =========================
@dataclass(frozen=True)
class NoSignal:
    category = None
    accepted = False
    tag = "no-signal"
    annotation = ""


NO_SIGNAL = NoSignal()


@dataclass(frozen=True)
class SupplyContract:
    ratio: float | None
    severity: Severity | None
    counterparty: str = ""
    is_correction: bool = False

    category = Category.SUPPLY_CONTRACT

    @property
    def accepted(self) -> bool:
        return self.severity is not None

    @property
    def tag(self) -> str:
        if self.severity is Severity.LARGE_SCALE:
            return "large-scale-supply"
        if self.severity is Severity.CORRECTION:
            return "supply-correction"
        if self.severity is Severity.SUPPLY:
            return "supply"
        return "supply-below-threshold"

    @property
    def annotation(self) -> str:
        if self.severity is Severity.CORRECTION:
            text = "수주 내용 정정 공시"
        elif self.ratio is None:
            text = "매출액 대비 비율 확인 불가"
        elif self.severity is Severity.LARGE_SCALE:
            text = f"[대형수주] 매출액 대비 {self.ratio:g}%!"
        elif self.severity is Severity.SUPPLY:
            text = f"[수주] 매출액 대비 {self.ratio:g}%"
        else:
            text = f"매출액 대비 {self.ratio:g}% (기준 미달)"
        if self.counterparty:
            text += f"\n계약상대: {self.counterparty}"
        return text


@dataclass(frozen=True)
class Earnings:
    op_change_pct: float | None
    op_change_amount: float | None
    net_change_pct: float | None
    is_turnaround: bool = False
    accepted: bool = False
    revenue_change_pct: float | None = None

    category = Category.EARNINGS

    @property
    def tag(self) -> str:
        if self.is_turnaround:
            return "turnaround"
        return "earnings-beat" if self.accepted else "earnings-below-threshold"

    @property
    def annotation(self) -> str:
        if self.is_turnaround:
            return "[실적] ★흑자전환 성공★"
        if None in (self.op_change_pct, self.op_change_amount, self.net_change_pct):
            return "영업이익/당기순이익 데이터 없음"
        text = f"영업이익 {self.op_change_pct:g}% ({self.op_change_amount:g}억) / 순이익 {self.net_change_pct:g}%"
        if self.revenue_change_pct is not None:
            text = f"매출 {self.revenue_change_pct:g}% / " + text
        return f"[실적 어닝서프] {text}" if self.accepted else text


@dataclass(frozen=True)
class ClinicalOrTech:
    is_success: bool
    excerpt: str = ""

    category = Category.CLINICAL_OR_TECH
    accepted = True

    @property
    def tag(self) -> str:
        return "clinical-success" if self.is_success else "clinical-detected"

    @property
    def annotation(self) -> str:
        head = "[핵심 결과 발표] 데이터 유의성 확보" if self.is_success else "[바이오/기술] 공시 감지"
        return f"{head}\n{self.excerpt}" if self.excerpt else head


@dataclass(frozen=True)
class OwnershipChange:
    actor_name: str
    is_major_investor: bool

    category = Category.OWNERSHIP_CHANGE
    accepted = True

    @property
    def tag(self) -> str:
        return "major-investor" if self.is_major_investor else "investment"

    @property
    def annotation(self) -> str:
        if self.is_major_investor:
            return f"[특급 투자자: {self.actor_name}]"
        return f"[투자 유치: {self.actor_name}]"


ExtractionResult = NoSignal | SupplyContract | Earnings | ClinicalOrTech | OwnershipChange


# =========================
# Verdicts and alerts
# =========================
@dataclass(frozen=True)
class Verdict:
    passed: bool
    tag: str
    annotation: str = ""
    category: Category | None = None


@dataclass
class Notification:
    filing: FilingSummary
    verdict: Verdict
    label: str
    sent_at: datetime = field(default_factory=market_now)
