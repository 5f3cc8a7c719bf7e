"""
Keyword lexicons for the title gate and the extractors.

Every list is plain text; a space inside a term means "any amount of
whitespace, including none", since DART bodies break table cells and words
unpredictably. Bump the version suffix when a list changes meaning.
"""

import re

# =========================
# Title gate
# =========================
INTERESTING_TITLE_V1 = [
    "단일판매", "공급계약", "무상증자", "특허권", "자기주식", "제3자배정", "양수도",
    "투자판단", "주요경영사항", "기타 시장 안내", "임상", "FDA", "승인", "허가",
    "기술이전", "샌드박스", "로봇", "AI", "탈모", "신약", "매출액", "손익구조", "영업실적",
]
DISCOURAGING_TITLE_V1 = [
    "주식처분", "신탁계약", "계획", "예정", "정정", "자회사", "검토",
    "가능성", "기대", "준비중", "추진",
]

# =========================
# Category triggers (title only unless noted)
# =========================
SUPPLY_TITLE_V1 = ["단일판매", "공급계약"]
SUPPLY_CORRECTION_V1 = ["기재정정"]
EARNINGS_TITLE_V1 = ["매출액", "손익구조", "영업실적"]
CLINICAL_TITLE_V1 = ["임상", "CSR"]
OWNERSHIP_TITLE_V1 = ["양수도", "최대주주", "제3자배정"]

# title + body
HOT_KEYWORDS_V1 = [
    "FDA", "EMA", "PMDA", "CSR", "보고서 수령", "임상 시험 결과", "통계적 유의성", "탑라인", "Top-line",
    "품목 허가", "최종 승인", "기술 이전", "기술 수출", "라이선스 아웃", "신약 허가", "NDA", "BLA",
    "협동 로봇", "자율 주행", "AMR", "AGV", "온디바이스 AI", "LLM",
    "결과", "임상", "수출", "이전", "승인", "라이선스",
]
SUCCESS_MARKERS_V1 = ["통계적 유의성", "확보", "달성", "성공", "탑라인", "top-line"]
OUTCOME_VOCABULARY_V1 = ["중대한 이상 사례", "이상 사례 관찰되지 않", "이상 사례가 관찰되지 않", "유의", "성공", "뒷받침"]
RESULT_LABELS_V1 = ["결과 값", "시험 결과", "임상 결과"]

MAJOR_INVESTORS_V1 = ["삼성", "현대", "기아", "LG", "SK", "한화", "네이버", "NAVER", "카카오", "KAKAO", "포스코"]
TURNAROUND_MARKERS_V1 = ["흑자 전환"]

# =========================
# Display groups (first match wins)
# =========================
DISPLAY_LABELS_V1 = [
    ("💰 실적발표", ["매출액", "손익구조", "영업실적"], "title"),
    ("🧬 바이오/기술 호재", ["임상", "FDA", "CSR", "승인", "탑라인"], "both"),
    ("🤖 로봇/자동화", ["로봇", "AMR", "AGV", "감속기", "협동"], "both"),
    ("💵 공급계약", ["단일판매", "공급계약"], "title"),
    ("📈 무상증자", ["무상증자"], "title"),
    ("🤝 투자/M&A", ["제3자배정", "양수도", "최대주주"], "title"),
]
DEFAULT_DISPLAY_LABEL = "🔔 주요공시"


def loose(term: str, whole_latin: bool = True) -> str:
    """
    Regex source for a term whose spaces tolerate any whitespace run.
    With whole_latin, Latin acronyms must not sit inside a longer Latin word
    ("EMA" in "schema"). Titles are short and match as plain substrings.
    """
    src = r"\s*".join(re.escape(tok) for tok in term.split())
    if whole_latin and term.isascii():
        src = rf"(?<![A-Za-z]){src}(?![A-Za-z])"
    return src


def compile_terms(terms, whole_latin: bool = True) -> re.Pattern:
    return re.compile("|".join(loose(t, whole_latin) for t in terms), re.IGNORECASE)


INTERESTING_TITLE = compile_terms(INTERESTING_TITLE_V1, whole_latin=False)
DISCOURAGING_TITLE = compile_terms(DISCOURAGING_TITLE_V1, whole_latin=False)
SUPPLY_TITLE = compile_terms(SUPPLY_TITLE_V1, whole_latin=False)
SUPPLY_CORRECTION = compile_terms(SUPPLY_CORRECTION_V1, whole_latin=False)
EARNINGS_TITLE = compile_terms(EARNINGS_TITLE_V1, whole_latin=False)
CLINICAL_TITLE = compile_terms(CLINICAL_TITLE_V1, whole_latin=False)
OWNERSHIP_TITLE = compile_terms(OWNERSHIP_TITLE_V1, whole_latin=False)
HOT_KEYWORDS = compile_terms(HOT_KEYWORDS_V1)
SUCCESS_MARKERS = compile_terms(SUCCESS_MARKERS_V1)
OUTCOME_VOCABULARY = compile_terms(OUTCOME_VOCABULARY_V1)
MAJOR_INVESTORS = compile_terms(MAJOR_INVESTORS_V1)
TURNAROUND_MARKERS = compile_terms(TURNAROUND_MARKERS_V1)
DISPLAY_LABELS = [
    (label, compile_terms(terms, whole_latin=scope != "title"), scope) for label, terms, scope in DISPLAY_LABELS_V1
]

# =========================
# Body patterns
# =========================
SUPPLY_RATIO_RE = re.compile(r"매출액\s*대비\s*\(?\s*%\s*\)?\s*(\d[\d,]*(?:\.\d+)?)", re.IGNORECASE)
COUNTERPARTY_RE = re.compile(
    r"계약\s*상대\s*방?\s*:?\s*(.{2,60}?)\s*(?:회사\s*와의\s*관계|-\s*최근|최근\s*매출액|\d{1,2}\.\s)"
)
ACTOR_RE = re.compile(r"(?:양수인|배정\s*대상자)\s*[:\s-]*\s*([가-힣\w\s()]{2,})", re.IGNORECASE)
RESULT_LABEL_RE = re.compile(r"(?:" + "|".join(loose(t) for t in RESULT_LABELS_V1) + r")\s*:?\s*")
UNIT_RE = re.compile(r"단위\s*:?\s*(억원|백만원|천원|원)")

REVENUE_ROW_RE = re.compile(r"매\s*출\s*액")
OPERATING_ROW_RE = re.compile(r"영\s*업\s*이\s*익(?!\s*률)")
NET_ROW_RE = re.compile(r"당\s*기\s*순\s*이\s*익(?!\s*률)")
