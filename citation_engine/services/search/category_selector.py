"""Pick a focus category for the search prompt from topic and funnel stage."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel


class FocusCategory(str, Enum):
    GOVERNMENT = "government"
    REAL_ESTATE = "real_estate"
    FINANCIAL = "financial"
    TOURISM = "tourism"
    NEWS = "news"


class CategorySelection(BaseModel):
    category: FocusCategory
    reasoning: str
    confidence: str

    model_config = {"frozen": True}


_OVERRIDES = (
    (
        re.compile(r"government|official|ministry|regulation|permit|visa|residency|immigration|citizenship"),
        FocusCategory.GOVERNMENT,
        "Official government topic",
    ),
    (
        re.compile(r"property|real estate|home|villa|apartment"),
        FocusCategory.REAL_ESTATE,
        "Real estate topic",
    ),
    (
        re.compile(r"mortgage|bank|loan|finance|currency|exchange|money transfer|payment"),
        FocusCategory.FINANCIAL,
        "Financial topic",
    ),
    (
        re.compile(r"tourism|travel|destination|attraction|things to do|visit|explore|vacation"),
        FocusCategory.TOURISM,
        "Tourism topic",
    ),
)

# stage -> ((pattern, category, reasoning), ...), default
_STAGE_RULES: dict[str, tuple[tuple[tuple[re.Pattern[str], FocusCategory, str], ...], FocusCategory]] = {
    "TOFU": (
        (
            (
                re.compile(r"lifestyle|living|beach|climate|culture|food|weather|area|location|guide|neighborhood|expat|community"),
                FocusCategory.TOURISM,
                "Lifestyle/awareness content",
            ),
            (
                re.compile(r"market|trend|statistics|data|overview|introduction|explained|understanding|basics"),
                FocusCategory.NEWS,
                "Market overview content",
            ),
        ),
        FocusCategory.TOURISM,
    ),
    "MOFU": (
        (
            (
                re.compile(r"buying|process|steps|how to|guide|tips|considerations|checklist|timeline|stages"),
                FocusCategory.REAL_ESTATE,
                "How-to/process content",
            ),
            (
                re.compile(r"compare|comparison|vs|versus|difference|options|types|choosing|deciding"),
                FocusCategory.NEWS,
                "Comparative analysis",
            ),
            (
                re.compile(r"cost|price|budget|afford|calculate|estimate|expenses"),
                FocusCategory.FINANCIAL,
                "Cost analysis",
            ),
        ),
        FocusCategory.REAL_ESTATE,
    ),
    "BOFU": (
        (
            (
                re.compile(r"tax|legal|law|visa|residency|permit|regulation|contract|documentation|paperwork"),
                FocusCategory.GOVERNMENT,
                "Legal/regulatory content",
            ),
            (
                re.compile(r"mortgage|finance|investment|return|roi|loan|interest|bank|financing"),
                FocusCategory.FINANCIAL,
                "Financial decision content",
            ),
            (
                re.compile(r"lawyer|notary|agent|service|professional|consultant|advisor|help"),
                FocusCategory.REAL_ESTATE,
                "Professional services content",
            ),
        ),
        FocusCategory.GOVERNMENT,
    ),
}


def select_focus_category(topic: str, funnel_stage: str | None) -> CategorySelection:
    """Ordering hint for the search prompt.

    Topic keywords override the funnel stage. Unknown stages use the BOFU rules.
    """
    topic_lower = (topic or "").lower()
    for pattern, category, reasoning in _OVERRIDES:
        if pattern.search(topic_lower):
            return CategorySelection(category=category, reasoning=f"Override: {reasoning}", confidence="high")

    stage = (funnel_stage or "").strip().upper()
    rules, default = _STAGE_RULES.get(stage, _STAGE_RULES["BOFU"])
    label = stage if stage in _STAGE_RULES else "BOFU"
    for pattern, category, reasoning in rules:
        if pattern.search(topic_lower):
            return CategorySelection(category=category, reasoning=f"{label}: {reasoning}", confidence="high")
    return CategorySelection(
        category=default, reasoning=f"{label}: default for stage", confidence="low"
    )
