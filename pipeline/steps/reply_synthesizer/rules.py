"""
Keyword rule tables for the Reply Synthesizer.

Both tables are evaluated top to bottom and the first match wins. Matching
is a case-insensitive substring search over the email subject and body.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pipeline.models.core import EmailContext


DEFAULT_CATEGORY = "general"

# (keywords, category)
CATEGORY_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("interview",), "job_interview"),
    (("meeting",), "meeting"),
    (("demo",), "sales_demo"),
    (("support", "help"), "technical_support"),
    (("collaboration", "project"), "collaboration"),
]


@dataclass(frozen=True)
class QuickResponseRule:
    """Canned one-line reply triggered by a keyword."""

    keyword: str
    content: str
    confidence: float
    category: str
    tone: str
    reasoning: str


QUICK_RESPONSE_RULES: List[QuickResponseRule] = [
    QuickResponseRule(
        keyword="thank",
        content="You're welcome! Feel free to reach out if you have any other questions.",
        confidence=0.9,
        category="acknowledgment",
        tone="friendly",
        reasoning="Quick response for thank you message",
    ),
    QuickResponseRule(
        keyword="confirm",
        content="Confirmed! I'll make a note of this. Thank you for letting me know.",
        confidence=0.8,
        category="confirmation",
        tone="professional",
        reasoning="Quick response for confirmation request",
    ),
]


def _mentions(email: EmailContext, keyword: str) -> bool:
    return keyword in email.subject.lower() or keyword in email.body.lower()


def categorize_email(email: EmailContext) -> str:
    """
    Category of the first rule with a keyword in the subject or body.

    Example:
        >>> categorize_email(EmailContext("Demo request", "Can we meet?", "a@b.com"))
        'sales_demo'
    """
    for keywords, category in CATEGORY_RULES:
        if any(_mentions(email, keyword) for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def match_quick_response(email: EmailContext) -> Optional[QuickResponseRule]:
    """First quick-response rule whose keyword appears in the email, if any."""
    for rule in QUICK_RESPONSE_RULES:
        if _mentions(email, rule.keyword):
            return rule
    return None
