"""
Reply Synthesizer Utilities

Helpers for template rendering, suggestion ids and action detection.
"""

from typing import Dict
from uuid import uuid4


def render_template(template: str, variables: Dict[str, str]) -> str:
    """
    Substitute known {{variable}} placeholders. Unknown placeholders are left as-is.

    Example:
        >>> render_template("Hi {{sender_name}}, see {{link}}", {"sender_name": "alice"})
        'Hi alice, see {{link}}'
    """
    rendered = template
    for name, value in variables.items():
        rendered = rendered.replace("{{" + name + "}}", value)
    return rendered


def new_suggestion_id(prefix: str) -> str:
    """Unique suggestion id such as 'ai_3f9c1a2b7d4e'."""
    return f"{prefix}_{uuid4().hex[:12]}"


def contains_link(content: str) -> bool:
    return "http" in content


def requires_action(content: str) -> bool:
    """Reply asks the recipient to do something: follow a link or schedule."""
    return contains_link(content) or "schedule" in content.lower()
