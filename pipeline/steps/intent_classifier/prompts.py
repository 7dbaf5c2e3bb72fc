"""
Prompts for the Intent Classifier pipeline step.
"""

from pipeline.models.core import EmailContext


SYSTEM_PROMPT = """You are an assistant that reads incoming emails and states, in one plain sentence, what the sender wants.

Do not greet, do not add commentary, and do not use lists. Respond with exactly one sentence."""


def create_intent_prompt(email: EmailContext) -> str:
    """
    Build the intent classification prompt.

    Args:
        email: Incoming email

    Returns:
        Formatted user prompt
    """
    return f"""Analyze this email and classify the intent in one sentence:

Subject: {email.subject}
From: {email.sender}
Content: {email.body}

What is the main intent or request in this email? Respond with a single sentence describing the intent."""
