"""
Prompts for the Reply Synthesizer pipeline step.

The AI-contextual strategy sends a single prompt carrying the retrieved
knowledge, the candidate templates, the email and its detected intent.
"""

from typing import List

from pipeline.models.core import EmailContext
from schemas.knowledge import KnowledgeMatch, TemplateMatch


SYSTEM_PROMPT = """You are an AI assistant helping to compose professional email replies.

Write only the reply body. Do not include a subject line, explanations, or alternative versions."""


def create_reply_prompt(
    email: EmailContext,
    intent: str,
    knowledge_results: List[KnowledgeMatch],
    template_results: List[TemplateMatch],
    meeting_link: str,
) -> str:
    """
    Build the contextual reply prompt.

    Args:
        email: Incoming email
        intent: One-sentence intent from the classifier
        knowledge_results: Retrieved knowledge snippets
        template_results: Retrieved reply templates
        meeting_link: Link suggested for scheduling

    Returns:
        Formatted user prompt
    """
    context_info = "\n".join(item.content for item in knowledge_results)

    template_context = "\n\n".join(
        f"Scenario: {t.scenario}\nTemplate: {t.template}"
        for t in template_results
    )

    return f"""CONTEXT INFORMATION:
{context_info}

AVAILABLE TEMPLATES:
{template_context}

INCOMING EMAIL:
Subject: {email.subject}
From: {email.sender}
Content: {email.body}

DETECTED INTENT: {intent}

Generate a professional, contextual reply that:
1. Acknowledges the sender's message appropriately
2. Uses relevant information from the context when applicable
3. Maintains a professional but friendly tone
4. Includes specific details or links when relevant (e.g., {meeting_link} for meetings)
5. Is concise and actionable

Reply:"""
