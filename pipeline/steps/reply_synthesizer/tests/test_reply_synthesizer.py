"""
Test suite for Reply Synthesizer Step

Covers the three strategies (template, AI-contextual, quick response), the
keyword rule tables, and the all-or-nothing behaviour when the AI strategy
fails. The chat model is a pydantic-ai TestModel / FunctionModel.

Run with:
    pytest pipeline/steps/reply_synthesizer/tests/test_reply_synthesizer.py -v
"""

import pytest
from uuid import uuid4

from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import FunctionModel
from pydantic_ai.models.test import TestModel

from pipeline.core.exceptions import ExternalAPIError, StepExecutionError
from pipeline.models.core import EmailContext, PipelineState, ReplyPipelineData
from pipeline.steps.reply_synthesizer.main import DEFAULT_AI_CONTENT, ReplySynthesizerStep
from pipeline.steps.reply_synthesizer.prompts import create_reply_prompt
from pipeline.steps.reply_synthesizer.rules import categorize_email, match_quick_response
from pipeline.steps.reply_synthesizer.utils import render_template, requires_action
from schemas.knowledge import KnowledgeMatch, TemplateMatch


MEETING_LINK = "https://cal.com/test-link"
AI_REPLY = "Thanks for reaching out. Happy to help with the details."


# ===================================================================
# FIXTURES
# ===================================================================

@pytest.fixture
def knowledge():
    return [
        KnowledgeMatch(content="OneBox-AI organizes email.", metadata={"type": "product"}, similarity=0.9),
        KnowledgeMatch(content="Multi-account IMAP sync.", metadata={"type": "product"}, similarity=0.8),
        KnowledgeMatch(content="FastAPI and pgvector.", metadata={"type": "product"}, similarity=0.5),
    ]


def make_template(similarity: float) -> TemplateMatch:
    return TemplateMatch(
        scenario="Product demo request from potential client",
        template="Hi {{sender_name}}, thanks for your interest in {{product_name}}! Book here: {{meeting_link}} ({{unknown}})",
        variables=["sender_name", "product_name", "meeting_link"],
        category="sales_demo",
        similarity=similarity,
    )


def make_email(subject="Demo request", body="Can you show me the product?", sender="jane.doe@acme.com"):
    return EmailContext(subject=subject, body=body, sender=sender)


def make_step(output_text: str = AI_REPLY, model=None) -> ReplySynthesizerStep:
    return ReplySynthesizerStep(
        model=model or TestModel(custom_output_text=output_text),
        meeting_link=MEETING_LINK,
        product_name="OneBox-AI",
    )


def failing_model(messages, info):
    raise RuntimeError("model overloaded")


# ===================================================================
# TESTS - Rule tables and helpers
# ===================================================================

@pytest.mark.parametrize("subject,body,expected", [
    ("Interview next week", "", "job_interview"),
    ("Quick question", "Can we set up a MEETING?", "meeting"),
    ("Demo", "", "sales_demo"),
    ("Need help", "", "technical_support"),
    ("Support ticket", "", "technical_support"),
    ("New project", "", "collaboration"),
    ("Hello", "Just saying hi", "general"),
    ("Interview demo", "", "job_interview"),  # first rule wins
])
def test_categorize_email(subject, body, expected):
    assert categorize_email(make_email(subject=subject, body=body)) == expected


def test_quick_response_thank_wins_over_confirm():
    rule = match_quick_response(make_email(subject="Please confirm", body="Thank you!"))

    assert rule.keyword == "thank"
    assert rule.confidence == 0.9


def test_quick_response_confirm():
    rule = match_quick_response(make_email(subject="Can you CONFIRM the date?", body=""))

    assert rule.category == "confirmation"
    assert rule.tone == "professional"


def test_quick_response_absent():
    assert match_quick_response(make_email(subject="Demo", body="Show me")) is None


def test_render_template_leaves_unknown_placeholders():
    rendered = render_template("Hi {{sender_name}} {{missing}}", {"sender_name": "jane"})

    assert rendered == "Hi jane {{missing}}"


@pytest.mark.parametrize("content,expected", [
    ("Book here: https://cal.com/x", True),
    ("Let's schedule a call.", True),
    ("Schedule whenever suits you.", True),
    ("Thanks, noted.", False),
])
def test_requires_action(content, expected):
    assert requires_action(content) is expected


def test_reply_prompt_contains_context_templates_email_and_intent(knowledge):
    prompt = create_reply_prompt(
        email=make_email(),
        intent="Wants a product demo.",
        knowledge_results=knowledge,
        template_results=[make_template(0.8)],
        meeting_link=MEETING_LINK,
    )

    assert "OneBox-AI organizes email." in prompt
    assert "Scenario: Product demo request from potential client" in prompt
    assert "Subject: Demo request" in prompt
    assert "From: jane.doe@acme.com" in prompt
    assert "DETECTED INTENT: Wants a product demo." in prompt
    assert MEETING_LINK in prompt
    assert "5. Is concise and actionable" in prompt


# ===================================================================
# TESTS - Template strategy
# ===================================================================

def test_template_below_gate_is_skipped(knowledge):
    outcome = make_step().template_strategy(make_email(), knowledge, [make_template(0.69)])

    assert outcome.success is True
    assert outcome.suggestion is None


def test_template_at_gate_is_skipped(knowledge):
    outcome = make_step().template_strategy(make_email(), knowledge, [make_template(0.7)])

    assert outcome.suggestion is None


def test_template_above_gate_is_filled(knowledge):
    outcome = make_step().template_strategy(make_email(), knowledge, [make_template(0.71)])
    reply = outcome.suggestion

    assert reply.id.startswith("template_")
    assert reply.content == (
        f"Hi jane.doe, thanks for your interest in OneBox-AI! Book here: {MEETING_LINK} ({{{{unknown}}}})"
    )
    assert reply.confidence == 0.71
    assert reply.metadata.category == "sales_demo"
    assert reply.metadata.action_required is True
    assert reply.metadata.tone == "professional"
    assert reply.metadata.estimated_response_time == "immediate"
    assert reply.context.relevant_knowledge == knowledge[:2]
    assert reply.context.matched_template.category == "sales_demo"
    assert reply.context.reasoning == "Matched template for sales_demo scenario with 71% confidence"


def test_template_without_results_is_skipped(knowledge):
    assert make_step().template_strategy(make_email(), knowledge, []).suggestion is None


def test_template_for_empty_sender_local_part_uses_there(knowledge):
    outcome = make_step().template_strategy(make_email(sender="@acme.com"), knowledge, [make_template(0.9)])

    assert outcome.suggestion.content.startswith("Hi there,")


# ===================================================================
# TESTS - AI-contextual strategy
# ===================================================================

@pytest.mark.asyncio
async def test_ai_strategy_builds_contextual_reply(knowledge):
    template = make_template(0.5)

    outcome = await make_step().ai_contextual_strategy(make_email(), "Wants a demo.", knowledge, [template])
    reply = outcome.suggestion

    assert outcome.success is True
    assert reply.id.startswith("ai_")
    assert reply.content == AI_REPLY
    assert reply.confidence == 0.8
    assert reply.metadata.category == "sales_demo"
    assert reply.metadata.action_required is False
    assert reply.context.relevant_knowledge == knowledge
    assert reply.context.matched_template == template
    assert reply.context.reasoning == "AI-generated response using retrieved context and templates"


@pytest.mark.asyncio
async def test_ai_strategy_without_templates_has_no_matched_template(knowledge):
    outcome = await make_step().ai_contextual_strategy(make_email(), "Wants a demo.", knowledge, [])

    assert outcome.suggestion.context.matched_template is None


@pytest.mark.asyncio
async def test_ai_strategy_blank_answer_uses_default_content(knowledge):
    def blank(messages, info):
        return ModelResponse(parts=[TextPart("  \n")])

    outcome = await make_step(model=FunctionModel(blank)).ai_contextual_strategy(
        make_email(), "Wants a demo.", knowledge, []
    )

    assert outcome.suggestion.content == DEFAULT_AI_CONTENT


@pytest.mark.asyncio
async def test_ai_strategy_failure_is_explicit(knowledge):
    outcome = await make_step(model=FunctionModel(failing_model)).ai_contextual_strategy(
        make_email(), "Wants a demo.", knowledge, []
    )

    assert outcome.success is False
    assert outcome.suggestion is None
    assert "model overloaded" in outcome.error


# ===================================================================
# TESTS - Synthesis
# ===================================================================

@pytest.mark.asyncio
async def test_synthesize_orders_template_ai_quick(knowledge):
    email = make_email(subject="Demo - thank you", body="Thanks for the call!")

    replies = await make_step().synthesize(email, "Wants a demo.", knowledge, [make_template(0.85)])

    assert [r.id.split("_")[0] for r in replies] == ["template", "ai", "quick"]
    assert replies[2].metadata.category == "acknowledgment"
    assert replies[2].metadata.tone == "friendly"
    assert replies[2].metadata.action_required is False


@pytest.mark.asyncio
async def test_synthesize_emits_at_most_one_quick_reply(knowledge):
    email = make_email(subject="Thank you", body="Please confirm the booking.")

    replies = await make_step().synthesize(email, "Thanks.", knowledge, [])
    quick = [r for r in replies if r.id.startswith("quick_")]

    assert len(quick) == 1
    assert quick[0].confidence == 0.9


@pytest.mark.asyncio
async def test_synthesize_raises_when_ai_fails(knowledge):
    step = make_step(model=FunctionModel(failing_model))

    with pytest.raises(ExternalAPIError):
        await step.synthesize(make_email(), "Wants a demo.", knowledge, [make_template(0.9)])


@pytest.mark.asyncio
async def test_execute_populates_suggestions(knowledge):
    pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=make_email())
    pipeline_data.search_query = "Demo request Can you show me the product? Wants a demo."
    pipeline_data.knowledge_results = knowledge
    pipeline_data.template_results = [make_template(0.6)]

    result = await make_step().execute(pipeline_data)

    assert result.success is True
    assert pipeline_data.state == PipelineState.SYNTHESIZING
    assert pipeline_data.metadata["strategies"] == ["ai_contextual"]
    assert len(pipeline_data.suggestions) == 1


@pytest.mark.asyncio
async def test_execute_reports_failure_when_ai_fails(knowledge):
    pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=make_email(subject="Thank you"))
    pipeline_data.search_query = "Thank you"
    pipeline_data.knowledge_results = knowledge
    pipeline_data.template_results = [make_template(0.9)]

    result = await make_step(model=FunctionModel(failing_model)).execute(pipeline_data)

    assert result.success is False
    assert "ai_contextual strategy failed" in result.error
    assert pipeline_data.suggestions == []


@pytest.mark.asyncio
async def test_execute_requires_search_query(knowledge):
    pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=make_email())

    with pytest.raises(StepExecutionError):
        await make_step().execute(pipeline_data)


@pytest.mark.asyncio
async def test_execute_records_every_producing_strategy(knowledge):
    email = make_email(subject="Demo - thank you", body="Thanks for the call!")
    pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=email)
    pipeline_data.search_query = "Demo - thank you Thanks for the call!"
    pipeline_data.knowledge_results = knowledge
    pipeline_data.template_results = [make_template(0.85)]

    result = await make_step().execute(pipeline_data)

    assert result.success is True
    assert pipeline_data.metadata["strategies"] == ["template", "ai_contextual", "quick_response"]
    assert result.metadata["suggestion_count"] == 3


@pytest.mark.asyncio
async def test_execute_goes_through_synthesize(knowledge, monkeypatch):
    step = make_step()

    async def exploding_synthesize(*args, **kwargs):
        raise ExternalAPIError("ai_contextual strategy failed: upstream down")

    monkeypatch.setattr(step, "synthesize", exploding_synthesize)

    pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=make_email())
    pipeline_data.search_query = "Demo request"
    pipeline_data.knowledge_results = knowledge

    result = await step.execute(pipeline_data)

    assert result.success is False
    assert result.error == "ai_contextual strategy failed: upstream down"
    assert pipeline_data.suggestions == []
