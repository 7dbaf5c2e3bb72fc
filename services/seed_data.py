"""
Seed catalog and static fallbacks for the knowledge store.

SEED_* entries populate an empty vector store on first connection.
FALLBACK_* entries are served, with fixed similarity scores, when the
vector store is unreachable.
"""

from typing import List

from schemas.knowledge import (
    KnowledgeItem,
    KnowledgeMatch,
    KnowledgeMetadata,
    ReplyTemplate,
    TemplateMatch,
)


PRODUCT_OVERVIEW = (
    "Our AI-powered email management platform OneBox-AI helps businesses organize, "
    "classify, and respond to emails intelligently using machine learning."
)
PRODUCT_FEATURES = (
    "Key features: Multi-account IMAP sync, AI email classification, Elasticsearch "
    "integration, webhook notifications, modern React frontend, dark/light themes."
)
TECHNICAL_SPECS = (
    "Technical stack: FastAPI, Python, React 18, Elasticsearch, OpenAI, "
    "Postgres with pgvector for vector search."
)

INTERVIEW_TEMPLATE = (
    "Thank you for your interest in my application! I'm excited about the opportunity "
    "to discuss how I can contribute to your team. You can schedule a convenient time "
    "for our interview here: {{meeting_link}}"
)
COLLABORATION_TEMPLATE = (
    "I'd be happy to discuss the collaboration opportunity! Please find my available "
    "slots for a meeting: {{meeting_link}}"
)
DEMO_TEMPLATE = (
    "Thank you for your interest in {{product_name}}! I'd be delighted to show you how "
    "our AI-powered email management platform can streamline your workflow. You can "
    "book a demo session here: {{meeting_link}}"
)
SUPPORT_TEMPLATE = (
    "Hi {{sender_name}}, I'd be happy to help you with your technical question about "
    "{{product_name}}. Let's schedule a quick call to discuss your specific needs: "
    "{{meeting_link}}"
)


SEED_KNOWLEDGE: List[KnowledgeItem] = [
    KnowledgeItem(
        content=PRODUCT_OVERVIEW,
        category="product_overview",
        metadata=KnowledgeMetadata(
            type="product",
            tags=["AI", "email", "management", "automation"],
            priority=1,
        ),
    ),
    KnowledgeItem(
        content=PRODUCT_FEATURES,
        category="product_features",
        metadata=KnowledgeMetadata(
            type="product",
            tags=["features", "IMAP", "AI", "frontend"],
            priority=1,
        ),
    ),
    KnowledgeItem(
        content=TECHNICAL_SPECS,
        category="technical_specs",
        metadata=KnowledgeMetadata(
            type="product",
            tags=["tech stack", "Python", "React", "AI"],
            priority=2,
        ),
    ),
]

SEED_TEMPLATES: List[ReplyTemplate] = [
    ReplyTemplate(
        scenario="Job application follow-up when interviewer shows interest",
        template=INTERVIEW_TEMPLATE,
        variables=["meeting_link"],
        category="job_interview",
    ),
    ReplyTemplate(
        scenario="Meeting request response for project collaboration",
        template=COLLABORATION_TEMPLATE,
        variables=["meeting_link", "project_name"],
        category="collaboration",
    ),
    ReplyTemplate(
        scenario="Product demo request from potential client",
        template=DEMO_TEMPLATE,
        variables=["meeting_link", "product_name"],
        category="sales_demo",
    ),
    ReplyTemplate(
        scenario="Technical support inquiry response",
        template=SUPPORT_TEMPLATE,
        variables=["meeting_link", "product_name", "sender_name", "issue_type"],
        category="technical_support",
    ),
]


# Fixed scores, ranked by position. Template scores stay at or below the
# template strategy's 0.7 gate: a static list is not a semantic match.
FALLBACK_KNOWLEDGE: List[KnowledgeMatch] = [
    KnowledgeMatch(
        content=PRODUCT_OVERVIEW,
        metadata={"type": "product", "tags": ["AI", "email", "management"], "priority": 1},
        similarity=0.8,
    ),
    KnowledgeMatch(
        content=PRODUCT_FEATURES,
        metadata={"type": "product", "tags": ["features", "IMAP", "AI"], "priority": 1},
        similarity=0.7,
    ),
    KnowledgeMatch(
        content=TECHNICAL_SPECS,
        metadata={"type": "product", "tags": ["tech stack", "Python", "React"], "priority": 2},
        similarity=0.6,
    ),
]

FALLBACK_TEMPLATES: List[TemplateMatch] = [
    TemplateMatch(
        scenario="Job application follow-up when interviewer shows interest",
        template=INTERVIEW_TEMPLATE,
        variables=["meeting_link"],
        category="job_interview",
        similarity=0.7,
    ),
    TemplateMatch(
        scenario="Product demo request from potential client",
        template=DEMO_TEMPLATE,
        variables=["meeting_link", "product_name"],
        category="sales_demo",
        similarity=0.6,
    ),
]
