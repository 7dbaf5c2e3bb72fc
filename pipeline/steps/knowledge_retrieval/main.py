"""
Knowledge Retrieval Step - Step 2

Queries the knowledge store for related snippets and reply templates,
concurrently. Each search degrades to its own static fallback list inside
the store, so one side failing never blocks the other.
"""

import asyncio
import logfire

from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import PipelineState, ReplyPipelineData, StepResult
from services.knowledge_store import KnowledgeStore


class KnowledgeRetrievalStep(BasePipelineStep):
    """
    Step 2: Retrieve knowledge and templates relevant to the email.

    Updates ReplyPipelineData fields:
    - search_query: str
    - knowledge_results: List[KnowledgeMatch]
    - template_results: List[TemplateMatch]
    """

    def __init__(self, knowledge_store: KnowledgeStore, knowledge_limit: int = 3, template_limit: int = 2):
        super().__init__(step_name="knowledge_retrieval", state=PipelineState.RETRIEVING)

        self.knowledge_store = knowledge_store
        self.knowledge_limit = knowledge_limit
        self.template_limit = template_limit

    async def _execute_step(self, pipeline_data: ReplyPipelineData) -> StepResult:
        email = pipeline_data.email
        search_query = f"{email.subject} {email.body} {pipeline_data.intent}"
        pipeline_data.search_query = search_query

        knowledge_results, template_results = await asyncio.gather(
            self.knowledge_store.search_knowledge(search_query, self.knowledge_limit),
            self.knowledge_store.search_templates(search_query, self.template_limit),
        )

        pipeline_data.knowledge_results = knowledge_results
        pipeline_data.template_results = template_results

        top_template_similarity = template_results[0].similarity if template_results else None

        logfire.info(
            "Retrieved context",
            knowledge_count=len(knowledge_results),
            template_count=len(template_results),
            top_template_similarity=top_template_similarity,
            store_connected=self.knowledge_store.is_connected
        )

        warnings = []
        if not self.knowledge_store.is_connected:
            warnings.append("Knowledge store disconnected, static fallback context used")

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "knowledge_count": len(knowledge_results),
                "template_count": len(template_results),
                "top_template_similarity": top_template_similarity,
            },
            warnings=warnings
        )
