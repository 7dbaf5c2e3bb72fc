"""Root conftest.py for pytest configuration.

This file configures pytest for the entire project, ensuring:
- Proper Python path setup for imports
- Logfire observability configuration
- Shared fixtures across all tests
- Async test support
"""

import sys
from pathlib import Path

import logfire
import pytest
import pytest_asyncio


# ============================================================================
# Python Path Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings and ensure project root is in sys.path."""

    # Add project root to sys.path to ensure 'pipeline' package is importable
    project_root = Path(__file__).parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    # Register custom markers
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (FastAPI app, no external services)"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests (fast, no external dependencies)"
    )

    # Configure logfire for all tests; nothing leaves the machine
    logfire.configure(
        service_name="onebox_reply_assistant_tests",
        environment="test",
        send_to_logfire=False,
        console=False,
    )

    logfire.info(
        "Starting test suite",
        project_root=str(project_root),
    )


def pytest_sessionfinish(session, exitstatus):
    """Log test session completion with summary statistics."""
    logfire.info(
        "Test suite completed",
        exit_status=exitstatus,
        tests_collected=session.testscollected,
        tests_failed=session.testsfailed,
    )


# ============================================================================
# Shared Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return the absolute path to the project root directory."""
    return Path(__file__).parent.resolve()


@pytest.fixture(scope="session")
def pipeline_root(project_root):
    """Return the absolute path to the pipeline package directory."""
    return project_root / "pipeline"


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Fixture to mock environment variables for testing.

    Usage:
        def test_something(mock_env_vars):
            mock_env_vars({"API_KEY": "test-key", "DEBUG": "true"})
    """
    def _set_env_vars(env_dict: dict):
        for key, value in env_dict.items():
            monkeypatch.setenv(key, value)

    return _set_env_vars


# ============================================================================
# Knowledge Store Fixtures
# ============================================================================

class InMemoryCollection:
    """
    Vector collection kept in a list, ranked by cosine distance.

    `fail=True` makes every query raise, for exercising search fallbacks.
    """

    def __init__(self, name, embed, fail=False):
        self.name = name
        self.embed = embed
        self.fail = fail
        self.rows = []

    async def add(self, doc_id, document, metadata):
        embedding = await self.embed(document)
        self.rows.append((doc_id, document, dict(metadata), embedding))

    async def query(self, text, limit):
        from services.knowledge_store import CollectionHit

        if self.fail:
            raise ConnectionError("vector store went away")

        query_embedding = await self.embed(text)
        hits = []
        for _, document, metadata, embedding in self.rows:
            dot = sum(a * b for a, b in zip(query_embedding, embedding))
            hits.append(CollectionHit(document=document, metadata=metadata, distance=1.0 - dot))

        hits.sort(key=lambda hit: hit.distance)
        return hits[:limit]

    async def count(self):
        return len(self.rows)


@pytest.fixture
def embedding_provider():
    """Embedding provider with no API key: always the local fallback embedding."""
    from services.embeddings import EmbeddingProvider

    return EmbeddingProvider(api_key="", dimensions=64)


@pytest.fixture
def make_store(embedding_provider):
    """Factory for knowledge stores backed by in-memory collections.

    Usage:
        store = make_store()                  # connects on initialize()
        store = make_store(reachable=False)   # initialize() -> disconnected
    """
    from services.knowledge_store import KnowledgeStore

    def _make_store(reachable: bool = True, fail_queries: bool = False):
        def schema_initializer():
            if not reachable:
                raise ConnectionError("could not connect to server")

        embed = embedding_provider.embed
        return KnowledgeStore(
            embedding_provider=embedding_provider,
            knowledge_collection=InMemoryCollection("knowledge_base", embed, fail=fail_queries),
            templates_collection=InMemoryCollection("reply_templates", embed, fail=fail_queries),
            schema_initializer=schema_initializer,
        )

    return _make_store


@pytest_asyncio.fixture
async def disconnected_store(make_store):
    """Initialized store whose database was unreachable."""
    store = make_store(reachable=False)
    await store.initialize()
    return store


# ============================================================================
# Async Test Configuration
# ============================================================================

@pytest.fixture(scope="session")
def event_loop_policy():
    """Set the event loop policy for async tests."""
    import asyncio
    return asyncio.DefaultEventLoopPolicy()
