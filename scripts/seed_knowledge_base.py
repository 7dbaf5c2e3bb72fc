#!/usr/bin/env python3
"""
Knowledge base helper script.
Creates the vector schema, seeds the default catalog and prints statistics.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

# Add project root to Python path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from config import settings
from observability.logfire_config import LogfireConfig
from services.embeddings import EmbeddingProvider
from services.knowledge_store import KnowledgeStore


async def connect() -> KnowledgeStore:
    """Initialize the store; exits if the vector database is unreachable."""
    store = KnowledgeStore(EmbeddingProvider())
    await store.initialize()

    if not store.is_connected:
        print("Error: vector store is not reachable (check DB_HOST / DB_PORT / DB_NAME)")
        sys.exit(1)

    return store


async def seed():
    """Seed the knowledge base if it is empty."""
    store = await connect()

    # initialize() already seeds an empty store; this reports whether anything was left to do
    if await store.seed():
        print("✓ Knowledge base seeded")
    else:
        print("✓ Knowledge base already populated, nothing to seed")

    await show_stats(store)


async def show_stats(store: Optional[KnowledgeStore] = None):
    """Print collection counts."""
    store = store or await connect()
    stats = await store.stats()

    print("Knowledge base statistics:")
    print(f"  status:          {stats.status}")
    print(f"  knowledge items: {stats.knowledge_items}")
    print(f"  reply templates: {stats.reply_templates}")
    print(f"  embedding model: {store.embedding_provider.model}")
    print(f"  fallback embeddings used: {store.embedding_provider.fallback_embeddings}")


def main():
    """Main CLI entrypoint."""
    if len(sys.argv) < 2:
        print("Knowledge Base Helper")
        print("\nUsage:")
        print("  python scripts/seed_knowledge_base.py seed    - Create schema and seed if empty")
        print("  python scripts/seed_knowledge_base.py stats   - Show collection counts")
        sys.exit(1)

    LogfireConfig.initialize(token=settings.logfire_token)

    cmd = sys.argv[1].lower()

    try:
        if cmd == "seed":
            asyncio.run(seed())
        elif cmd == "stats":
            asyncio.run(show_stats())
        else:
            print(f"Unknown command: {cmd}")
            sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
