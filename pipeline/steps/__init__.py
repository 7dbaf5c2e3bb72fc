"""Pipeline steps package.

This package contains all the individual steps in the reply suggestion pipeline:
- intent_classifier: Describes what the sender wants in one sentence
- knowledge_retrieval: Finds related knowledge snippets and reply templates
- reply_synthesizer: Builds the ordered list of suggested replies
"""
