"""
Intent Classifier Step

Summarizes the incoming email's intent as one sentence using the chat model.
"""

from .main import IntentClassifierStep

__all__ = ["IntentClassifierStep"]
