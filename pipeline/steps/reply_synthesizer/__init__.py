"""
Reply Synthesizer Step

Builds template, AI-contextual and quick-response suggestions.
"""

from .main import ReplySynthesizerStep

__all__ = ["ReplySynthesizerStep"]
