"""gapscope - Claude client for AI-estimated gap analysis."""

from .client import ClaudeClient, CompletionResponse, TokenUsage

__all__ = [
    "ClaudeClient",
    "CompletionResponse",
    "TokenUsage",
]
