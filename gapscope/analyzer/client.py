"""
Claude API Client

Thin async wrapper around the Anthropic SDK used for AI-estimated gap
analysis, with token tracking and retry.
"""

import os
import asyncio
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass

import anthropic

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        """Estimate cost based on Claude Sonnet pricing ($3/1M in, $15/1M out)."""
        input_cost = (self.input_tokens / 1_000_000) * 3.0
        output_cost = (self.output_tokens / 1_000_000) * 15.0
        return input_cost + output_cost


@dataclass
class CompletionResponse:
    """Response from a Claude call."""
    content: str
    usage: TokenUsage
    model: str
    stop_reason: str
    success: bool = True
    error: Optional[str] = None


class ClaudeClient:
    """
    Async client for Claude.

    Usage:
        client = ClaudeClient(api_key="sk-ant-...")
        response = await client.complete_with_retry(prompt, system=system)
        if response.success:
            print(response.content)
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 8000
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        async_client: Optional[Any] = None,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to env var)
            model: Model to use
            async_client: Pre-built AsyncAnthropic client (tests)
        """
        self.model = model or self.DEFAULT_MODEL

        if async_client is None:
            api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not provided")
            async_client = anthropic.AsyncAnthropic(api_key=api_key)
        self.async_client = async_client

        self.total_usage = TokenUsage()
        self.call_count = 0

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ) -> CompletionResponse:
        """
        Send a prompt to Claude.

        Returns:
            CompletionResponse; success=False on API errors
        """
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self.async_client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return CompletionResponse(
                content="",
                usage=TokenUsage(),
                model=self.model,
                stop_reason="error",
                success=False,
                error=str(e),
            )

        content = "".join(
            block.text for block in response.content if hasattr(block, "text")
        )

        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        self.total_usage.input_tokens += usage.input_tokens
        self.total_usage.output_tokens += usage.output_tokens
        self.call_count += 1

        logger.info(
            f"Claude call: {usage.input_tokens} in, {usage.output_tokens} out, "
            f"${usage.estimated_cost:.4f}"
        )

        return CompletionResponse(
            content=content,
            usage=usage,
            model=self.model,
            stop_reason=response.stop_reason,
        )

    async def complete_with_retry(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_retries: int = 3,
        **kwargs,
    ) -> CompletionResponse:
        """Complete with exponential backoff on transient failures."""
        last_error = None

        for attempt in range(max_retries):
            response = await self.complete(prompt, system, **kwargs)
            if response.success:
                return response

            last_error = response.error
            if attempt < max_retries - 1:
                wait_time = 2 ** attempt
                logger.warning(
                    f"Claude call failed (attempt {attempt + 1}/{max_retries}), "
                    f"retrying in {wait_time}s: {response.error}"
                )
                await asyncio.sleep(wait_time)

        return CompletionResponse(
            content="",
            usage=TokenUsage(),
            model=self.model,
            stop_reason="max_retries",
            success=False,
            error=f"Max retries exceeded. Last error: {last_error}",
        )

    def get_usage_summary(self) -> Dict[str, Any]:
        """Get summary of all API usage."""
        return {
            "total_calls": self.call_count,
            "input_tokens": self.total_usage.input_tokens,
            "output_tokens": self.total_usage.output_tokens,
            "total_tokens": self.total_usage.total_tokens,
            "estimated_cost": self.total_usage.estimated_cost,
        }
