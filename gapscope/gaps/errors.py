"""
Gap analysis exceptions.

Strategy-level failures are caught by the strategy selector; callers only
see AllStrategiesExhausted when nothing produced results.
"""

from typing import List, Optional, Tuple


class GapAnalysisError(Exception):
    """Base exception for keyword gap analysis."""


class InvalidDomainInput(GapAnalysisError):
    """Empty or unparseable domain string."""


class NoKeywordData(GapAnalysisError):
    """No keyword data to analyze."""


class ProviderUnavailable(GapAnalysisError):
    """A provider call failed, timed out or is not configured."""
    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class MalformedProviderResponse(GapAnalysisError):
    """Provider response failed schema validation."""
    def __init__(self, message: str, payload: object = None):
        super().__init__(message)
        self.payload = payload


class AllStrategiesExhausted(GapAnalysisError):
    """Every strategy failed or returned no gaps."""
    def __init__(self, failures: List[Tuple[str, str]]):
        self.failures = list(failures)
        details = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
        super().__init__(f"All keyword gap strategies failed ({details or 'none configured'})")
