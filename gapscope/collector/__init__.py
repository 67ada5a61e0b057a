"""
gapscope - Data Collection Package

DataForSEO transport used by the gap strategies:
- Ranked keywords (merge-step input)
- Domain intersection (provider-side gap rows)
"""

from .client import DataForSEOClient, DataForSEOError, RetryConfig, safe_get_result

__all__ = [
    "DataForSEOClient",
    "DataForSEOError",
    "RetryConfig",
    "safe_get_result",
]
