"""
Assistant module for the external (Gemini) power analysis.
"""

from .gemini import GeminiClient, extract_json
from .prompts import DECISION_CATEGORIES, PROCESSING_MODES
from .retry import AnalysisError, QuotaExceededError, post_with_retry

__all__ = [
    "GeminiClient",
    "extract_json",
    "DECISION_CATEGORIES",
    "PROCESSING_MODES",
    "AnalysisError",
    "QuotaExceededError",
    "post_with_retry",
]
