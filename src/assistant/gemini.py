"""Gemini client producing the external analysis that is merged with the baseline"""

import json
import logging
import os
import re

import requests

from config import GEMINI_CONFIG
from power_analytics.models import WaveformBatch

from .prompts import build_analysis_prompt, build_decision_prompt
from .retry import AnalysisError, post_with_retry

logger = logging.getLogger(__name__)

_JSON_PATTERNS = {
    "{": re.compile(r"\{[\s\S]*\}"),
    "[": re.compile(r"\[[\s\S]*\]"),
}


def extract_json(text: str, opener: str = "{"):
    """
    Parse the outermost JSON object ("{") or array ("[") embedded in model text.

    Raises:
        AnalysisError: no parsable JSON block found
    """
    match = _JSON_PATTERNS[opener].search(text or "")
    if not match:
        raise AnalysisError("No JSON found in Gemini response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error("JSON parse error: %s", e)
        raise AnalysisError("Failed to parse JSON from Gemini response") from e


class GeminiClient:
    """Calls the Gemini generateContent endpoint"""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = GEMINI_CONFIG["model"],
        session: requests.Session | None = None,
        max_attempts: int = GEMINI_CONFIG["max_attempts"],
        base_delay: float = GEMINI_CONFIG["base_delay"],
        timeout: float = GEMINI_CONFIG["timeout"],
    ):
        self.api_key = api_key or os.environ.get(GEMINI_CONFIG["api_key_env"])
        if not self.api_key:
            raise AnalysisError(f"{GEMINI_CONFIG['api_key_env']} is not configured")
        self.model = model
        self.session = session or requests.Session()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout

    @property
    def url(self) -> str:
        endpoint = GEMINI_CONFIG["endpoint"].format(model=self.model)
        return f"{endpoint}?key={self.api_key}"

    def generate(self, prompt: str, generation_config: dict) -> str:
        """Send one prompt and return the text of the first candidate"""
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        response = post_with_retry(
            self.session,
            self.url,
            payload,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            timeout=self.timeout,
        )

        if not response.ok:
            logger.error("Gemini API error: %s %s", response.status_code, response.text)
            raise AnalysisError(
                f"Gemini API request failed: {response.status_code} {response.reason}"
            )

        try:
            result = response.json()
            return result["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Invalid Gemini response: %s", response.text)
            raise AnalysisError("Invalid response from Gemini API") from e

    def analyze(self, batch: WaveformBatch, mode: str = "waveform") -> dict:
        """
        Request the external analysis for a waveform batch.

        Returns:
            Parsed JSON object (untrusted, to be merged with the baseline)
        """
        text = self.generate(
            build_analysis_prompt(batch, mode), GEMINI_CONFIG["analysis_generation"]
        )
        analysis = extract_json(text, "{")
        if not isinstance(analysis, dict):
            raise AnalysisError("Gemini analysis is not a JSON object")
        return analysis

    def generate_decisions(self, results: dict, category: str = "technical") -> list[dict]:
        """
        Suggest 2-3 decisions for the given analysis results.

        Returns:
            List of {title, description, priority, reasoning} dictionaries
        """
        text = self.generate(
            build_decision_prompt(results, category), GEMINI_CONFIG["decision_generation"]
        )
        decisions = extract_json(text, "[")
        if not isinstance(decisions, list):
            raise AnalysisError("Gemini decisions are not a JSON array")
        return [decision for decision in decisions if isinstance(decision, dict)]
