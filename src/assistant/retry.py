"""Bounded retry with exponential backoff for rate-limited HTTP calls"""

import logging
import time

import requests

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429


class AnalysisError(RuntimeError):
    """External analysis could not be obtained"""


class QuotaExceededError(AnalysisError):
    """The service kept answering 429 after all retry attempts"""


def retry_delay_hint(response: requests.Response) -> float | None:
    """
    Read the RetryInfo.retryDelay hint (e.g. "12s") from a 429 error body.

    Returns:
        Delay in seconds, or None when the body carries no usable hint
    """
    try:
        body = response.json()
    except ValueError:
        return None

    details = body.get("error", {}).get("details", []) if isinstance(body, dict) else []
    for detail in details:
        if not isinstance(detail, dict) or "RetryInfo" not in str(detail.get("@type", "")):
            continue
        delay = str(detail.get("retryDelay", "")).rstrip("s")
        try:
            return float(delay)
        except ValueError:
            return None
    return None


def post_with_retry(
    session: requests.Session,
    url: str,
    payload: dict,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    timeout: float = 60.0,
    sleep=time.sleep,
) -> requests.Response:
    """
    POST a JSON payload, retrying on HTTP 429.

    The wait before attempt k+1 is the server's RetryInfo hint when present,
    else base_delay * 2**k. Any non-429 response is returned to the caller.

    Args:
        session: requests session
        url: Endpoint URL
        payload: JSON body
        max_attempts: Total number of attempts
        base_delay: Backoff base (s)
        timeout: Per-request timeout (s)
        sleep: Sleep function

    Returns:
        First non-429 response

    Raises:
        QuotaExceededError: every attempt was rate limited
        AnalysisError: the request failed at transport level
    """
    for attempt in range(max_attempts):
        try:
            response = session.post(url, json=payload, timeout=timeout)
        except requests.RequestException as e:
            raise AnalysisError(f"Request to analysis service failed: {e}") from e

        if response.status_code != TOO_MANY_REQUESTS:
            return response

        if attempt == max_attempts - 1:
            break

        hint = retry_delay_hint(response)
        delay = hint if hint is not None else base_delay * 2**attempt
        logger.warning("Quota hit (429). Retrying in %.1fs...", delay)
        sleep(delay)

    raise QuotaExceededError(f"Analysis service quota exceeded after {max_attempts} attempts")
