"""
Client for the optional remote narrative endpoint.

The endpoint accepts a dataset summary plus a few sample rows and returns
free-text insights produced by a language model. The local profiler is the
primary source of insights; this is an alternative, less deterministic path.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import requests

from core.dataset import Dataset, json_safe_rows
from core.insights import Insight

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 5
FALLBACK_TEXT = "Could not generate insights."


class NarrativeServiceError(RuntimeError):
    """Raised when the narrative endpoint is unreachable or misbehaves."""


def build_summary(insight: Insight) -> str:
    """Compose the plain-text dataset summary sent with the prompt."""
    if insight.is_empty:
        return "No data found in file. Please check the file format."

    parts = [
        f"The dataset has {insight.row_count} rows and {insight.column_count} columns.",
        "Detected columns: " + ", ".join(insight.column_types) + ".",
    ]
    for column, ctype in insight.column_types.items():
        stats = insight.column_stats.get(column)
        unique = stats.unique_count if stats else 0
        parts.append(
            f'Column "{column}" has {unique} unique values and appears to be {ctype}.'
        )
    return " ".join(parts)


class NarrativeClient:
    """Thin wrapper around the narrative HTTP endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not url:
            raise ValueError("Narrative endpoint URL is required")
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()

    def generate(self, summary: str, preview: Sequence[Dict[str, Any]]) -> str:
        """
        Request free-text insights for a dataset.

        Args:
            summary: Dataset summary string
            preview: A small sample of rows

        Returns:
            Insight text from the endpoint

        Raises:
            NarrativeServiceError: Network failure, HTTP error or bad payload
        """
        payload = {"summary": summary, "preview": list(preview)}
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.error("Narrative endpoint request failed: %s", exc)
            raise NarrativeServiceError(f"Narrative endpoint request failed: {exc}") from exc
        except ValueError as exc:
            logger.error("Narrative endpoint returned invalid JSON: %s", exc)
            raise NarrativeServiceError("Narrative endpoint returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise NarrativeServiceError("Narrative endpoint returned an unexpected payload")
        if body.get("error"):
            raise NarrativeServiceError(f"Narrative endpoint error: {body['error']}")

        return body.get("insights") or FALLBACK_TEXT

    def generate_for(self, insight: Insight, dataset: Dataset) -> str:
        return self.generate(build_summary(insight), json_safe_rows(dataset, PREVIEW_ROWS))
