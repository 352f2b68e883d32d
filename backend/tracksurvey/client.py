# tracksurvey/client.py
"""
HTTP client for the survey API, used by the survey session and by admin
tooling that pulls results.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from tracksurvey.services.catalog import Track

logger = logging.getLogger(__name__)


class SubmissionError(RuntimeError):
    """The server did not accept the submission."""


class SurveyClient:
    def __init__(self,
                 base_url: str = "http://localhost:8000",
                 timeout: float = 10.0,
                 http: Optional[httpx.Client] = None):
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self) -> "SurveyClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def tracks(self) -> List[Track]:
        res = self._http.get("/api/tracks")
        res.raise_for_status()
        return [Track.model_validate(t) for t in res.json()]

    def submit(self, responses: Mapping[Any, Mapping[str, Any]]) -> Dict[str, Any]:
        """POST the full answer set. Track ids become string keys on the wire."""
        payload = {str(tid): dict(answers) for tid, answers in responses.items()}
        try:
            res = self._http.post("/api/submit", json=payload)
        except httpx.HTTPError as e:
            logger.error("Submission request failed: %s", e)
            raise SubmissionError("Network error: the survey could not be submitted.") from e

        if res.is_error:
            logger.error("Submission rejected with %s: %s", res.status_code, res.text)
            raise SubmissionError(f"The survey could not be submitted (HTTP {res.status_code}).")
        return res.json()

    def results(self) -> List[Dict[str, Any]]:
        res = self._http.get("/api/results")
        res.raise_for_status()
        return res.json().get("submissions", [])
