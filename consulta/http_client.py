"""
http_client.py - HTTP Client
=============================
This module handles the HTTP communication behind a lookup:
- GET the published-sheet export (CSV/TSV text)
- POST the CPF to the backend API and read its JSON answer

Failures are not retried: each lookup makes exactly one request and any
error ends that query. Network errors are reported as status 0 with a
description in the body, so callers handle every outcome through the same
(status, content_type, body) tuple.
"""

import logging

import requests

from .config import Settings


logger = logging.getLogger(__name__)


class HttpClient:
    """
    HTTP client shared by the sheet and API sources.

    Usage:
        client = HttpClient(settings)
        status, content_type, body = client.get_text(settings.sheet_url)
        status, content_type, body = client.post_json("/consulta", {"cpf": "11122233344"})
        client.close()
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        # One Session per run, for connection pooling
        self.s = requests.Session()

        self.base = settings.api_base or ""
        self.timeout = settings.timeout_sec

    def _result(self, r: requests.Response):
        return (
            r.status_code,
            r.headers.get("content-type", ""),
            r.text or "",
        )

    def get_text(self, url: str):
        """
        GET an absolute URL and return its body as text.

        The Content-Type is returned but not checked; published sheets answer
        with text/csv, text/plain or even text/html depending on the export.

        Returns:
            A tuple (status_code, content_type, body). status_code is 0 on
            network failure, with the error description as body.
        """
        logger.debug(f"GET {url}")
        try:
            r = self.s.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"[Network Error] GET {url}: {type(e).__name__}")
            return 0, "", f"Network error: {type(e).__name__}: {e}"

        # requests guesses ISO-8859-1 for text/* without charset; the export is UTF-8
        if r.encoding is None or r.encoding.lower() == "iso-8859-1":
            r.encoding = "utf-8"

        logger.debug(f"[{r.status_code}] {len(r.text or '')} chars received")
        return self._result(r)

    def post_json(self, path: str, payload: dict):
        """
        POST a JSON payload to an API endpoint.

        Args:
            path: Endpoint path relative to the API base (e.g. "/consulta")
            payload: Request body, serialized as JSON

        Returns:
            A tuple (status_code, content_type, body), as get_text().
        """
        url = f"{self.base}{path}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}

        logger.debug(f"POST {url}")
        try:
            r = self.s.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"[Network Error] POST {url}: {type(e).__name__}")
            return 0, "", f"Network error: {type(e).__name__}: {e}"

        logger.debug(f"[{r.status_code}] POST {path}")
        return self._result(r)

    def close(self):
        """Close the HTTP session and release its connections."""
        self.s.close()
