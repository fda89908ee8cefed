"""Python Client for the AulaGuard service.

This module provides a high-level interface for interacting with the
AulaGuard API. It handles authentication headers and error parsing, so
callers only deal with plain strings and dictionaries.

Typical Usage:
    client = AulaGuardClient(base_url="http://localhost:8000")
    safe = client.sanitize('<p onclick="steal()">Hola</p>')
"""

import os
import requests
from typing import Dict, List, Any, Optional

class AulaGuardError(Exception):
    """Base exception for all client-side AulaGuard errors."""
    pass

class AulaGuardAPIError(AulaGuardError):
    """Exception raised when the API returns an error response (4xx or 5xx).

    Attributes:
        message (str): The error description.
        status_code (int): The HTTP status code returned by the API.
    """
    def __init__(self, message, status_code):
        super().__init__(f"{message} (Status: {status_code})")
        self.status_code = status_code

class AulaGuardClient:
    """A synchronous client wrapper for the AulaGuard REST API."""

    def __init__(self, base_url: str = None, api_key: str = None, timeout: float = 10.0):
        """Initializes the client with connection details.

        Args:
            base_url (str, optional): The root URL of the AulaGuard service.
                Defaults to the AULAGUARD_URL env var or "http://localhost:8000".
            api_key (str, optional): Sent as `X-API-Key` when set.
                Defaults to the AULAGUARD_API_KEY env var.
            timeout (float, optional): Per-request timeout in seconds.

        Raises:
            AulaGuardError: If the base_url resolves to an empty string.
        """
        self.base_url = (base_url or os.getenv("AULAGUARD_URL", "http://localhost:8000")).rstrip("/")
        self.api_key = api_key or os.getenv("AULAGUARD_API_KEY")
        self.timeout = timeout

        if not self.base_url:
            raise AulaGuardError("AulaGuard Base URL is required. Set AULAGUARD_URL env var.")

    def _get_headers(self) -> Dict[str, str]:
        headers = {}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    def _handle_error(self, resp: requests.Response):
        """Raises a structured exception for failed responses.

        The FastAPI `detail` field is used as the message when the body
        carries one, falling back to the raw text.

        Raises:
            AulaGuardAPIError: If the status code indicates failure (4xx/5xx).
        """
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            try:
                error_detail = resp.json().get("detail", str(e))
            except Exception:
                error_detail = resp.text or str(e)

            raise AulaGuardAPIError(error_detail, resp.status_code) from e

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(
                method, url, json=body, headers=self._get_headers(), timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise AulaGuardError(f"Connection Failed: {e}") from e

        self._handle_error(resp)
        return resp.json()

    def health(self) -> Dict[str, Any]:
        """Returns the service health document."""
        return self._request("GET", "/health")

    def sanitize(self, html: Optional[str]) -> str:
        """Sanitizes a rich-text fragment.

        Args:
            html (Optional[str]): Untrusted HTML. None is sent as null and
                comes back as an empty string.

        Returns:
            str: Markup safe to render.
        """
        return self._request("POST", "/sanitize", {"html": html})["html"]

    def strip_markup(self, text: Optional[str]) -> str:
        """Removes markup from a plain-text field."""
        return self._request("POST", "/sanitize/text", {"text": text})["text"]

    def clean_payload(self, payload: Dict[str, Any], fields: List[str] = None) -> Dict[str, Any]:
        """Sanitizes the rich-text fields of a record.

        Args:
            payload (Dict[str, Any]): The record, possibly nested.
            fields (List[str], optional): Keys holding rich text. All string
                values are sanitized when omitted.

        Returns:
            Dict[str, Any]: The sanitized copy of the record.
        """
        body = {"payload": payload, "fields": fields}
        return self._request("POST", "/sanitize/payload", body)["payload"]

    def render_document(
        self,
        sections: List[Dict[str, Any]],
        academy: Dict[str, Any],
        student: Dict[str, Any] = None,
    ) -> List[Dict[str, str]]:
        """Renders academy document sections.

        Args:
            sections (List[Dict[str, Any]]): Items with `title` and `text`.
            academy (Dict[str, Any]): Academy profile fields.
            student (Dict[str, Any], optional): Student fields, including
                `tutors`.

        Returns:
            List[Dict[str, str]]: Items with a plain `title` and sanitized `html`.

        Raises:
            AulaGuardAPIError: With status 503 if document rendering is
                disabled on the server.
        """
        body = {"sections": sections, "academy": academy, "student": student}
        return self._request("POST", "/documents/render", body)["sections"]
