"""
REST client for the project-management backend.

Thin wrapper over requests. Every call carries a timeout; failures are
raised as NetworkFailure subclasses carrying the most specific message
the backend offered.
"""

import logging

import requests

logger = logging.getLogger(__name__)

# Keys tried, in order, when pulling an error message out of a JSON body
ERROR_MESSAGE_KEYS = ("message", "error", "detail", "localizedMessage")


class NetworkFailure(Exception):
    """A backend request failed or could not be made."""

    def __init__(self, message: str, method: str = "", path: str = ""):
        self.method = method
        self.path = path
        super().__init__(message)


class RequestTimeout(NetworkFailure):
    """The backend did not answer within the configured timeout."""


class ApiError(NetworkFailure):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, method: str = "", path: str = "",
                 details: dict | None = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message, method, path)


def error_message(response) -> str:
    """Extract the most specific error message from a failed response."""
    fallback = f"HTTP {response.status_code}: {response.reason or 'error'}"
    text = (response.text or "").strip()
    if not text:
        return fallback

    try:
        data = response.json()
    except ValueError:
        return text

    if isinstance(data, dict):
        for key in ERROR_MESSAGE_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


class BackendClient:
    """JSON-over-HTTP access to tasks, user stories, sprints and history."""

    def __init__(self, base_url: str, token: str | None = None, timeout: float = 15,
                 session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, payload: dict | None = None):
        """Send a request and return the decoded JSON body (or None)."""
        url = self._url(path)
        logger.debug(f"[API] {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise RequestTimeout(
                f"Request timed out after {self.timeout}s: {method} {path}", method, path
            ) from None
        except requests.RequestException as e:
            raise NetworkFailure(
                f"Could not reach the backend at {self.base_url}: {e}", method, path
            ) from None

        if not response.ok:
            message = error_message(response)
            logger.warning(f"[API] {method} {path} failed ({response.status_code}): {message}")
            details = None
            try:
                body = response.json()
                details = body if isinstance(body, dict) else None
            except ValueError:
                pass
            raise ApiError(response.status_code, message, method, path, details)

        if response.status_code == 204 or not (response.text or "").strip():
            return None
        try:
            return response.json()
        except ValueError:
            # Some endpoints answer plain text on success
            return None

    # Tasks

    def get_task(self, task_id: str) -> dict:
        return self.request("GET", f"/tasks/{task_id}") or {}

    def update_task(self, task_id: str, payload: dict) -> dict:
        return self.request("PUT", f"/tasks/{task_id}", payload) or {}

    def create_task(self, payload: dict) -> dict:
        return self.request("POST", "/tasks", payload) or {}

    # User stories

    def create_user_story(self, payload: dict) -> dict:
        return self.request("POST", "/userStories", payload) or {}

    def delete_user_story(self, story_id: str) -> None:
        self.request("DELETE", f"/backlogs/{story_id}")

    # Project collections

    def list_project_tasks(self, project_id: str) -> list[dict]:
        return self.request("GET", f"/projects/{project_id}/tasks") or []

    def list_project_stories(self, project_id: str) -> list[dict]:
        return self.request("GET", f"/projects/{project_id}/userStories") or []

    def list_project_sprints(self, project_id: str) -> list[dict]:
        return self.request("GET", f"/projects/{project_id}/sprints") or []

    def get_project(self, project_id: str) -> dict:
        return self.request("GET", f"/projects/{project_id}") or {}

    # History

    def create_history_entry(self, project_id: str, payload: dict) -> dict:
        return self.request("POST", f"/projects/{project_id}/history", payload) or {}
