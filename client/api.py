import logging
from typing import Any, Optional

import httpx

from client.session import SessionContext

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request failed; message is safe to show to the user"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """
    Thin wrapper around the task manager REST API

    Args:
        base_url: Server root, e.g. "http://localhost:3000"
        session: Signed-in session whose token is sent as a bearer header
        http: Pre-built httpx client (its base_url is used as-is)
    """

    def __init__(self, base_url: str = "", session: Optional[SessionContext] = None,
                 http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(base_url=base_url)
        self.session = session or SessionContext()

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, json: Any = None,
                 auth: bool = True) -> dict:
        headers = self.session.auth_headers() if auth else {}
        try:
            response = self.http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError("Could not reach the server") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error or not data.get("success", False):
            message = data.get("message") or f"Request failed ({response.status_code})"
            raise ApiError(message, response.status_code)
        return data

    # -- user --

    def register(self, name: str, email: str, password: str) -> dict:
        data = self._request(
            "POST", "/api/user/register",
            json={"name": name, "email": email, "password": password},
            auth=False,
        )
        return data["user"]

    def login(self, email: str, password: str) -> dict:
        """Returns {"token": ..., "user": {...}}"""
        data = self._request(
            "POST", "/api/user/login",
            json={"email": email, "password": password},
            auth=False,
        )
        return {"token": data["token"], "user": data["user"]}

    def me(self) -> dict:
        return self._request("GET", "/api/user/me")["user"]

    # -- tasks --

    def list_tasks(self) -> list:
        return self._request("GET", "/api/tasks")["tasks"]

    def create_task(self, fields: dict) -> dict:
        return self._request("POST", "/api/tasks", json=fields)["task"]

    def update_task(self, task_id: str, fields: dict) -> dict:
        return self._request("PUT", f"/api/tasks/{task_id}", json=fields)["task"]

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/api/tasks/{task_id}")

    def toggle_complete(self, task_id: str) -> dict:
        return self._request("PATCH", f"/api/tasks/{task_id}/complete")["task"]
