"""LawnCare Pro API client.

This module defines a small client wrapper around the LawnCare Pro REST
API.  It covers the calls made by the web forms (sign-up, sign-in,
plan type lookup, plan creation) and the plan and step operations.  The
client uses the ``requests`` library internally.

Every high-level method returns a tuple ``(data, error)``: on success
``error`` is ``None``; on failure ``data`` is ``None`` (or an empty
list) and ``error`` is a dictionary with ``status_code`` and
``message``.

After :meth:`LawnCareAPI.sign_in` succeeds, the returned token is kept
and sent as ``Authorization: Bearer <token>`` on subsequent calls.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class LawnCareAPI:
    """Client for interacting with the LawnCare Pro API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        api_prefix: str = "/api",
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            token: Optional bearer token from a previous sign-in.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            api_prefix: Path prefix the API is mounted under.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + api_prefix
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user: Optional[Dict[str, Any]] = None

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/plans/1``).
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("error") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _require_user(self) -> Optional[Dict[str, Any]]:
        if self.user is None:
            return {"status_code": None, "message": "You must be logged in"}
        return None

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def sign_up(self, username: str, password: str, confirm_password: Optional[str] = None) -> Result:
        """Register a new account.

        When ``confirm_password`` is given it must match ``password``;
        the request is not sent otherwise.
        """
        if confirm_password is not None and confirm_password != password:
            return None, {"status_code": None, "message": "Passwords don't match"}
        return self._request("POST", "/auth/sign-up", json_body={"username": username, "password": password})

    def sign_in(self, username: str, password: str) -> Result:
        """Sign in and remember the token and user for later calls."""
        data, error = self._request("POST", "/auth/sign-in", json_body={"username": username, "password": password})
        if error:
            return None, error
        self.token = data["token"]
        self.user = data["user"]
        return data, None

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------
    def list_grass_species(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/grass-species/")
        if error:
            return [], error
        return data or [], None

    def establishment_types(self, grass_species_id: int) -> Tuple[List[str], Optional[Dict[str, Any]]]:
        """Establishment types offered for a new lawn of the given species."""
        data, error = self._request("GET", f"/grass-species/{grass_species_id}/plan-types")
        if error:
            return [], error
        types = [
            item["establishmentType"]
            for item in data or []
            if item.get("planType") == "new_lawn" and item.get("establishmentType")
        ]
        return types, None

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------
    def create_plan(
        self, grass_species_id: int, plan_type: str, establishment_type: Optional[str] = None
    ) -> Result:
        error = self._require_user()
        if error:
            return None, error
        payload = {
            "grassSpeciesId": grass_species_id,
            "planType": plan_type,
            "establishmentType": establishment_type,
        }
        return self._request("POST", "/plans/new", json_body=payload)

    def get_plan(self, plan_id: int) -> Result:
        return self._request("GET", f"/plans/{plan_id}")

    def list_plans(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """All plans of the signed-in user."""
        error = self._require_user()
        if error:
            return [], error
        data, error = self._request("GET", f"/users/{self.user['userId']}/plans")
        if error:
            return [], error
        return data or [], None

    def update_plan(self, plan_id: int, plan: Dict[str, Any]) -> Result:
        """Send a full plan (camelCase keys, including ``steps``) back to the server."""
        return self._request("PUT", f"/plans/{plan_id}", json_body=plan)

    def complete_plan(self, plan_id: int) -> Result:
        return self._request("PUT", f"/plans/{plan_id}/complete")

    def delete_plan(self, plan_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/plans/{plan_id}")
        return error is None, error

    def save_plan(self, plan_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        error = self._require_user()
        if error:
            return False, error
        _, error = self._request("POST", f"/users/{self.user['userId']}/plans", json_body={"planId": plan_id})
        return error is None, error

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def add_step(self, plan_id: int, step_description: str, due_date: date) -> Result:
        payload = {"stepDescription": step_description, "dueDate": due_date.isoformat()}
        return self._request("POST", f"/plans/{plan_id}/steps", json_body=payload)

    def complete_step(
        self, plan_id: int, step_id: int, completed: bool = True, completed_at: Optional[datetime] = None
    ) -> Result:
        payload = {
            "completed": completed,
            "completedAt": completed_at.isoformat() if completed_at else None,
        }
        return self._request("PUT", f"/plans/{plan_id}/steps/{step_id}", json_body=payload)

    def delete_step(self, plan_id: int, step_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/plans/{plan_id}/steps/{step_id}")
        return error is None, error
