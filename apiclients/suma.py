"""
SUSE Manager (Uyuni) JSON-over-HTTP API Client
Handles cookie-session authentication and the system, system group and user calls
API Docs: https://documentation.suse.com/suma/5.0/api/suse-manager/index.html
"""

import os
import time
from typing import Any

import requests
import structlog

from apiclients.errors import ConfigurationError, DecodeError, NotFoundError, TransportError
from apiclients.models import (
    AddRemoveSystems,
    AuthRequest,
    CreateUser,
    DeleteSystemRequest,
    RemoveSystemGroup,
    RemoveUser,
    SystemIdentity,
    SystemNetwork,
)

logger = structlog.get_logger(__name__)

API_PREFIX = "/rhn/manager/api"
SESSION_COOKIE = "pxt-session-cookie"


def _redact(body: Any) -> Any:
    if isinstance(body, dict) and "password" in body:
        return {**body, "password": "***"}
    return body


class SumaClient:
    """Client for the SUSE Manager HTTP API"""

    def __init__(self, base_url: str | None = None, session_cookie: str = "", verbose: bool = False):
        """
        Initialize SUSE Manager API client

        Args:
            base_url: Server URL, e.g. https://suma.example.com (defaults to SUMA_URL env var)
            session_cookie: Value of an existing pxt-session-cookie, if already logged in
            verbose: Log every raw request and response
        """
        self.base_url = (base_url or os.getenv("SUMA_URL", "")).rstrip("/")
        self.verbose = verbose

        if not self.base_url:
            raise ConfigurationError("SUMA_URL environment variable or base_url parameter is required")

        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if session_cookie:
            self._set_session_cookie(session_cookie)

        # (connect timeout, read timeout)
        self.timeout = (5, 30)

        logger.debug("suma_client_initialized", base_url=self.base_url, verbose=verbose)

    @property
    def session_cookie(self) -> str:
        return self.session.cookies.get(SESSION_COOKIE) or ""

    def _set_session_cookie(self, value: str) -> None:
        # requests keeps one cookie per domain; a second one of the same name makes .get() ambiguous
        for cookie in [c for c in self.session.cookies if c.name == SESSION_COOKIE]:
            self.session.cookies.clear(cookie.domain, cookie.path, cookie.name)
        self.session.cookies.set(SESSION_COOKIE, value)

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Send one request below the API prefix

        Args:
            method: HTTP method (GET, POST)
            endpoint: API path below /rhn/manager/api (e.g., /system/getId)
            **kwargs: Additional arguments for requests

        Returns:
            The raw response, whatever its status

        Raises:
            TransportError: If no response could be obtained
        """
        url = f"{self.base_url}{API_PREFIX}{endpoint}"
        start_time = time.time()

        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("api_request_error", endpoint=endpoint, error_type=type(e).__name__, error=str(e))
            raise TransportError(f"Request failed: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        logger.debug("api_request_completed", endpoint=endpoint, status_code=response.status_code, duration_ms=duration_ms)

        if self.verbose:
            logger.info(
                "suma_api_exchange",
                method=method,
                url=url,
                params=kwargs.get("params"),
                request_body=_redact(kwargs.get("json")),
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    @staticmethod
    def _check_status(response: requests.Response, endpoint: str) -> None:
        if response.status_code != 200:
            logger.error("api_request_failed", endpoint=endpoint, status_code=response.status_code)
            raise TransportError(f"HTTP {response.status_code}: {response.text}", status_code=response.status_code)

    @staticmethod
    def _decode(response: requests.Response, endpoint: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {endpoint}: {e}", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected JSON document from {endpoint}", status_code=response.status_code)
        return data

    @staticmethod
    def _result_items(data: dict[str, Any], endpoint: str) -> list[dict[str, Any]]:
        """The ``result`` list of a listing call; every entry must be an object"""
        results = data.get("result") or []
        if not isinstance(results, list) or not all(isinstance(item, dict) for item in results):
            raise DecodeError(f"{endpoint} returned a malformed result list")
        return results

    def _get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._request("GET", endpoint, params=params)
        self._check_status(response, endpoint)
        return self._decode(response, endpoint)

    def _post(self, endpoint: str, payload: dict[str, Any]) -> int:
        """POST a JSON body to a call that only reports success through its status"""
        response = self._request("POST", endpoint, json=payload)
        self._check_status(response, endpoint)
        return response.status_code

    # ==================== Authentication ====================

    def login(self, username: str, password: str) -> str:
        """
        Exchange credentials for a session cookie

        A successful response without the session cookie is not an error:
        the empty string is returned and the caller decides what to do.

        Raises:
            TransportError: If the server does not answer with HTTP 200
        """
        endpoint = "/auth/login"
        response = self._request("POST", endpoint, json=AuthRequest(username, password).to_json())
        self._check_status(response, endpoint)

        cookie = response.cookies.get(SESSION_COOKIE)
        if not cookie:
            logger.warning("session_cookie_missing", base_url=self.base_url, cookie=SESSION_COOKIE)
            return ""

        self._set_session_cookie(cookie)
        logger.info("suma_login_succeeded", base_url=self.base_url, login=username)
        return cookie

    # ==================== Systems ====================

    def find_system(self, hostname: str) -> SystemIdentity:
        """
        Resolve a hostname to the first matching system

        Raises:
            NotFoundError: If no system carries that name
        """
        data = self._get_json("/system/getId", params={"name": hostname})
        results = self._result_items(data, "/system/getId")
        if not results:
            raise NotFoundError(f"System '{hostname}' not found")
        return SystemIdentity.from_json(results[0])

    def get_system_id(self, hostname: str) -> int:
        return self.find_system(hostname).id

    def get_system_network(self, system_id: int) -> SystemNetwork:
        data = self._get_json("/system/getNetworkForSystem", params={"sid": system_id})
        return SystemNetwork.from_json(data.get("result"))

    def get_system_ip(self, system_id: int) -> str:
        """Return the primary IP address of a system"""
        network = self.get_system_network(system_id)
        if not network.ip:
            raise NotFoundError(f"No IP address known for system {system_id}")
        return network.ip

    def delete_system(self, system_id: int, cleanup_type: str = "FORCE_DELETE") -> int:
        return self._post("/system/deleteSystem", DeleteSystemRequest(system_id, cleanup_type).to_json())

    # ==================== System Groups ====================

    def list_system_groups(self) -> list[str]:
        """Names of every system group visible to the session"""
        data = self._get_json("/systemgroup/listAllGroups")
        return [group.get("name", "") for group in self._result_items(data, "/systemgroup/listAllGroups")]

    def add_or_remove_systems(self, group_name: str, server_ids: list[int], add: bool) -> int:
        payload = AddRemoveSystems(group_name, server_ids, add).to_json()
        return self._post("/systemgroup/addOrRemoveSystems", payload)

    def delete_system_group(self, group_name: str) -> int:
        return self._post("/systemgroup/delete", RemoveSystemGroup(group_name).to_json())

    # ==================== Users ====================

    def list_users(self) -> list[str]:
        """Logins of every user visible to the session"""
        data = self._get_json("/user/listUsers")
        return [user.get("login", "") for user in self._result_items(data, "/user/listUsers")]

    def create_user(self, user: CreateUser) -> int:
        return self._post("/user/create", user.to_json())

    def delete_user(self, login: str) -> int:
        return self._post("/user/delete", RemoveUser(login).to_json())
