"""
meshStack (meshcloud) API Client
Handles bearer-token authentication and building block lifecycle calls
API Docs: https://docs.meshcloud.io/api/
"""

import json
import os
import time
from typing import Any

import requests
import structlog

from apiclients.errors import ConfigurationError, DecodeError, TransportError
from apiclients.models import BuildingBlock

logger = structlog.get_logger(__name__)

BUILDING_BLOCK_MEDIA_TYPE = "application/vnd.meshcloud.api.meshbuildingblock.v1.hal+json"
BUILDING_BLOCKS_ENDPOINT = "/api/meshobjects/meshbuildingblocks"


class MeshstackClient:
    """Client for the meshStack meshObject API - Building Blocks"""

    def __init__(self, base_url: str | None = None, api_key: str = "", verbose: bool = False):
        """
        Initialize meshStack API client

        Args:
            base_url: Base URL for API (defaults to MESHSTACK_URL env var)
            api_key: Bearer token from a previous login, if any
            verbose: Log every raw request and response
        """
        self.base_url = (base_url or os.getenv("MESHSTACK_URL", "")).rstrip("/")
        self.verbose = verbose

        if not self.base_url:
            raise ConfigurationError("MESHSTACK_URL environment variable or base_url parameter is required")

        self.session = requests.Session()
        self.session.headers.update({"Accept": BUILDING_BLOCK_MEDIA_TYPE})
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

        # (connect timeout, read timeout)
        self.timeout = (5, 30)

        logger.debug("meshstack_client_initialized", base_url=self.base_url, verbose=verbose)

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Send one request to meshStack

        Raises:
            TransportError: If no response could be obtained
        """
        url = f"{self.base_url}{endpoint}"
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
                "meshstack_api_exchange",
                method=method,
                url=url,
                params=kwargs.get("params"),
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    @staticmethod
    def _check_status(response: requests.Response, endpoint: str, accepted: tuple[int, ...] = (200,)) -> None:
        if response.status_code not in accepted:
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

    # ==================== Authentication ====================

    def login(self, client_id: str, client_secret: str) -> str:
        """
        Exchange API key credentials for an access token

        Returns:
            The bearer token, which is also installed on this client's session

        Raises:
            TransportError: If the server does not answer with HTTP 200
            DecodeError: If the body carries no access_token
        """
        endpoint = "/api/login"
        form = {"grant_type": "client_credentials", "client_id": client_id, "client_secret": client_secret}
        response = self._request("POST", endpoint, data=form, headers={"Accept": "application/json"})
        self._check_status(response, endpoint)

        token = self._decode(response, endpoint).get("access_token")
        if not isinstance(token, str) or not token:
            raise DecodeError("Login response has no access_token", status_code=response.status_code)

        self.session.headers["Authorization"] = f"Bearer {token}"
        logger.info("meshstack_login_succeeded", base_url=self.base_url, client_id=client_id)
        return token

    # ==================== Building Blocks ====================

    def list_building_blocks(self, project_id: str) -> list[BuildingBlock]:
        """List building blocks of one project"""
        response = self._request("GET", BUILDING_BLOCKS_ENDPOINT, params={"projectIdentifier": project_id})
        self._check_status(response, BUILDING_BLOCKS_ENDPOINT)
        data = self._decode(response, BUILDING_BLOCKS_ENDPOINT)

        embedded = data.get("_embedded") or {}
        return [BuildingBlock.from_json(item) for item in embedded.get("meshBuildingBlocks") or []]

    def get_building_block_status(self, uuid: str) -> str:
        """Return the lifecycle status of a building block (see BuildingBlockStatus)"""
        endpoint = f"{BUILDING_BLOCKS_ENDPOINT}/{uuid}"
        response = self._request("GET", endpoint)
        self._check_status(response, endpoint)

        status = self._decode(response, endpoint).get("status")
        if not isinstance(status, str):
            raise DecodeError(f"Building block {uuid} has no status", status_code=response.status_code)
        return status

    def create_building_block(self, payload: dict[str, Any] | bytes | str) -> str:
        """
        Create a building block

        Args:
            payload: meshBuildingBlock document, either as a dict or already encoded

        Returns:
            UUID assigned by meshStack
        """
        body = json.dumps(payload) if isinstance(payload, dict) else payload
        headers = {"Content-Type": f"{BUILDING_BLOCK_MEDIA_TYPE};charset=UTF-8"}
        response = self._request("POST", BUILDING_BLOCKS_ENDPOINT, data=body, headers=headers)
        self._check_status(response, BUILDING_BLOCKS_ENDPOINT, accepted=(200, 201))

        metadata = self._decode(response, BUILDING_BLOCKS_ENDPOINT).get("metadata") or {}
        uuid = metadata.get("uuid") if isinstance(metadata, dict) else None
        if not uuid:
            raise DecodeError("Created building block has no metadata.uuid", status_code=response.status_code)

        logger.info("building_block_created", uuid=uuid)
        return uuid

    def delete_building_block(self, uuid: str) -> None:
        """
        Delete a building block

        Only HTTP 200 counts as success; 204 and everything else raise.
        """
        endpoint = f"{BUILDING_BLOCKS_ENDPOINT}/{uuid}"
        response = self._request("DELETE", endpoint)
        self._check_status(response, endpoint)
        logger.info("building_block_deleted", uuid=uuid)
