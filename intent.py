"""
SUSE Manager / meshStack Intent Layer

Multi-step workflows on top of the two API clients. Each workflow resolves
what it needs (hostname -> system id -> IP), checks a guard (network
membership, group or user existence) and only then issues the mutating call.

Workflows never raise for API failures: they return ``(status, error)`` where
``status`` is the HTTP status of the mutating call, or -1 when the workflow
stopped before getting one, and ``error`` is an ``ApiError`` or ``None``.

Usage:
    cookie, err = suma_login("admin", "secret", "https://suma.example.com")
    status, err = add_system_to_group(cookie, "https://suma.example.com",
                                      "web-01.example.com", "web", "10.20.0.0")
"""

import functools
import ipaddress
import sys
from collections.abc import Callable
from typing import Any

import structlog

from apiclients.errors import ApiError, PreconditionError
from apiclients.meshstack import MeshstackClient
from apiclients.models import BuildingBlock, CreateUser
from apiclients.suma import SumaClient

__version__ = "1.0.0"

structlog.configure(
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

logger = structlog.get_logger(__name__)

FAILED = -1


# ==================== Network Classifier ====================


def _default_prefix(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> int:
    """Classful default prefix for IPv4 (A=/8, B=/16, everything else /24), /64 for IPv6"""
    if address.version == 6:
        return 64
    first_octet = address.packed[0]
    if first_octet < 0x80:
        return 8
    if first_octet < 0xC0:
        return 16
    return 24


def is_in_network(ip: str, network: str) -> bool:
    """
    Check whether ``ip`` lies inside the network identified by ``network``.

    A bare network address gets its classful default mask; an explicit
    prefix ("10.1.0.0/16") is used as given. Unparsable input or mixed
    address families yield False.
    """
    try:
        address = ipaddress.ip_address(ip.strip())
        if "/" in network:
            net = ipaddress.ip_network(network.strip(), strict=False)
        else:
            net_address = ipaddress.ip_address(network.strip())
            net = ipaddress.ip_network(f"{net_address}/{_default_prefix(net_address)}", strict=False)
    except (ValueError, AttributeError):
        return False

    if address.version != net.version:
        return False
    return address in net


# ==================== SUSE Manager Workflows ====================


class SumaWorkflows:
    """Guarded SUSE Manager workflows built on an injected directory client"""

    def __init__(
        self,
        client: SumaClient,
        network_check: Callable[[str, str], bool] = is_in_network,
        on_error: Callable[[ApiError], Any] | None = None,
    ):
        """
        Args:
            client: Anything with the SumaClient lookup and mutation methods
            network_check: Membership predicate used as the network guard
            on_error: Called once with the error that ended a failed workflow
        """
        self.client = client
        self.network_check = network_check
        self.on_error = on_error

    def _fail(self, workflow: str, error: ApiError, status: int = FAILED) -> tuple[int, ApiError]:
        logger.warning("workflow_aborted", workflow=workflow, error_type=type(error).__name__, error=str(error))
        if self.on_error is not None:
            self.on_error(error)
        return status, error

    # ---------- Existence checks ----------

    def system_group_exists(self, group_name: str) -> bool:
        """True if a system group with exactly this name exists; lookup failures count as absent."""
        try:
            groups = self.client.list_system_groups()
        except ApiError as e:
            logger.warning("existence_check_failed", kind="system_group", name=group_name, error=str(e))
            return False
        return group_name in groups

    def user_exists(self, login: str) -> bool:
        """True if a user with exactly this login exists; lookup failures count as absent."""
        try:
            users = self.client.list_users()
        except ApiError as e:
            logger.warning("existence_check_failed", kind="user", name=login, error=str(e))
            return False
        return login in users

    # ---------- System workflows ----------

    def _locate_in_network(self, hostname: str, network: str) -> int:
        """Resolve ``hostname`` to a system id and verify its IP lies in ``network``"""
        system_id = self.client.get_system_id(hostname)
        ip = self.client.get_system_ip(system_id)
        if not self.network_check(ip, network):
            raise PreconditionError(f"system not in network: {hostname} ({ip}) is outside {network}")
        logger.debug("system_located", hostname=hostname, system_id=system_id, ip=ip, network=network)
        return system_id

    def _change_membership(self, hostname: str, group: str, network: str, add: bool) -> tuple[int, ApiError | None]:
        workflow = "add_system_to_group" if add else "remove_system_from_group"
        try:
            system_id = self._locate_in_network(hostname, network)
        except ApiError as e:
            return self._fail(workflow, e)

        try:
            status = self.client.add_or_remove_systems(group, [system_id], add)
        except ApiError as e:
            return self._fail(workflow, e, e.status_code if e.status_code is not None else FAILED)

        logger.info(workflow, hostname=hostname, system_id=system_id, group=group, status=status)
        return status, None

    def add_system_to_group(self, hostname: str, group: str, network: str) -> tuple[int, ApiError | None]:
        return self._change_membership(hostname, group, network, add=True)

    def remove_system_from_group(self, hostname: str, group: str, network: str) -> tuple[int, ApiError | None]:
        return self._change_membership(hostname, group, network, add=False)

    def delete_system(
        self, hostname: str, network: str, cleanup_type: str = "FORCE_DELETE"
    ) -> tuple[int, ApiError | None]:
        """Delete a system, but only if its IP is inside ``network``"""
        try:
            system_id = self._locate_in_network(hostname, network)
            status = self.client.delete_system(system_id, cleanup_type)
        except ApiError as e:
            return self._fail("delete_system", e)

        logger.info("delete_system", hostname=hostname, system_id=system_id, status=status)
        return status, None

    # ---------- Group and user workflows ----------

    def remove_system_group(self, group_name: str) -> tuple[int, ApiError | None]:
        """Delete a system group; a group that is already gone counts as success"""
        if not self.system_group_exists(group_name):
            logger.info("system_group_absent", group=group_name)
            return 200, None

        try:
            status = self.client.delete_system_group(group_name)
        except ApiError as e:
            return self._fail("remove_system_group", e)

        logger.info("remove_system_group", group=group_name, status=status)
        return status, None

    def add_user(
        self,
        login: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> tuple[int, ApiError | None]:
        """
        Create a user unless one with that login already exists

        The HTTP status of the create call is returned as-is, failures included.
        """
        if self.user_exists(login):
            logger.info("user_present", login=login)
            return 200, None

        user = CreateUser(
            login=login,
            password=password,
            first_name=first_name or login,
            last_name=last_name or login,
            email=email or f"{login}@localhost",
        )
        try:
            status = self.client.create_user(user)
        except ApiError as e:
            return self._fail("add_user", e, e.status_code if e.status_code is not None else FAILED)

        logger.info("add_user", login=login, status=status)
        return status, None

    def remove_user(self, login: str) -> tuple[int, ApiError | None]:
        """Remove the user's personal system group, then the user itself"""
        status, err = self.remove_system_group(login)
        if err is not None:
            return status, err

        if not self.user_exists(login):
            logger.info("user_absent", login=login)
            return 200, None

        try:
            status = self.client.delete_user(login)
        except ApiError as e:
            return self._fail("remove_user", e)

        logger.info("remove_user", login=login, status=status)
        return status, None


# ==================== Error Values ====================


def error_value(default: Any):
    """
    Decorator turning an ApiError raised anywhere in the call, client
    construction included, into a ``(default, error)`` return value
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ApiError as e:
                logger.error("call_failed", call=func.__name__, error_type=type(e).__name__, error=str(e))
                return default, e

        return wrapper

    return decorator


# ==================== Session Helpers ====================


@error_value("")
def suma_login(username: str, password: str, base_url: str, verbose: bool = False) -> tuple[str, ApiError | None]:
    """Log in to SUSE Manager. An empty cookie with no error means the server set no session."""
    return SumaClient(base_url, verbose=verbose).login(username, password), None


@error_value("")
def meshstack_login(
    client_id: str, client_secret: str, base_url: str, verbose: bool = False
) -> tuple[str, ApiError | None]:
    return MeshstackClient(base_url, verbose=verbose).login(client_id, client_secret), None


# ==================== Module-level SUSE Manager Wrappers ====================


def _workflows(session_cookie: str, base_url: str, verbose: bool) -> SumaWorkflows:
    return SumaWorkflows(SumaClient(base_url, session_cookie=session_cookie, verbose=verbose))


@error_value(FAILED)
def get_system_id(session_cookie: str, base_url: str, hostname: str, verbose: bool = False) -> tuple[int, ApiError | None]:
    return SumaClient(base_url, session_cookie, verbose).get_system_id(hostname), None


@error_value("")
def get_system_ip(session_cookie: str, base_url: str, system_id: int, verbose: bool = False) -> tuple[str, ApiError | None]:
    return SumaClient(base_url, session_cookie, verbose).get_system_ip(system_id), None


@error_value(FAILED)
def add_system_to_group(
    session_cookie: str, base_url: str, hostname: str, group: str, network: str, verbose: bool = False
) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).add_system_to_group(hostname, group, network)


@error_value(FAILED)
def remove_system_from_group(
    session_cookie: str, base_url: str, hostname: str, group: str, network: str, verbose: bool = False
) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).remove_system_from_group(hostname, group, network)


@error_value(FAILED)
def delete_system(
    session_cookie: str, base_url: str, hostname: str, network: str, verbose: bool = False
) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).delete_system(hostname, network)


@error_value(FAILED)
def remove_system_group(
    session_cookie: str, base_url: str, group_name: str, verbose: bool = False
) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).remove_system_group(group_name)


@error_value(FAILED)
def add_user(
    session_cookie: str, login: str, password: str, base_url: str, verbose: bool = False
) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).add_user(login, password)


@error_value(FAILED)
def remove_user(session_cookie: str, login: str, base_url: str, verbose: bool = False) -> tuple[int, ApiError | None]:
    return _workflows(session_cookie, base_url, verbose).remove_user(login)


# ==================== Module-level meshStack Wrappers ====================


@error_value([])
def list_building_blocks(
    base_url: str, project_id: str, api_key: str, verbose: bool = False
) -> tuple[list[BuildingBlock], ApiError | None]:
    return MeshstackClient(base_url, api_key, verbose).list_building_blocks(project_id), None


@error_value("")
def get_building_block_status(base_url: str, api_key: str, uuid: str, verbose: bool = False) -> tuple[str, ApiError | None]:
    return MeshstackClient(base_url, api_key, verbose).get_building_block_status(uuid), None


@error_value("")
def create_building_block(
    base_url: str, api_key: str, payload: dict[str, Any] | bytes | str, verbose: bool = False
) -> tuple[str, ApiError | None]:
    return MeshstackClient(base_url, api_key, verbose).create_building_block(payload), None


def delete_building_block(base_url: str, api_key: str, uuid: str, verbose: bool = False) -> ApiError | None:
    try:
        MeshstackClient(base_url, api_key, verbose).delete_building_block(uuid)
    except ApiError as e:
        return e
    return None
