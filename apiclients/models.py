"""
Typed request and response payloads for the SUSE Manager and meshStack APIs.

Field names on the wire follow the API documentation; ``to_json`` produces
the exact body each endpoint expects.
"""

from dataclasses import dataclass, field
from typing import Any

from apiclients.errors import DecodeError

# ==================== SUSE Manager ====================


@dataclass(frozen=True)
class AuthRequest:
    login: str
    password: str

    def to_json(self) -> dict[str, Any]:
        return {"login": self.login, "password": self.password}


@dataclass(frozen=True)
class SystemIdentity:
    """A managed system as returned by ``system/getId``"""

    id: int
    name: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "SystemIdentity":
        try:
            return cls(id=int(data["id"]), name=data.get("name", ""))
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Malformed system entry: {data!r}") from e


@dataclass(frozen=True)
class SystemNetwork:
    """Network facts for one system as returned by ``system/getNetworkForSystem``"""

    ip: str
    hostname: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "SystemNetwork":
        if not isinstance(data, dict):
            raise DecodeError(f"Malformed network result: {data!r}")
        return cls(ip=data.get("ip") or "", hostname=data.get("hostname") or "")


@dataclass(frozen=True)
class AddRemoveSystems:
    system_group_name: str
    server_ids: list[int] = field(default_factory=list)
    add: bool = True

    def to_json(self) -> dict[str, Any]:
        return {"systemGroupName": self.system_group_name, "serverIds": list(self.server_ids), "add": self.add}


@dataclass(frozen=True)
class DeleteSystemRequest:
    server_id: int
    cleanup_type: str = "FORCE_DELETE"

    def to_json(self) -> dict[str, Any]:
        return {"sid": self.server_id, "cleanupType": self.cleanup_type}


@dataclass(frozen=True)
class RemoveSystemGroup:
    system_group_name: str

    def to_json(self) -> dict[str, Any]:
        return {"systemGroupName": self.system_group_name}


@dataclass(frozen=True)
class CreateUser:
    login: str
    password: str
    first_name: str
    last_name: str
    email: str

    def to_json(self) -> dict[str, Any]:
        return {
            "login": self.login,
            "password": self.password,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class RemoveUser:
    login: str

    def to_json(self) -> dict[str, Any]:
        return {"login": self.login}


# ==================== meshStack ====================


class BuildingBlockStatus:
    """Known building block lifecycle values. The server may return others."""

    WAITING_FOR_DEPENDENT_INPUT = "WAITING_FOR_DEPENDENT_INPUT"
    WAITING_FOR_OPERATOR_INPUT = "WAITING_FOR_OPERATOR_INPUT"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class BuildingBlock:
    uuid: str
    name: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "BuildingBlock":
        """Build from a ``meshBuildingBlock`` HAL object (``metadata.uuid`` / ``spec.displayName``)"""
        try:
            return cls(uuid=data["metadata"]["uuid"], name=data.get("spec", {}).get("displayName", ""))
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(f"Malformed building block: {data!r}") from e
