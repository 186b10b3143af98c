"""Pydantic domain models for the IP Tracker Server.

Two shapes travel through the server: the raw ``DeviceUpdate`` a reporting
host posts, and the normalized ``DeviceRecord`` the registry stores. Both use
the camelCase field names of the wire and snapshot formats as aliases while
exposing snake_case attributes to Python code.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SSHStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


DEFAULT_SSH_PORT = "22"


# ---------------------------------------------------------------------------
# Domain models
# ---------------------------------------------------------------------------

class DeviceUpdate(BaseModel):
    """Report payload as posted by a reporting host.

    Every field is optional here; required-field checks happen in
    :func:`iptracker_server.devices.validator.validate_update` so that a
    rejection carries a reason instead of a schema error. Transport fields
    (user agent, remote address) are not part of the payload.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    hostname: str | None = None
    computer_name: str | None = Field(default=None, alias="computerName")
    ipv4_local: str | None = Field(default=None, alias="ipv4Local")
    ipv4_public: str | None = Field(default=None, alias="ipv4Public")
    ipv6_local: str | None = Field(default=None, alias="ipv6Local")
    ipv6_public: str | None = Field(default=None, alias="ipv6Public")
    ssh_port: str | None = Field(default=None, alias="sshPort")
    ssh_status: str | None = Field(default=None, alias="sshStatus")
    current_user: str | None = Field(default=None, alias="currentUser")
    timestamp: str | None = None


class DeviceRecord(BaseModel):
    """Latest known state of one reporting host.

    Records are frozen: the registry replaces them whole and never mutates
    one in place.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    hostname: str
    computer_name: str = Field(default="", alias="computerName")
    ipv4_local: str = Field(default="", alias="ipv4Local")
    ipv4_public: str = Field(default="", alias="ipv4Public")
    ipv6_local: str = Field(default="", alias="ipv6Local")
    ipv6_public: str = Field(default="", alias="ipv6Public")
    ssh_port: str = Field(default="", alias="sshPort")
    ssh_status: str = Field(default="", alias="sshStatus")
    current_user: str = Field(default="", alias="currentUser")
    last_update: datetime = Field(alias="lastUpdate")
    user_agent: str = Field(default="", alias="userAgent")
    remote_address: str = Field(default="", alias="remoteAddress")

    @field_validator("last_update")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def ssh_active(self) -> bool:
        return self.ssh_status == SSHStatus.ACTIVE.value

    @property
    def effective_ssh_port(self) -> str:
        return self.ssh_port or DEFAULT_SSH_PORT

    @property
    def addresses(self) -> tuple[str, str, str, str]:
        return (self.ipv4_local, self.ipv4_public, self.ipv6_local, self.ipv6_public)

    def to_json_dict(self) -> dict:
        """Serialize with wire field names and an ISO-8601 ``lastUpdate``."""
        return self.model_dump(mode="json", by_alias=True)
