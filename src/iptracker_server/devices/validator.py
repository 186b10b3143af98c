"""Update ingestion: turn a raw report into a normalized device record.

The validator is a pure function of the report, the transport context and
the ingestion-time clock. It never touches the registry or the disk.

Rules:
1. ``hostname`` must be non-empty.
2. At least one of the four address fields must be non-empty.
3. ``timestamp`` in ``YYYY-MM-DD HH:MM:SS`` becomes ``lastUpdate``; anything
   else (including no timestamp at all) falls back to the wall clock.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from iptracker_server.errors import MISSING_HOSTNAME, NO_ADDRESS, UpdateRejected
from iptracker_server.models import DeviceRecord, DeviceUpdate

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# strptime alone accepts unpadded fields and surrounding whitespace
_TIMESTAMP_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")


def _value(value: str | None) -> str:
    return value or ""


def parse_timestamp(raw: str | None, now: datetime) -> datetime:
    """Parse a client timestamp, falling back to *now* when absent or malformed.

    Only the exact zero-padded ``YYYY-MM-DD HH:MM:SS`` shape is accepted.
    Zone-less timestamps are taken as UTC.
    """
    if not raw:
        return now
    if not _TIMESTAMP_RE.fullmatch(raw):
        logger.debug("Unparsable timestamp %r, using ingestion time", raw)
        return now
    try:
        parsed = datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError:
        logger.debug("Unparsable timestamp %r, using ingestion time", raw)
        return now
    return parsed.replace(tzinfo=timezone.utc)


def validate_update(
    update: DeviceUpdate,
    *,
    remote_address: str = "",
    user_agent: str = "",
    now: datetime | None = None,
) -> DeviceRecord:
    """Validate *update* and build the record to store.

    Parameters
    ----------
    update:
        The report as received from the reporting host.
    remote_address, user_agent:
        Stamped from the transport layer; anything the client put in the
        body under these names is ignored.
    now:
        Ingestion-time clock. Defaults to the current UTC time.

    Raises
    ------
    UpdateRejected
        When the hostname is missing or no address field is populated.
    """
    hostname = _value(update.hostname)
    if not hostname:
        raise UpdateRejected(MISSING_HOSTNAME)

    ipv4_local = _value(update.ipv4_local)
    ipv4_public = _value(update.ipv4_public)
    ipv6_local = _value(update.ipv6_local)
    ipv6_public = _value(update.ipv6_public)
    if not any((ipv4_local, ipv4_public, ipv6_local, ipv6_public)):
        raise UpdateRejected(NO_ADDRESS)

    if now is None:
        now = datetime.now(timezone.utc)

    return DeviceRecord(
        hostname=hostname,
        computer_name=_value(update.computer_name),
        ipv4_local=ipv4_local,
        ipv4_public=ipv4_public,
        ipv6_local=ipv6_local,
        ipv6_public=ipv6_public,
        ssh_port=_value(update.ssh_port),
        ssh_status=_value(update.ssh_status),
        current_user=_value(update.current_user),
        last_update=parse_timestamp(update.timestamp, now),
        user_agent=user_agent,
        remote_address=remote_address,
    )
