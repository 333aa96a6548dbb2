"""
Helpers for the YooKassa webhook.

The webhook is public, so only YooKassa's published IP ranges may reach
it. Update the list when YooKassa announces new ranges.
"""

from __future__ import annotations

import ipaddress
from typing import Any, Dict, Optional, Tuple

YOOKASSA_IP_RANGES = [
    "185.71.76.0/27",
    "185.71.77.0/27",
    "77.75.153.0/25",
    "77.75.156.11/32",
    "77.75.156.35/32",
    "77.75.154.128/25",
    "2a02:5180::/32",
]


def is_ip_allowed(ip: Optional[str]) -> bool:
    """True when `ip` is a valid address inside one of the YooKassa ranges."""
    if not ip:
        return False

    try:
        client_ip = ipaddress.ip_address(ip)
    except ValueError:
        return False

    for cidr in YOOKASSA_IP_RANGES:
        try:
            if client_ip in ipaddress.ip_network(cidr):
                return True
        except ValueError:
            continue

    return False


def extract_event_fields(payload: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """(event type, object id, object status) of a notification."""
    event_type = payload.get("event")
    obj = payload.get("object") or {}
    if not isinstance(obj, dict):
        obj = {}
    return event_type, obj.get("id"), obj.get("status")


def idempotency_key(payload: Dict[str, Any]) -> Optional[str]:
    """
    Provider notification id when YooKassa sends one, else
    event:object_id:status.
    """
    if payload.get("uuid"):
        return str(payload["uuid"])
    event_type, obj_id, obj_status = extract_event_fields(payload)
    if not event_type or not obj_id:
        return None
    return f"{event_type}:{obj_id}:{obj_status or 'unknown'}"
