"""Normalization of Azure SDK objects into console records.

All defaulting to ``"Unknown"`` happens here, at the ingestion edge, so
routers and the console client can treat every field as mandatory.
"""
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from opsconsole.models.vm import UNKNOWN

RESOURCE_GROUP_PATTERN = re.compile(r"resourceGroups/([^/]+)", re.IGNORECASE)
VM_PREFIX_PATTERN = re.compile(r"^VM\s+", re.IGNORECASE)

MAX_PROJECT_SEGMENT_LENGTH = 45
DEFAULT_PROJECT_SEGMENT = "project"


def _attr(status: Any, name: str, alias: str) -> Optional[str]:
    # SDK InstanceViewStatus objects and plain JSON dicts are both accepted
    if isinstance(status, dict):
        value = status.get(alias, status.get(name))
    else:
        value = getattr(status, name, None)
    return value if isinstance(value, str) else None


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def format_power_state(statuses: Optional[Iterable[Any]] = None) -> str:
    """Derive a display power state from instance view statuses"""
    power_status = next(
        (
            status for status in statuses or []
            if (_attr(status, "code", "code") or "").lower().startswith("powerstate/")
        ),
        None,
    )
    if power_status is None:
        return UNKNOWN

    display = _attr(power_status, "display_status", "displayStatus")
    if display:
        from_display = VM_PREFIX_PATTERN.sub("", display, count=1).strip()
        if from_display:
            return " ".join(_capitalize(part) for part in from_display.split(" "))

    segments = (_attr(power_status, "code", "code") or "").split("/")
    from_code = segments[1] if len(segments) > 1 else ""
    if not from_code:
        return UNKNOWN

    return _capitalize(from_code)


def extract_resource_group_from_id(resource_id: Optional[str]) -> str:
    if not resource_id:
        return UNKNOWN
    match = RESOURCE_GROUP_PATTERN.search(resource_id)
    return match.group(1) if match else UNKNOWN


def sanitize_project_name(project_name: str) -> str:
    sanitized = re.sub(r"[^a-z0-9-]", "-", project_name.lower())
    sanitized = re.sub(r"-+", "-", sanitized)
    return sanitized.strip("-")


def build_dev_vm_name(project_name: str, now: Optional[datetime] = None) -> str:
    """Synthesize ``dev-<project>-<YYYYmmddHHMMSS>`` using a UTC timestamp"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    timestamp = now.strftime("%Y%m%d%H%M%S")

    project_segment = sanitize_project_name(project_name) or DEFAULT_PROJECT_SEGMENT
    project_segment = project_segment[:MAX_PROJECT_SEGMENT_LENGTH]

    return f"dev-{project_segment}-{timestamp}"
