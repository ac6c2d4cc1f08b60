"""Field rules shared by the domain stores.

Each rule appends human-readable messages to an error list so a store can
report every violation of an entity at once.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

AGENT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def check_name(errors: list[str], label: str, name: str | None, *, max_length: int = 100) -> None:
    if is_blank(name):
        errors.append(f"{label} name is required and cannot be empty or whitespace")
    if name is not None and len(name) > max_length:
        errors.append(f"{label} name cannot exceed {max_length} characters")


def check_agent_name(errors: list[str], label: str, name: str | None) -> None:
    check_name(errors, label, name)
    if name and not AGENT_NAME_PATTERN.match(name):
        errors.append(f"{label} name can only contain letters, numbers, spaces, hyphens, and underscores")


def check_branch(errors: list[str], branch: str | None) -> None:
    if not branch:
        return
    if len(branch) > 255:
        errors.append("Branch name cannot exceed 255 characters")
    if branch.startswith("/") or branch.endswith("/") or "//" in branch or " " in branch:
        errors.append("Branch name format is invalid")
