"""Parsing for the workspaces resource."""

from __future__ import annotations

import json
import logging


logger = logging.getLogger(__name__)


def parse_workspaces(body: str) -> dict[str, str]:
    """Map workspace name to id from a GET /workspaces body.

    Expected shape: {"workspaces": [{"projectName": "...", "id": "..."}]}.
    Anything else is logged and yields an empty mapping.
    """
    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning("Workspaces response is not valid JSON: %s", e)
        return {}

    entries = document.get("workspaces") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        logger.warning("Workspaces response has no 'workspaces' list")
        return {}

    workspaces: dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = entry.get("projectName")
        workspace_id = entry.get("id")
        if name is None or workspace_id is None:
            continue
        workspaces[str(name)] = str(workspace_id)
    return workspaces
