"""
Binding between a workspace directory and the archive it will be packed into.

The pair is stored as a dotfile at the workspace root, so any file opened
inside the tree can find its destination by walking up its parents. Dotfiles
are never packed, so the binding stays out of the archive.
"""

import os
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from modules.errors import SessionNotFoundError

BINDING_FILE = ".epubdir-session.json"


@dataclass(frozen=True)
class Session:
    workspace: str
    target: str


def bind(workspace, target):
    """Attaches target to workspace. Called once, when the session starts."""
    workspace = os.path.abspath(workspace)
    target = os.path.abspath(target)

    data = {
        "workspace": workspace,
        "target": target,
        "created": datetime.now(timezone.utc).isoformat(),
    }
    with open(os.path.join(workspace, BINDING_FILE), 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)

    logging.info(f"Bound {workspace} -> {target}")
    return Session(workspace, target)


def resolve(path):
    """
    Returns the Session of the workspace containing path (a file or directory
    anywhere in the tree, or the workspace itself).
    """
    if isinstance(path, Session):
        return path

    current = os.path.abspath(path)
    if not os.path.isdir(current):
        current = os.path.dirname(current)

    while True:
        binding_path = os.path.join(current, BINDING_FILE)
        if os.path.isfile(binding_path):
            try:
                with open(binding_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                target = data["target"]
            except (ValueError, KeyError, TypeError) as e:
                raise SessionNotFoundError(f"Malformed session binding {binding_path}: {e}") from e
            # The directory holding the binding is the workspace, even if moved
            return Session(current, target)

        parent = os.path.dirname(current)
        if parent == current:
            raise SessionNotFoundError(f"No ePub workspace found above {path}")
        current = parent
