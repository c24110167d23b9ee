"""Planning sessions stored under ``buildforce/sessions``."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from buildforce.config import BUILDFORCE_DIR

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

ACTIVE_SESSION_FILE = ".active-session"
CHAT_HISTORY_FILE = ".chat-history.md"
NO_HISTORY = "No chat history available."

_SESSION_RE = re.compile(r"^session-(\d{3})")


def sessions_dir(project_root: Path) -> Path:
    return project_root / BUILDFORCE_DIR / "sessions"


def next_session_number(project_root: Path) -> str:
    """Next zero-padded session number across planned and completed sessions."""
    highest = 0
    for sub in ("planned", "completed"):
        directory = sessions_dir(project_root) / sub
        if not directory.is_dir():
            continue
        for entry in directory.iterdir():
            match = _SESSION_RE.match(entry.name)
            if match:
                highest = max(highest, int(match.group(1)))
    return f"{highest + 1:03d}"


def create_session(project_root: Path) -> Path:
    """Create ``planned/session-NNN`` and mark it as the active session."""
    name = f"session-{next_session_number(project_root)}"
    session_path = sessions_dir(project_root) / "planned" / name
    session_path.mkdir(parents=True, exist_ok=True)
    (session_path / CHAT_HISTORY_FILE).write_text("", encoding="utf-8")
    (sessions_dir(project_root) / ACTIVE_SESSION_FILE).write_text(
        f"planned/{name}\n", encoding="utf-8"
    )
    logger.info("Created session %s", session_path)
    return session_path


def active_session_path(project_root: Path) -> Path | None:
    """Path of the active session, or *None* when there is none."""
    marker = sessions_dir(project_root) / ACTIVE_SESSION_FILE
    try:
        active = marker.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning("Could not read active session: %s", exc)
        return None
    return sessions_dir(project_root) / active if active else None


def read_chat_history(project_root: Path) -> str:
    session = active_session_path(project_root)
    if session is None:
        return NO_HISTORY
    history = session / CHAT_HISTORY_FILE
    try:
        return history.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not read chat history: %s", exc)
        return NO_HISTORY


def append_chat_history(
    project_root: Path,
    role: str,
    content: str,
    *,
    now: datetime | None = None,
) -> bool:
    """Append a ``## <timestamp> | <role>`` entry to the active session.

    Returns ``False`` when there is no active session.
    """
    session = active_session_path(project_root)
    if session is None:
        logger.warning("No active session to update chat history")
        return False
    timestamp = (now or datetime.now(tz=timezone.utc)).isoformat()
    with (session / CHAT_HISTORY_FILE).open("a", encoding="utf-8") as fh:
        fh.write(f"\n## {timestamp} | {role}\n\n{content}\n")
    return True
