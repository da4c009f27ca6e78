"""
Board Core: Load-time Migrations

Stored boards predate parts of the current document layout. migrate_content
rewrites a raw decoded blob into the current layout:

1. designThinking.milestone1/2/3 become milestoneEmpathize / milestoneDefine /
   milestonePrototypeTest; milestoneIdeate starts empty; the old keys go away.
2. A single standards cell becomes a per-subject list. It is kept as
   "Standards: General" when it has a value, otherwise dropped.
3. A missing communityPartners cell is created empty.
4. Missing additional lists default to empty.

Each step only fires on the old shape, so migrating twice is a no-op.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from boardcore.types import (
    DEFAULT_SUBJECTS,
    BoardContent,
    create_empty_board_content,
    create_fixed_cell,
    standards_label,
    sync_standards,
)

logger = logging.getLogger(__name__)

_LEGACY_MILESTONES = {
    "milestone1": "milestoneEmpathize",
    "milestone2": "milestoneDefine",
    "milestone3": "milestonePrototypeTest",
}


def migrate_content(raw: dict[str, Any]) -> dict[str, Any]:
    """Return a migrated deep copy of a decoded content blob."""
    data = copy.deepcopy(raw)
    dt = data.get("designThinking")
    ip = data.get("initialPlanning")

    if isinstance(dt, dict) and "milestone1" in dt:
        for old, new in _LEGACY_MILESTONES.items():
            value = dt.pop(old, None)
            dt[new] = value if value else create_fixed_cell(new).to_dict()
        dt["milestoneIdeate"] = create_fixed_cell("milestoneIdeate").to_dict()

    if isinstance(ip, dict):
        standards = ip.get("standards")
        if standards and not isinstance(standards, list):
            if isinstance(standards, dict) and standards.get("value"):
                ip["standards"] = [{**standards, "label": standards_label("General")}]
            else:
                ip["standards"] = []
        if not ip.get("communityPartners"):
            ip["communityPartners"] = create_fixed_cell("communityPartners").to_dict()
        if not ip.get("additional"):
            ip["additional"] = []

    if isinstance(dt, dict) and not dt.get("additional"):
        dt["additional"] = []

    return data


def decode_subjects(raw: Any) -> list[str]:
    """
    Subjects from the stored column (a list or its JSON text).

    Falls back to the default subject list when nothing usable is stored.
    """
    subjects: Any = raw
    if isinstance(raw, str):
        try:
            subjects = json.loads(raw)
        except ValueError:
            logger.warning("board: unreadable subjects column, using defaults")
            subjects = None
    if not isinstance(subjects, list) or not subjects:
        return list(DEFAULT_SUBJECTS)
    return [str(s) for s in subjects]


def load_content(raw: Any, subjects: list[str]) -> BoardContent:
    """
    Decode, migrate and standards-sync a stored content blob.

    `raw` may be the decoded dict or its JSON text. Anything unreadable
    loads as an empty board.
    """
    data: Any = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("board: unreadable content blob, loading empty board")
            data = None

    if isinstance(data, dict):
        content = BoardContent.from_dict(migrate_content(data))
    else:
        content = create_empty_board_content()

    content.initial_planning.standards = sync_standards(content.initial_planning.standards, subjects)
    return content
