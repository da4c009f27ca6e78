"""
Board Core: the pure document engine.

Components:
  types       board document data classes and constructors
  cells       flat cell-key addressing, get_value / set_value
  sections    section parser/serializer and structural edits
  migrations  load-time upgrades of stored content
  history     undo/redo history and the edit session
  apply       folding generation results into a board
  proposals   collaborator change batches and key routing

Nothing in this package does IO.
"""

from boardcore.apply import apply_agenda, apply_suggestion, apply_variation
from boardcore.cells import get_value, parse_cell_key, set_value
from boardcore.history import EditSession, History
from boardcore.migrations import load_content, migrate_content
from boardcore.proposals import ProposalBatch, ProposedChange, route_changes
from boardcore.sections import normalize_body, parse_sections, serialize
from boardcore.types import (
    BoardContent,
    BoardContext,
    create_empty_board_content,
    sync_standards,
)

__all__ = [
    "BoardContent",
    "BoardContext",
    "create_empty_board_content",
    "sync_standards",
    "get_value",
    "set_value",
    "parse_cell_key",
    "parse_sections",
    "serialize",
    "normalize_body",
    "migrate_content",
    "load_content",
    "History",
    "EditSession",
    "apply_suggestion",
    "apply_variation",
    "apply_agenda",
    "ProposedChange",
    "ProposalBatch",
    "route_changes",
]
