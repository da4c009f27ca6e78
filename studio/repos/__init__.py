"""
Repository layer for Studio.

All SQL lives here and ONLY here. No database access outside this module.
"""

from studio.repos.board_repo import BoardRepo
from studio.repos.lesson_repo import LessonRepo

__all__ = [
    "BoardRepo",
    "LessonRepo",
]
