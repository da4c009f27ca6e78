"""
Pydantic models for Studio.

All data shapes defined here. No imports from db, repos, or routes.
"""

from studio.models.board import (
    Board,
    BoardResponse,
    BoardSummary,
    CreateBoardRequest,
    UpdateBoardRequest,
)
from studio.models.generation import (
    AgendaPlan,
    BoardVariation,
    BoardVariationFallback,
    CellSuggestions,
    CollaboratorResponse,
    HqpblFeedback,
    LessonPlanGeneration,
)
from studio.models.lesson import (
    CreateLessonRequest,
    Lesson,
    LessonResponse,
    LessonSections,
    UpdateLessonRequest,
)
from studio.models.user import User

__all__ = [
    # User models
    "User",
    # Board models
    "Board",
    "BoardResponse",
    "BoardSummary",
    "CreateBoardRequest",
    "UpdateBoardRequest",
    # Lesson models
    "Lesson",
    "LessonResponse",
    "LessonSections",
    "CreateLessonRequest",
    "UpdateLessonRequest",
    # Generation contracts
    "CellSuggestions",
    "BoardVariation",
    "BoardVariationFallback",
    "AgendaPlan",
    "LessonPlanGeneration",
    "CollaboratorResponse",
    "HqpblFeedback",
]
