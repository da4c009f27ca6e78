"""
Generation models.

Output contracts the model must fill (sent as tool input schemas and
validated on the way back), plus the request bodies of the /api/ai routes.
All wire keys are camelCase.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from pydantic import Field

from studio.models.common import CamelModel, CamelRequest
from studio.models.lesson import LessonResponse

# ── Output contracts ────────────────────────────────────────────────────────


class Suggestion(CamelModel):
    text: str = Field(description="The suggested content for the cell")
    rationale: str = Field(description="Brief explanation of why this suggestion is effective")


class CellSuggestions(CamelModel):
    suggestions: list[Suggestion] = Field(description="1-3 suggestions for the cell")


class SubjectStandards(CamelModel):
    subject: str = Field(description="The subject name")
    content: str = Field(description="Academic standards for this subject")


class _BoardFields(CamelModel):
    title: str = Field(description="A catchy project title")
    main_idea: str = Field(description="Main idea or topic for the project")
    notice_reflect: str = Field(description="Notice and reflect activity")
    community_partners: str = Field(description="Community partners relevant to the project and location")
    opening_activity: str = Field(description="Engaging opening hook activity")
    driving_question: str = Field(description="Open-ended driving question")
    empathize: str = Field(description="Empathy-building activities")
    milestone_empathize: str = Field(description="Checkpoint after empathy phase: what students demonstrate")
    define: str = Field(description="Problem definition activities")
    milestone_define: str = Field(description="Checkpoint after define phase: clear problem statement")
    ideate: str = Field(description="Ideation and brainstorming activities")
    milestone_ideate: str = Field(description="Checkpoint after ideation: evidence of creative thinking")
    prototype_test: str = Field(description="Prototyping and testing activities")
    milestone_prototype_test: str = Field(description="Final milestone: product presentation to authentic audience")


class BoardVariation(_BoardFields):
    """Full-board variation for a board with subjects: standards per subject."""

    standards: list[SubjectStandards] = Field(description="Standards for each subject")


class BoardVariationFallback(_BoardFields):
    """Full-board variation for a board without subjects."""

    standards: str = Field(description="Relevant academic standards")


class AgendaSession(CamelModel):
    title: str = Field(description="Short title for this session, e.g. 'Empathy Interviews' or 'Define the Problem'")
    events_content: str = Field(
        description="What happens this day: activities, key tasks, structured as bullet points"
    )
    design_phase: str = Field(
        description=(
            "Which design thinking phase this maps to "
            "(Opening, Empathize, Define, Ideate, Prototype & Test, Presentation)"
        )
    )
    reflection: str = Field(description="Reflection prompt or closing activity for this session")


class AgendaPlan(CamelModel):
    sessions: list[AgendaSession]


class LessonPlanGeneration(CamelModel):
    learning_objectives: str = Field(
        description=(
            "2-4 student-centered learning objectives as a bulleted markdown list. "
            "Use 'Students will be able to...' framing. Align to the subject standards."
        )
    )
    materials: str = Field(
        description=(
            "Materials and resources needed, as a bulleted markdown list. "
            "Include both physical materials and digital resources."
        )
    )
    warm_up_hook: str = Field(
        description=(
            "A 5-10 minute warm-up or hook activity that connects to students' lives, sparks curiosity, "
            "and activates prior knowledge. Must be hands-on and inquiry-driven, NOT a lecture or worksheet. "
            "Format as bulleted markdown with bold headers."
        )
    )
    main_activities: str = Field(
        description=(
            "The core lesson activities with time allocations. Each activity gets a bold header with duration "
            "(e.g. '**Gallery Walk (15 min)**') on its own line, with description and steps as sub-bullets on "
            "following lines. Activities must be student-centered, inquiry-driven, collaborative, and connected "
            "to the PBL project. Total time should fit within the period length."
        )
    )
    closing_exit_ticket: str = Field(
        description=(
            "A 5-10 minute closing activity and/or exit ticket. Should promote metacognition and reflection "
            "(Freire's praxis). Format as bulleted markdown with bold headers."
        )
    )
    differentiation_notes: str = Field(
        description=(
            "Notes on differentiation: scaffolding for struggling learners, extensions for advanced learners, "
            "accommodations for diverse needs. Include multiple entry points. "
            "Format as bulleted markdown with bold headers."
        )
    )
    standards_addressed: str = Field(
        description=(
            "Specific academic standards this lesson addresses, with codes where possible. "
            "Format as bulleted markdown."
        )
    )


class ProposedChangeModel(CamelModel):
    cell_id: str = Field(
        description="The cell ID to change (e.g. 'mainIdea', 'empathize', 'standards-Math')"
    )
    cell_label: str = Field(description="Human-readable cell name for display")
    current_value: str = Field(description="The cell's current content (for diff display)")
    proposed_value: str = Field(description="The proposed new content for this cell")
    rationale: str = Field(description="Brief explanation of why this change improves the board")


class CollaboratorResponse(CamelModel):
    message: str = Field(description="Conversational analysis and explanation to the teacher")
    proposed_changes: list[ProposedChangeModel] = Field(
        description="Specific cell changes to propose; empty array if off-topic or no changes needed"
    )


class CriterionFeedback(CamelModel):
    criterion: str = Field(description="Name of the HQPBL criterion")
    rating: Literal["strong", "developing", "needs_attention"] = Field(description="Rating for this criterion")
    feedback: str = Field(description="Detailed feedback on this criterion")
    suggestions: list[str] = Field(description="1-3 actionable improvement suggestions")
    relevant_cells: list[str] = Field(description="Board cells most relevant to this criterion")


class HqpblFeedback(CamelModel):
    overall_summary: str = Field(description="Overall assessment and most impactful next steps")
    criteria: list[CriterionFeedback] = Field(description="Feedback for each of the 6 HQPBL criteria")


# ── Request bodies ──────────────────────────────────────────────────────────


class GenerateRequest(CamelRequest):
    """
    Cell suggestions for any addressable key.

    `feedback` asks for one revision of the current value; `add_section`
    asks for one new section to append. With neither, 1-3 suggestions.
    """

    board_id: UUID
    cell_id: str = Field(min_length=1)
    feedback: str | None = Field(default=None, max_length=5000)
    add_section: str | None = Field(default=None, max_length=2000)


class GenerateTitleRequest(CamelRequest):
    board_id: UUID


class GenerateBoardRequest(CamelRequest):
    board_id: UUID
    feedback: str | None = Field(default=None, max_length=5000)
    previous_variation: dict[str, Any] | None = None


class GenerateAgendaRequest(CamelRequest):
    board_id: UUID
    num_days: int = Field(ge=1, le=60)


class GenerateLessonRequest(CamelRequest):
    board_id: UUID
    agenda_entry_id: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    period_minutes: int = Field(gt=0, le=600)


class LessonSelection(CamelModel):
    subject: str = Field(min_length=1)
    period_minutes: int = Field(gt=0, le=600)


class GenerateLessonsRequest(CamelRequest):
    board_id: UUID
    agenda_entry_id: str = Field(min_length=1)
    selections: list[LessonSelection] = Field(min_length=1)


class CollaborateRequest(CamelRequest):
    board_id: UUID
    user_message: str = Field(min_length=1, max_length=10000)
    mode: Literal["board", "lessons"] = "board"


class ImproveRequest(CamelRequest):
    board_id: UUID


class StandardsRequest(CamelRequest):
    topic: str = Field(min_length=1, max_length=2000)
    state: str | None = None
    grade_level: str | None = None


# ── Responses ───────────────────────────────────────────────────────────────


class TitleResponse(CamelModel):
    title: str


class VariationResponse(CamelModel):
    variation: dict[str, Any]


class LessonFailure(CamelModel):
    subject: str
    error: str


class LessonBatchResponse(CamelModel):
    created: list[LessonResponse]
    failures: list[LessonFailure]
