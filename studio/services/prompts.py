"""
Prompt builders for board generation.

Pure string assembly: each builder takes board data and returns the user
prompt for one generation call. The shared PBL system prompt lives in
prompts/pbl_system.md.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from boardcore.cells import ADDITIONAL_PREFIX, DT_ADDITIONAL_PREFIX, STANDARDS_PREFIX, board_cell_keys, get_value
from boardcore.types import (
    DESIGN_THINKING_KEYS,
    INITIAL_PLANNING_KEYS,
    LESSON_SECTION_KEYS,
    LESSON_SECTION_LABELS,
    AgendaEntry,
    BoardContent,
    BoardContext,
    LessonPlan,
    standards_label,
)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Cache loaded prompts in memory (they don't change at runtime)
_cache: dict[str, str] = {}


def _load(name: str) -> str:
    """Load and cache a prompt file."""
    if name not in _cache:
        path = PROMPTS_DIR / f"{name}.md"
        _cache[name] = path.read_text()
    return _cache[name]


def system_prompt() -> str:
    return _load("pbl_system")


BULLET_FORMAT = (
    "Structure your response as a bulleted list. Each key point gets a **bold title** on its own line, "
    "with the description as a sub-bullet on the NEXT line (not on the same line as the title). "
    "Use further sub-bullets for supporting details. No prose paragraphs."
)

# Cells whose content students read; these follow the grade reading level
STUDENT_FACING_CELLS = frozenset(
    {
        "drivingQuestion",
        "empathize",
        "milestoneEmpathize",
        "define",
        "milestoneDefine",
        "ideate",
        "milestoneIdeate",
        "prototypeTest",
        "milestonePrototypeTest",
        "noticeReflect",
        "openingActivity",
    }
)

CELL_PROMPTS: dict[str, str] = {
    "mainIdea": (
        "Generate a main idea or topic for a PBL project. It should connect multiple subjects, matter to "
        "students' real lives, and be rich enough to sustain weeks of inquiry."
    ),
    "standards": (
        "Suggest relevant academic standards for this project. Include content standards and cross-cutting "
        "skills like critical thinking, collaboration, and communication. Standards should connect naturally "
        "to the project, not feel forced."
    ),
    "noticeReflect": (
        "Design a Notice & Reflect activity where students observe, question, and connect to the topic before "
        "diving in. This should get students actively thinking and sharing what they already know, not just "
        "listening."
    ),
    "communityPartners": (
        "Suggest community partners for this PBL project. Based on the project theme and location, identify "
        "specific types of local organizations, businesses, experts, or community members who could contribute. "
        "For each partner, explain how they could be involved (guest speaker, site visit, mentorship, materials, "
        "authentic audience, etc.). Be specific to the location if one is provided."
    ),
    "openingActivity": (
        "Create an engaging hook activity that sparks curiosity and sets up the project. It should be hands-on "
        "(not a lecture or reading), surface what students already know, and connect to their real lives."
    ),
    "drivingQuestion": """Craft a driving question for this PBL project. A well-defined driving question has these qualities:

**Open-Ended**: It can't be answered with a simple yes/no or a quick Google search. It invites exploration, multiple approaches, and ongoing investigation.
  - Good: "How can we design a simple air filtration system using materials at home?"
  - Not: "What is the composition of air?"

**Aligned with Learning Goals**: It connects to the standards and content students need to learn, while also building problem-solving and design thinking skills.
  - Good: "How can we design a habitat that meets the needs of a specific animal in our local area?"
  - Not: "What do animals need to survive?"

**Encourages Inquiry & Engagement**: It makes students want to dig in. It's hands-on, relevant to their everyday lives, and pushes them to explore and experiment.

**Connects to Real-Life Challenges**: It addresses a real problem or issue that students can relate to in their community or world.
  - Good: "How can we travel to school in an environmentally friendly way?"
  - Not: "What types of vehicles are used for transportation?"

Write the driving question at a reading level appropriate for the grade level. Use "How can we..." or "How might we..." framing when possible.""",
    "empathize": (
        "Design activities where students understand the people affected by the problem. Students should talk "
        "to real people, visit places, or use primary sources, not just read about the issue. Think interviews, "
        "community walks, or simulations."
    ),
    "milestoneEmpathize": (
        "Design a checkpoint showing students understand who is affected and what they care about. Could include "
        "empathy maps, interview summaries, or reflections on what they learned from listening to others."
    ),
    "define": (
        "Help students narrow down the specific problem they want to solve. They should synthesize what they "
        "learned in the empathy phase into a clear problem statement, specific enough to act on but open enough "
        "for creative solutions."
    ),
    "milestoneDefine": (
        "Design a checkpoint where students show they've clearly defined the problem. Could include a problem "
        'statement, a "How Might We" question, or a root cause analysis shared with peers.'
    ),
    "ideate": (
        "Design brainstorming activities where students come up with multiple solutions. This is about quantity "
        "and creativity: wild ideas welcome, build on each other's thinking. Make sure every student's voice is "
        "heard."
    ),
    "milestoneIdeate": (
        "Design a checkpoint showing students explored many ideas before picking their direction. Could include "
        "idea boards, a selection matrix, or short pitches explaining why they chose their approach."
    ),
    "prototypeTest": (
        "Plan activities where students build something real and test it with actual users. Build in cycles of: "
        "make it, test it, reflect, improve it. The final product should be shared with a real audience, not "
        "just the teacher."
    ),
    "milestonePrototypeTest": (
        "Design the final milestone where students present their work to a real audience: community members, "
        "experts, or stakeholders. Include time for students to reflect on their process, what they learned, "
        "and the impact of their work."
    ),
    "agendaEventsContent": (
        "Improve the activities for this agenda session. The activities should be specific, hands-on, and "
        "directly connected to the design thinking phase for this session. Include clear steps students will "
        "follow and materials they'll need. Keep activities student-centered and inquiry-driven."
    ),
    "agendaReflection": (
        "Improve the reflection prompt for this agenda session. The reflection should help students process "
        "what they learned, connect to the broader project goals, and prepare for the next session. Use "
        "open-ended questions that promote metacognition and critical thinking."
    ),
    "agendaLeads": (
        "Suggest a short title for this agenda session. It should name what students do in the session in "
        "a few words and fit the design thinking phase it belongs to."
    ),
}

# Labels used in prompt text, which differ slightly from the board labels
_SUMMARY_LABELS: dict[str, str] = {
    "noticeReflect": "Notice & Reflect",
    "communityPartners": "Community Partners",
    "openingActivity": "Opening Activity",
    "drivingQuestion": "Driving Question",
    "empathize": "Empathize",
    "milestoneEmpathize": "Milestone (Empathize)",
    "define": "Define",
    "milestoneDefine": "Milestone (Define)",
    "ideate": "Ideate",
    "milestoneIdeate": "Milestone (Ideate)",
    "prototypeTest": "Prototype & Test",
    "milestonePrototypeTest": "Milestone (Prototype & Test)",
}


def context_lines(context: BoardContext) -> list[str]:
    lines = []
    if context.state:
        lines.append("State: " + context.state)
    if context.grade_level:
        lines.append("Grade Level: " + context.grade_level)
    if context.subjects:
        lines.append("Subjects: " + ", ".join(context.subjects))
    if context.location:
        lines.append("Location: " + context.location)
    return lines


def _context_block(context: BoardContext) -> list[str]:
    lines = context_lines(context)
    if not lines:
        return []
    return ["Project Context:", *lines, ""]


def gather_existing_content(content: BoardContent) -> str:
    """Non-empty cells as "Label: value" lines, or "No content yet."."""
    parts = []
    ip = content.initial_planning
    if ip.main_idea.value:
        parts.append("Main Idea: " + ip.main_idea.value)
    for cell in ip.standards:
        if cell.value:
            parts.append(cell.label + ": " + cell.value)
    for key, label in _SUMMARY_LABELS.items():
        value = get_value(content, key)
        if value:
            parts.append(label + ": " + value)
    return "\n".join(parts) if parts else "No content yet."


def serialize_board(content: BoardContent) -> str:
    """Every cell including empty ones, grouped by board section."""
    ip = content.initial_planning
    parts = ["=== INITIAL PLANNING ===", "Main Idea: " + (ip.main_idea.value or "(empty)")]
    if ip.standards:
        parts += [cell.label + ": " + (cell.value or "(empty)") for cell in ip.standards]
    else:
        parts.append("Standards: (none configured)")
    for key in INITIAL_PLANNING_KEYS[1:]:
        parts.append(_SUMMARY_LABELS[key] + ": " + (get_value(content, key) or "(empty)"))

    parts.append("\n=== DESIGN THINKING ===")
    for key in DESIGN_THINKING_KEYS:
        parts.append(_SUMMARY_LABELS[key] + ": " + (get_value(content, key) or "(empty)"))

    if content.agenda:
        parts.append("\n=== AGENDA ===")
        for i, entry in enumerate(content.agenda):
            parts.append(f"Session {i + 1}: " + (entry.events_content or "(empty)"))
    return "\n".join(parts)


def build_cell_prompt(
    cell_id: str,
    label: str,
    value: str,
    content: BoardContent,
    context: BoardContext,
    feedback: str | None = None,
) -> str:
    """
    Prompt for suggestions on one cell.

    `cell_id` selects the instruction: a fixed cell key, "standards-<subject>",
    "agendaEventsContent" / "agendaReflection" / "agendaLeads", or anything else for a
    generic instruction built from `label`.
    """
    effective_id = cell_id
    if cell_id.startswith(STANDARDS_PREFIX):
        subject = cell_id[len(STANDARDS_PREFIX) :]
        effective_id = "standards"
        cell_prompt = (
            f"Suggest relevant {subject} academic standards for this project. Include specific {subject} "
            "content standards with codes where possible (e.g. CCSS, NGSS, state standards). Standards should "
            "connect naturally to the project theme, not feel forced."
        )
    else:
        cell_prompt = CELL_PROMPTS.get(cell_id) or f"Generate content for the {label} section of a PBL design board."

    lines = [cell_prompt, ""]
    lines += _context_block(context)

    if effective_id in STUDENT_FACING_CELLS and context.grade_level:
        lines.append(
            f"IMPORTANT: This content will be seen by students. Write at a Grade {context.grade_level} reading "
            "level. Use vocabulary and sentence complexity appropriate for that age group."
        )
        lines.append("")

    lines += ["Current board content:", gather_existing_content(content), ""]
    if value:
        lines += ["Current value for this cell: " + json.dumps(value, ensure_ascii=False), "Improve upon or offer alternatives.", ""]
    else:
        lines += ["This cell is currently empty.", ""]

    if feedback:
        lines.append("Teacher feedback on the current content: " + feedback)
        lines.append(
            "Revise the content based on this feedback. Provide exactly 1 suggestion that addresses the feedback. "
            "Keep the rationale short."
        )
    else:
        lines.append(
            "Provide 1-3 suggestions. Each should be specific and actionable. Keep rationales short and in plain "
            "language."
        )
    lines.append(BULLET_FORMAT)
    return "\n".join(lines)


def build_title_feedback(content: BoardContent, context: BoardContext) -> str:
    """Feedback text that turns a cell suggestion call into a title generator."""
    text = (
        "Generate a short, creative, engaging project title (3-8 words) for a PBL board. "
        "The main idea is: " + content.initial_planning.main_idea.value + ". "
    )
    if context.subjects:
        text += "Subjects: " + ", ".join(context.subjects) + ". "
    if context.grade_level:
        text += "Grade level: " + context.grade_level + ". "
    return text + "Return ONLY the title text, no formatting, no quotes, no explanation."


def build_add_section_feedback(description: str) -> str:
    return (
        "Add a NEW section to this cell about: " + description + ". Generate ONLY the new section content "
        "(one bold-header section with sub-bullets). Do NOT repeat any existing content."
    )


def build_lesson_section_feedback(subject: str, period_minutes: int, section_label: str, feedback: str) -> str:
    return (
        f"This is a section of a lesson plan for {subject} ({period_minutes} min period). "
        f"Improve this {section_label} section based on teacher feedback: {feedback}. "
        "Keep it student-centered and inquiry-driven."
    )


def build_board_prompt(
    content: BoardContent,
    context: BoardContext,
    feedback: str | None = None,
    previous_variation: Mapping[str, Any] | None = None,
) -> str:
    """Prompt for one complete board variation, optionally revising a previous one."""
    existing = gather_existing_content(content)
    revising = bool(feedback and previous_variation)

    lines = []
    if revising:
        lines.append("Generate a revised PBL project variation based on the teacher's feedback.")
    else:
        lines.append("Generate one complete PBL project variation for a design board.")
    lines.append("")
    lines += _context_block(context)

    if existing != "No content yet.":
        lines += [
            "The teacher has already filled in some content. Use it as constraints and build upon their ideas:",
            existing,
            "",
        ]

    if revising:
        prev = previous_variation or {}
        lines.append("Previous variation the teacher wants revised:")
        for key, label in (
            ("title", "Title"),
            ("mainIdea", "Main Idea"),
            ("drivingQuestion", "Driving Question"),
            ("empathize", "Empathize"),
            ("define", "Define"),
            ("ideate", "Ideate"),
            ("prototypeTest", "Prototype & Test"),
        ):
            lines.append(f"{label}: {prev.get(key) or ''}")
        lines += [
            "",
            "Teacher's feedback: " + (feedback or ""),
            "",
            "Generate a new variation that addresses this feedback while keeping what worked.",
            "",
        ]

    lines.append("The variation should be a complete, coherent project that fills ALL cells:")
    lines.append("- Main Idea / Topic")
    if context.subjects:
        lines += ["- " + standards_label(subject) for subject in context.subjects]
    else:
        lines.append("- Standards")
    lines += [
        "- Notice & Reflect",
        "- Community Partners",
        "- Opening Activity",
        "- Driving Question",
        "- Empathize",
        "- Milestone: Empathize (checkpoint after empathy phase)",
        "- Define",
        "- Milestone: Define (checkpoint after define phase)",
        "- Ideate",
        "- Milestone: Ideate (checkpoint after ideation phase)",
        "- Prototype & Test",
        "- Milestone: Prototype & Test (final deliverable and presentation)",
        "",
        "The project should meet HQPBL standards.",
    ]
    if context.grade_level:
        lines.append("")
        lines.append(
            "IMPORTANT: Student-facing content (driving question, milestones, activity descriptions) must be "
            f"written at a Grade {context.grade_level} reading level. Match vocabulary and complexity to that age "
            "group. Teacher-facing content like standards can use professional language."
        )
    lines.append("")
    lines.append(
        "Format ALL cell content as bulleted lists. Each key point gets a **bold title** on its own line, with "
        "the description as a sub-bullet on the NEXT line (not on the same line as the title). Use further "
        "sub-bullets for details. No prose paragraphs, scannable bullet lists only."
    )
    return "\n".join(lines)


def build_agenda_prompt(content: BoardContent, context: BoardContext, num_days: int) -> str:
    """Prompt mapping the board onto `num_days` sessions."""
    lines = [f"Map this PBL Design Board into a {num_days}-day agenda. Each day is one school session.", ""]
    lines += _context_block(context)
    lines += [
        "Full Board Content:",
        gather_existing_content(content),
        "",
        f"Create exactly {num_days} sessions that follow this flow:",
        "1. **Day 1**: Opening Activity + Notice & Reflect: hook students and surface prior knowledge",
        "2. **Empathize phase**: Activities from the Empathize cell, ending with the Empathize milestone",
        "3. **Define phase**: Activities from the Define cell, ending with the Define milestone",
        "4. **Ideate phase**: Activities from the Ideate cell, ending with the Ideate milestone",
        "5. **Prototype & Test phase**: Activities from the Prototype & Test cell, ending with the final "
        "milestone/presentation",
        "",
        f"Distribute these phases across {num_days} days proportionally. Milestones should land at natural "
        "breakpoints.",
        "Each session should have a clear title, detailed activities (from the board content), the design phase "
        "it maps to, and a reflection prompt.",
        "",
        "Format eventsContent as bulleted lists. Each key point gets a **bold title** on its own line, with the "
        "description as a sub-bullet on the NEXT line (not on the same line as the title). Keep each session "
        "focused and realistic for one class period.",
    ]
    return "\n".join(lines)


def build_lesson_prompt(
    content: BoardContent,
    context: BoardContext,
    entry: AgendaEntry,
    session_index: int,
    subject: str,
    period_minutes: int,
) -> str:
    """Prompt for one subject's lesson plan for one agenda session."""
    label = standards_label(subject)
    standards_cell = next((c for c in content.initial_planning.standards if c.label == label), None)
    subject_standards = (standards_cell.value if standards_cell else "") or "(no standards specified)"

    lines = [
        f"Generate a detailed lesson plan for a SINGLE class period in {subject}.",
        f"The period is {period_minutes} minutes long.",
        "",
        f"This lesson is for Session {session_index + 1} of a PBL project.",
    ]
    if entry.date:
        lines.append("Design Thinking Phase: " + entry.date)
    if entry.leads:
        lines.append("Session Title: " + entry.leads)
    lines.append("")

    lines += ["Session Activities (from the agenda):", entry.events_content or "(no activities specified)", ""]
    if entry.reflection:
        lines += ["Session Reflection Focus:", entry.reflection, ""]

    lines += _context_block(context)
    lines += [f"{subject} Standards on this board:", subject_standards, ""]
    lines += ["Full PBL Board Content (for context):", gather_existing_content(content), ""]

    lines += [
        "CRITICAL DESIGN REQUIREMENTS:",
        "- This lesson must advance the PBL project. It is NOT a standalone lesson; it is one period within a "
        "larger project arc.",
        "- Activities must be student-centered and inquiry-driven (Dewey, Freire). NO traditional lectures or "
        "worksheets as primary activities.",
        "- Build in student voice and choice (hooks). Students should make meaningful decisions about their "
        "learning.",
        "- Include structured collaboration: productive teamwork, not just 'work in groups' (HQPBL Collaboration "
        "criterion).",
        "- The warm-up/hook must connect to students' lived experiences and activate prior knowledge through "
        "doing, not listening.",
        "- The closing/exit ticket should promote metacognition and reflection (Freire's praxis, the cycle of "
        "action and reflection).",
        "- Differentiation must provide multiple entry points and honor diverse ways of knowing (hooks' engaged "
        "pedagogy).",
        f"- Time allocations in mainActivities MUST add up to approximately {period_minutes} minutes total "
        "(including warm-up and closing).",
        "",
    ]
    if context.grade_level:
        lines += [
            "IMPORTANT: Student-facing content (activities, objectives) must be written at a Grade "
            f"{context.grade_level} reading level.",
            "",
        ]
    lines.append(
        "Format ALL content as bulleted markdown lists. Each key point gets a **bold title** on its own line, "
        "with the description as a sub-bullet on the NEXT line. No prose paragraphs."
    )
    return "\n".join(lines)


def _valid_board_ids(content: BoardContent) -> list[str]:
    keys = board_cell_keys(content)
    lines = ["Initial Planning: " + ", ".join(INITIAL_PLANNING_KEYS)]
    standards = [k for k in keys if k.startswith(STANDARDS_PREFIX)]
    if standards:
        lines.append("Standards: " + ", ".join(standards))
    lines.append("Design Thinking: " + ", ".join(DESIGN_THINKING_KEYS))
    extra = [k for k in keys if k.startswith((ADDITIONAL_PREFIX, DT_ADDITIONAL_PREFIX))]
    if extra:
        lines.append("Additional: " + ", ".join(extra))
    return lines


def build_collaborator_prompt(content: BoardContent, context: BoardContext, user_message: str) -> str:
    """Board-mode collaborator: analysis plus proposed cell edits."""
    lines = [
        "You are an AI collaborator helping a teacher improve their PBL Design Board.",
        "",
        "## IMPORTANT GUARDRAIL",
        "You MUST ONLY respond to requests about the PBL design board, curriculum, pedagogy, teaching, learning "
        "activities, standards, assessments, or educational planning.",
        "If the user's message is unrelated to these topics (e.g., coding, recipes, general knowledge, weather, "
        "personal questions), respond politely declining and redirect them to board-related topics. In that "
        "case, set proposedChanges to an empty array.",
        "",
        "## Project Context",
        *context_lines(context),
        "",
        "## Current Board Content",
        serialize_board(content),
        "",
        "## Valid Cell IDs (use these exact IDs in proposedChanges)",
        *_valid_board_ids(content),
        "",
        "## Your Task",
        "The teacher says: " + json.dumps(user_message, ensure_ascii=False),
        "",
        "Analyze the board and respond with:",
        "1. A conversational `message` explaining your analysis, observations, and reasoning. Write as a "
        "knowledgeable colleague, not a formal report. Use markdown for readability.",
        "2. An array of `proposedChanges`: concrete cell-level edits you recommend. Each change must include:",
        "   - `cellId`: one of the valid cell IDs above",
        '   - `cellLabel`: human-readable name (e.g., "Main Idea", "Empathize")',
        "   - `currentValue`: the cell's current content (copy it exactly from the board above)",
        "   - `proposedValue`: your proposed replacement content (FULL content, not a patch)",
        "   - `rationale`: 1-2 sentences explaining why this change strengthens the board",
        "",
        "## Formatting for proposedValue",
        "All proposed content MUST follow the board's formatting conventions:",
        "- Structure as bulleted lists with **bold titles** on their own line",
        "- Put descriptions on the NEXT line as sub-bullets",
        "- Example:",
        "  - **Community Mapping**",
        "    - Walk through the neighborhood to identify resources",
        "  - **Interview Stakeholders**",
        "    - Students talk to community members affected by the issue",
        "- Never write prose paragraphs. 3-6 top-level bullets per cell.",
        "",
        "## Guidelines",
        "- BE HONEST AND ENCOURAGING. If the board is already strong, say so clearly. Celebrate what's working "
        "well before suggesting any changes.",
        "- DO NOT suggest changes for the sake of suggesting changes. Only propose edits when there is a genuine, "
        "meaningful improvement to be made.",
        "- If the board meets the criteria well and the teacher is looking for validation, it is completely "
        "fine, and preferred, to return 0 proposed changes with an encouraging message about what's strong.",
        "- When you do suggest changes, focus on the highest-impact improvements. Quality over quantity: 1-3 "
        "targeted changes are better than 6 mediocre ones.",
        "- Ground your analysis in HQPBL, Design Thinking, Deeper Learning, and the pedagogical frameworks "
        "(Dewey, hooks, Freire, Doll).",
        "- If student-facing content is proposed, match the reading level to the grade level.",
        "- If the board has empty cells, you may propose content for them.",
        "",
        "## Response Formatting",
        "Structure your `message` using markdown headings (## or ###) to group your thoughts into clear sections. "
        "For example:",
        "- Use a heading for your overall assessment or introduction",
        "- Use headings to group strengths vs. areas for growth",
        "- Use headings before discussing proposed changes",
        "Keep paragraphs short. Use bullet points for lists. Add blank lines between sections for spacing.",
    ]
    return "\n".join(lines)


def build_lesson_collaborator_prompt(
    content: BoardContent,
    context: BoardContext,
    lessons: Sequence[LessonPlan],
    user_message: str,
) -> str:
    """Lesson-mode collaborator: proposed edits address lesson sections only."""
    dt = content.design_thinking
    lines = [
        "You are a friendly, supportive AI collaborator helping a teacher refine their lesson plans for a PBL "
        "project.",
        "Write like a helpful colleague chatting in the teachers' lounge: warm, clear, and practical.",
        "Avoid academic jargon and framework acronyms in your analysis. Use plain language that any teacher "
        "would immediately understand.",
        "You can reference frameworks by name when helpful (e.g., 'Design Thinking' or 'Deeper Learning'), but "
        "explain ideas in everyday terms.",
        "",
        "## IMPORTANT GUARDRAIL",
        "You MUST ONLY respond to requests about lesson plans, curriculum, pedagogy, teaching, learning "
        "activities, standards, assessments, or educational planning.",
        "If the user's message is unrelated to these topics, respond politely declining and redirect them to "
        "lesson-related topics. In that case, set proposedChanges to an empty array.",
        "",
        "## Project Context",
        *context_lines(context),
        "",
        "## PBL Project Summary",
    ]
    if content.initial_planning.main_idea.value:
        lines.append("Main Idea: " + content.initial_planning.main_idea.value)
    if dt.driving_question.value:
        lines.append("Driving Question: " + dt.driving_question.value)
    for label, cell in (
        ("Empathize Phase", dt.empathize),
        ("Define Phase", dt.define),
        ("Ideate Phase", dt.ideate),
        ("Prototype/Test Phase", dt.prototype_test),
    ):
        if cell.value:
            lines.append(f"{label}: {cell.value[:300]}")
    lines.append("")

    standards = [c for c in content.initial_planning.standards if c.value.strip()]
    if standards:
        lines.append("## Standards on the Board")
        lines += [f"{c.label}: {c.value}" for c in standards]
        lines.append("")

    lines.append("## Current Lesson Plans")
    if lessons:
        entries = {e.id: e for e in content.agenda}
        for lesson in lessons:
            entry = entries.get(lesson.agenda_entry_id)
            title = (entry.leads if entry else "") or "Unknown Session"
            phase = f" [{entry.date}]" if entry and entry.date else ""
            lines.append(
                f"--- Lesson: {lesson.subject} ({lesson.period_minutes} min), Session: {title}{phase} "
                f"[ID prefix: lesson-{lesson.id}] ---"
            )
            for key in LESSON_SECTION_KEYS:
                lines.append(f"{LESSON_SECTION_LABELS[key]}: {lesson.content.get(key) or '(empty)'}")
            lines.append("")
    else:
        lines += ["No lesson plans have been generated yet.", ""]

    lines.append("## Valid Cell IDs (use these exact IDs in proposedChanges)")
    if lessons:
        sections = "|".join(LESSON_SECTION_KEYS)
        lines.append(", ".join(f"lesson-{lesson.id}-{{{sections}}}" for lesson in lessons))
    else:
        lines.append("(No lessons available to modify yet)")
    lines.append("")

    lines += [
        "## Your Task",
        "The teacher says: " + json.dumps(user_message, ensure_ascii=False),
        "",
        "Analyze the lesson plans and respond with:",
        "1. A conversational `message`: talk like a supportive colleague. Use plain language. Celebrate what's "
        "working, gently point out gaps, and explain WHY a change would help students. Use markdown for "
        "readability.",
        "2. An array of `proposedChanges`: concrete lesson-level edits you recommend. Each change must include:",
        "   - `cellId`: one of the valid cell IDs above",
        '   - `cellLabel`: human-readable name (e.g., "Math: Main Activities")',
        "   - `currentValue`: the section's current content (copy exactly)",
        "   - `proposedValue`: your proposed replacement (FULL content, not a patch)",
        "   - `rationale`: 1-2 sentences explaining why this change strengthens the lesson",
        "",
        "## Formatting for proposedValue",
        "All proposed content MUST follow lesson formatting conventions:",
        "- Structure as bulleted lists with **bold titles** on their own line",
        "- Put descriptions on the NEXT line as sub-bullets",
        "- For activities, include time allocations (e.g., **Gallery Walk (15 min)**)",
        "- Never write prose paragraphs. Use concise bullet points.",
        "",
        "## Guidelines",
        "- BE VERY CONCISE. Your entire message should be 4-6 sentences total. Teachers are busy.",
        "- Only propose changes when there is a genuine, meaningful improvement. Never propose more than 3 "
        "changes. 1-2 is ideal.",
        "- Ensure activities are student-centered and inquiry-driven (Dewey, Freire). NO traditional lectures or "
        "worksheets as primary activities.",
        "- Check that time allocations add up to the period length.",
        "- Ensure warm-ups connect to students' lived experiences, not just content review.",
        "- Closings should promote metacognition and reflection, not just fact-checking.",
        "- If student-facing content is proposed, match the reading level to the grade level.",
        "",
        "## Response Formatting",
        "Keep your `message` SHORT: no more than 4-6 sentences total. Write in plain, conversational "
        "paragraphs. Think of it as a quick Slack message to a colleague.",
    ]
    return "\n".join(lines)


def build_hqpbl_prompt(content: BoardContent) -> str:
    """Prompt for rating the board against the six HQPBL criteria."""
    lines = [
        "Evaluate this PBL Design Board against the HQPBL framework, Design Thinking methodology, and Deeper "
        "Learning competencies.",
        "",
        serialize_board(content),
        "",
        "Rate each of the 6 HQPBL criteria:",
        "1. Intellectual Challenge & Accomplishment",
        "2. Authenticity",
        "3. Public Product",
        "4. Collaboration",
        "5. Project Management",
        "6. Reflection",
        "",
        "For each criterion, provide:",
        "- A rating: strong, developing, or needs_attention",
        "- Specific feedback grounded in HQPBL, Design Thinking, and the pedagogical frameworks (Dewey, hooks, "
        "Freire, Doll)",
        "- 1-3 concrete suggestions that reference specific Deeper Learning competencies where applicable",
        "- Which cells are most relevant",
        "",
        "Also provide an overall summary with the most impactful next steps.",
    ]
    return "\n".join(lines)


def build_standards_prompt(topic: str, state: str | None = None, grade_level: str | None = None) -> str:
    lines = ["Find relevant academic standards for:", "", "Topic: " + topic]
    if state:
        lines.append("State: " + state)
    if grade_level:
        lines.append("Grade Level: " + grade_level)
    lines += [
        "",
        "Provide 1-3 suggestions of relevant standards with codes and descriptions.",
        BULLET_FORMAT,
    ]
    return "\n".join(lines)
