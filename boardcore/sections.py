"""
Board Core: Section Parser

Splits a cell's markdown-like text into sections and joins them back.

A header line is a bold run at the start of the (stripped) line, either
bulleted ("- **Title**", "* **Title**") or standalone ("**Title**", except
"**Note..." callouts). Everything up to the next header belongs to that
section. Non-blank text before the first header becomes an intro section
with an empty header.

Each section keeps its exact source lines, so

    serialize(parse_sections(text)) == text

for any text that starts with a header or with non-blank intro text. Every
structural edit (reorder, delete, edit, insert) goes parse -> transform ->
serialize and never re-renders the untouched sections.

Detection is a surface heuristic over bold markers, not a Markdown parser.
Bold text at the start of an ordinary paragraph is read as a new section.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field

_BULLET_HEADER_RE = re.compile(r"^[-*]\s+\*\*[^*]+\*\*")
_STANDALONE_HEADER_RE = re.compile(r"^\*\*[^*]+\*\*")
_BOLD_RE = re.compile(r"(\*\*[^*]+\*\*)")
_SEPARATOR_RE = re.compile(r"^[\s]*[—–:\-]+[\s]*")
_BULLET_RE = re.compile(r"^\s*[-*]\s")
_LIST_MARKER_RE = re.compile(r"^[-*]\s+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


@dataclass
class Section:
    """One header + body unit parsed out of a cell value."""

    header: str
    body: str
    raw_lines: list[str] = field(default_factory=list)

    @property
    def raw_text(self) -> str:
        return "\n".join(self.raw_lines)

    @property
    def is_intro(self) -> bool:
        return not self.header


def is_header_line(line: str) -> bool:
    trimmed = line.strip()
    if _BULLET_HEADER_RE.match(trimmed):
        return True
    return bool(_STANDALONE_HEADER_RE.match(trimmed)) and not trimmed.startswith("**Note")


def split_header_line(line: str) -> tuple[str, str]:
    """
    Split a header line into its bold title and trailing description.

    "- **Community Mapping** — Walk the block" -> ("**Community Mapping**", "Walk the block")
    "**Define**: Narrow the problem"           -> ("**Define**", "Narrow the problem")
    """
    m = _BOLD_RE.search(line)
    if not m:
        return line, ""
    after = line[m.end() :].strip()
    return m.group(1), _SEPARATOR_RE.sub("", after, count=1).strip()


def parse_sections(text: str) -> list[Section] | None:
    """
    Parse `text` into sections.

    Returns None when no header line is present; callers then treat the
    value as unstructured text. Never raises on malformed input.
    """
    lines = text.split("\n")
    sections: list[Section] = []
    header: str | None = None
    body: list[str] = []
    raw: list[str] = []
    first_header = -1

    for i, line in enumerate(lines):
        if is_header_line(line):
            if header is not None:
                sections.append(Section(header, _clean_body(body), raw))
            elif first_header < 0:
                first_header = i
            header, description = split_header_line(line.strip())
            body = [description] if description else []
            raw = [line]
        elif header is not None:
            body.append(line)
            raw.append(line)

    if header is None:
        return None
    sections.append(Section(header, _clean_body(body), raw))

    if first_header > 0:
        intro_lines = lines[:first_header]
        intro = "\n".join(intro_lines).strip()
        if intro:
            sections.insert(0, Section("", intro, intro_lines))
    return sections


def serialize(sections: list[Section]) -> str:
    return "\n".join(s.raw_text for s in sections)


def normalize_body(body: str) -> str:
    """
    Display-only: rewrite each non-blank line that is not already a bullet
    as a top-level "- " bullet. Never persisted.
    """
    if not body:
        return body
    out = []
    for line in body.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            out.append("")
        elif _BULLET_RE.match(line):
            out.append(line)
        else:
            out.append("- " + trimmed)
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Structural edits within one cell
# ---------------------------------------------------------------------------


def reorder_section(text: str, src: int, dst: int) -> str:
    """Move section `src` to position `dst`. Out-of-range indices are a no-op."""
    sections = parse_sections(text)
    if sections is None or src == dst:
        return text
    if not (0 <= src < len(sections) and 0 <= dst < len(sections)):
        return text
    moved = sections.pop(src)
    sections.insert(dst, moved)
    return serialize(sections)


def delete_section(text: str, index: int) -> str:
    """Remove one section. Removing the last remaining section yields ""."""
    sections = parse_sections(text)
    if sections is None or not 0 <= index < len(sections):
        return text
    del sections[index]
    if not sections:
        return ""
    return serialize(sections)


def edit_section(text: str, index: int, new_text: str) -> str:
    """Replace one section's raw lines with `new_text`, leaving the rest verbatim."""
    sections = parse_sections(text)
    if sections is None or not 0 <= index < len(sections):
        return text
    sections[index].raw_lines = new_text.split("\n")
    return serialize(sections)


# ---------------------------------------------------------------------------
# Cross-cell moves
# ---------------------------------------------------------------------------


def remove_raw_text(text: str, raw_text: str) -> str:
    """
    Remove the first verbatim occurrence of `raw_text`, then collapse runs of
    three or more newlines to two and trim.
    """
    return _BLANK_RUN_RE.sub("\n\n", text.replace(raw_text, "", 1)).strip()


def insert_raw_text(text: str, raw_text: str, position: int | None = None) -> str:
    """
    Insert `raw_text` verbatim into `text`.

    With a position, splice it in before chunk `position` (a chunk is a
    header line plus its following lines, with any leading text as its own
    chunk). Without one, or when the position cannot be honored, append it
    on a new line after the trimmed target.
    """
    if position is not None and text:
        chunks = _split_chunks(text)
        if chunks is not None and 0 <= position <= len(chunks):
            chunks.insert(position, raw_text)
            return "\n".join(chunks)
        return text.strip() + "\n" + raw_text
    return text.strip() + "\n" + raw_text if text else raw_text


def move_section_text(
    source: str,
    target: str,
    raw_text: str,
    position: int | None = None,
) -> tuple[str, str]:
    """
    Move a section's exact raw text from `source` into `target`.

    Raises:
        ValueError: If `raw_text` is empty or not present in `source`
    """
    if not raw_text or raw_text not in source:
        raise ValueError("section text not found in source cell")
    return remove_raw_text(source, raw_text), insert_raw_text(target, raw_text, position)


def _clean_body(lines: list[str]) -> str:
    """Dedent the body and drop first-level list markers."""
    dedented = textwrap.dedent("\n".join(lines))
    return "\n".join(_LIST_MARKER_RE.sub("", line, count=1) for line in dedented.split("\n")).strip()


def _split_chunks(text: str) -> list[str] | None:
    """
    Header-delimited chunks covering every line of `text`.

    Chunk indices line up with parse_sections: a leading run of blank
    lines rides along with the first header instead of counting as a chunk.
    """
    chunks: list[list[str]] = []
    current: list[str] = []
    for line in text.split("\n"):
        if is_header_line(line):
            if current:
                chunks.append(current)
            current = [line]
        else:
            current.append(line)
    if current:
        chunks.append(current)
    if not chunks:
        return None
    if len(chunks) > 1 and not is_header_line(chunks[0][0]) and not "".join(chunks[0]).strip():
        chunks[1] = chunks[0] + chunks[1]
        del chunks[0]
    return ["\n".join(c) for c in chunks]
