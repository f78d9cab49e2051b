"""
Module: grading.markdown

Purpose:
    Markdown rubric codec. Turns an assignment's questions and comments into
    an editable text form and parses edited text back, keeping question and
    comment identity through hidden ``<!-- id:... -->`` markers.

Format::

    # Question title <!-- id:q1 -->
    - Comment text <!-- id:c1 -->
    - Comment text (-5) <!-- id:c2 -->

    # Next question <!-- id:q2 -->

Key Functions:
    - to_markdown(assignment): Serialize questions/comments
    - from_markdown(text, original, id_factory): Parse back into a copy of
      ``original`` with a new question list

Parsing is a two-state machine (no current question / inside question).
Lines it does not recognise are dropped, never rejected.

Dependencies:
    - re (std)
    - enum (std)
    - core.ids: injected identifier generator

Used By:
    - store.gradebook.Gradebook.apply_markdown
    - cli (to-markdown / from-markdown)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..core.ids import IdGenerator, new_id
from ..core.models import Assignment, Comment, Question
from ..core.utils.formatting import format_points

logger = logging.getLogger(__name__)

ID_MARKER = re.compile(r"<!--\s*id:([a-zA-Z0-9-]+)\s*-->")
DEDUCTION = re.compile(r"\(-(\d+)\)")
HEADING_PREFIX = re.compile(r"^#+\s*")
BULLET_PREFIX = re.compile(r"^[-*]\s*")

UNNAMED_QUESTION = "unnamed question"
EMPTY_COMMENT = "Empty"


# ─────────────────────────────────────────────────────────────────────────────
# Serialization
# ─────────────────────────────────────────────────────────────────────────────

def _comment_line(comment: Comment) -> str:
    line = f"- {comment.text}"
    if comment.deduction:
        line += f" (-{format_points(abs(comment.deduction))})"
    return f"{line} <!-- id:{comment.id} -->"


def to_markdown(assignment: Assignment) -> str:
    """
    Serialize an assignment's questions to markdown.

    A ``(-N)`` suffix is only written for non-zero deductions.

    Args:
        assignment: Assignment to render

    Returns:
        Markdown text, question blocks separated by a blank line
    """
    blocks = []
    for question in assignment.questions:
        heading = f"# {question.title} <!-- id:{question.id} -->"
        # Heading line is always newline-terminated, even with no comments
        blocks.append(heading + "\n" + "\n".join(_comment_line(c) for c in question.comments))
    return "\n\n".join(blocks)


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────

class LineKind(Enum):
    """Classification of a non-blank markdown line."""

    HEADING = "heading"
    BULLET = "bullet"
    OTHER = "other"


class ParserState(Enum):
    NO_QUESTION = "no_question"
    IN_QUESTION = "in_question"


@dataclass(frozen=True)
class ClassifiedLine:
    """
    One trimmed line with its id marker split off.

    Attributes:
        kind: What the content starts with
        content: Line text with the first id marker removed, trimmed
        marker_id: Id from the marker, or None
    """

    kind: LineKind
    content: str
    marker_id: Optional[str] = None


def classify_line(line: str) -> ClassifiedLine:
    """
    Split off the id marker and classify what remains.

    Args:
        line: A single non-blank, already trimmed line

    Returns:
        ClassifiedLine
    """
    match = ID_MARKER.search(line)
    marker_id = match.group(1) if match else None
    content = ID_MARKER.sub("", line, count=1).strip()

    if content.startswith("#"):
        kind = LineKind.HEADING
    elif content.startswith("-") or content.startswith("*"):
        kind = LineKind.BULLET
    else:
        kind = LineKind.OTHER
    return ClassifiedLine(kind=kind, content=content, marker_id=marker_id)


def parse_comment_body(content: str) -> tuple[str, int]:
    """
    Split a bullet line into comment text and deduction.

    Only the first ``(-N)`` is treated as the deduction.

    Args:
        content: Bullet line content (marker already removed)

    Returns:
        (text, deduction) with "Empty" substituted for blank text
    """
    body = BULLET_PREFIX.sub("", content, count=1).strip()
    deduction = 0
    match = DEDUCTION.search(body)
    if match:
        deduction = int(match.group(1))
        body = DEDUCTION.sub("", body, count=1).strip()
    return body or EMPTY_COMMENT, deduction


@dataclass
class _RubricParser:
    """Line-at-a-time state machine building the question list."""

    id_factory: IdGenerator
    state: ParserState = ParserState.NO_QUESTION
    questions: list[Question] = field(default_factory=list)
    dropped: int = 0
    _comments: list[Comment] = field(default_factory=list)

    def feed(self, raw_line: str) -> None:
        line = raw_line.strip()
        if not line:
            return

        classified = classify_line(line)
        if classified.kind is LineKind.HEADING:
            self._start_question(classified)
        elif classified.kind is LineKind.BULLET and self.state is ParserState.IN_QUESTION:
            self._add_comment(classified)
        else:
            # Orphaned bullet or unrecognised text
            self.dropped += 1

    def finish(self) -> tuple[Question, ...]:
        self._close_question()
        return tuple(self.questions)

    def _start_question(self, line: ClassifiedLine) -> None:
        self._close_question()
        title = HEADING_PREFIX.sub("", line.content, count=1).strip()
        self.questions.append(
            Question(id=line.marker_id or self.id_factory(), title=title or UNNAMED_QUESTION)
        )
        self.state = ParserState.IN_QUESTION

    def _add_comment(self, line: ClassifiedLine) -> None:
        text, deduction = parse_comment_body(line.content)
        self._comments.append(
            Comment(id=line.marker_id or self.id_factory(), text=text, deduction=deduction)
        )

    def _close_question(self) -> None:
        if self.state is ParserState.IN_QUESTION:
            self.questions[-1] = self.questions[-1].with_comments(tuple(self._comments))
        self._comments = []


def from_markdown(
    text: str,
    original: Assignment,
    id_factory: IdGenerator = new_id,
) -> Assignment:
    """
    Parse markdown back into an assignment.

    The result is ``original`` with only its question list replaced; id,
    title and any other assignment fields are kept. Questions and comments
    keep the id from their marker, or get a fresh one from ``id_factory``.

    Args:
        text: Markdown produced by to_markdown (possibly hand-edited)
        original: Assignment being edited
        id_factory: Source of ids for lines without a marker

    Returns:
        New Assignment

    Example:
        >>> edited = from_markdown("# Q1 <!-- id:q1 -->\\n- late (-5)", rubric)
        >>> edited.questions[0].comments[0].deduction
        5
    """
    parser = _RubricParser(id_factory=id_factory)
    for line in text.split("\n"):
        parser.feed(line)
    questions = parser.finish()

    if parser.dropped:
        logger.debug(f"Markdown parse for {original.id!r} dropped {parser.dropped} line(s)")
    return original.with_questions(questions)
