#!/usr/bin/env python3
"""
Scorebook command line.

Works directly on the persisted records in the data directory, so the same
files can be shared with any other scorebook front end.

Usage:
    scorebook list
    scorebook new "Lab 1"
    scorebook to-markdown <assignment-id> -o rubric.md
    scorebook from-markdown <assignment-id> rubric.md
    scorebook grade <assignment-id> S1 --name "Ada" --select q1:c1 q1:c2
    scorebook transcript <submission-id>
    scorebook export-csv <assignment-id> -o grades.csv
    scorebook backup -o backup.json
    scorebook import-backup backup.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from scorebook import __version__
from scorebook.config import ScorebookConfig
from scorebook.core.schemas.validator import ValidationError
from scorebook.core.utils.formatting import format_points
from scorebook.core.utils.serialization import load_json_file
from scorebook.grading.export import assignment_filename, backup_filename, grades_filename
from scorebook.paths import get_settings_path
from scorebook.store.gradebook import Gradebook, MarkdownApplyError

logger = logging.getLogger("scorebook")


class CommandError(Exception):
    """A command could not complete; message is shown to the user."""
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scorebook",
        description="Rubric grading: assignments, deduction comments, scores and transcripts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the scorebook records")
    parser.add_argument("--config", type=Path, help="JSON settings file")
    parser.add_argument("--base-score", type=float, help="Score before deductions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List assignments with submission counts")

    p = sub.add_parser("new", help="Create an assignment")
    p.add_argument("title", nargs="?")

    p = sub.add_parser("score", help="Recompute and show scores for an assignment")
    p.add_argument("assignment_id")

    p = sub.add_parser("transcript", help="Print a submission's transcript")
    p.add_argument("submission_id")

    for name, help_text in (
        ("export-csv", "Write the grade sheet"),
        ("export-json", "Write the assignment document"),
        ("to-markdown", "Write the rubric as markdown"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("assignment_id")
        p.add_argument("-o", "--output", type=Path)

    p = sub.add_parser("backup", help="Write a full backup document")
    p.add_argument("-o", "--output", type=Path)

    p = sub.add_parser("from-markdown", help="Replace an assignment's rubric from markdown")
    p.add_argument("assignment_id")
    p.add_argument("file", type=Path)

    p = sub.add_parser("import-assignment", help="Import an assignment document")
    p.add_argument("file", type=Path)
    p.add_argument("--strict", action="store_true", help="Full JSON Schema validation")

    p = sub.add_parser("import-backup", help="Import a backup (submissions are merged)")
    p.add_argument("file", type=Path)
    p.add_argument("--strict", action="store_true", help="Full JSON Schema validation")

    p = sub.add_parser("grade", help="Add a student and select comments")
    p.add_argument("assignment_id")
    p.add_argument("student_id")
    p.add_argument("--name", default="")
    p.add_argument(
        "--select", nargs="*", default=[], metavar="QID:CID",
        help="Question/comment pairs to select",
    )
    return parser


def _emit(text: str, output: Optional[Path], default_name: Optional[str] = None) -> None:
    if output is None:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return
    if output.is_dir() and default_name:
        output = output / default_name
    output.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {output}")


def _assignment(book: Gradebook, assignment_id: str):
    assignment = book.assignments.get(assignment_id)
    if assignment is None:
        raise CommandError(f"Assignment not found: {assignment_id}")
    return assignment


def run_command(book: Gradebook, args: argparse.Namespace) -> None:
    command = args.command

    if command == "list":
        for a in book.assignments.assignments:
            count = len(book.submissions.for_assignment(a.id))
            print(f"{a.id}\t{a.title}\t{a.question_count} question(s)\t{count} submission(s)")

    elif command == "new":
        print(book.create_assignment(args.title).id)

    elif command == "score":
        _assignment(book, args.assignment_id)
        book.resync(args.assignment_id)
        for s in book.submissions.for_assignment(args.assignment_id):
            print(f"{s.student.id}\t{s.student.name}\t{format_points(s.score)}")

    elif command == "transcript":
        if book.submissions.get(args.submission_id) is None:
            raise CommandError(f"Submission not found: {args.submission_id}")
        print(book.transcript(args.submission_id))

    elif command == "export-csv":
        assignment = _assignment(book, args.assignment_id)
        _emit(book.grades_csv(assignment.id), args.output, grades_filename(assignment))

    elif command == "export-json":
        assignment = _assignment(book, args.assignment_id)
        _emit(book.export_assignment(assignment.id), args.output, assignment_filename(assignment))

    elif command == "to-markdown":
        assignment = _assignment(book, args.assignment_id)
        _emit(book.markdown(assignment.id), args.output)

    elif command == "backup":
        _emit(book.export_backup(), args.output, backup_filename())

    elif command == "from-markdown":
        _assignment(book, args.assignment_id)
        if not args.file.exists():
            raise FileNotFoundError(f"File not found: {args.file}")
        parsed = book.apply_markdown(args.assignment_id, args.file.read_text(encoding="utf-8"))
        print(f"{parsed.question_count} question(s), {parsed.comment_count} comment(s)")

    elif command == "import-assignment":
        assignment = book.import_assignment(load_json_file(args.file), strict=args.strict)
        print(assignment.id)

    elif command == "import-backup":
        book.import_backup(load_json_file(args.file), strict=args.strict)

    elif command == "grade":
        _assignment(book, args.assignment_id)
        submission = book.add_student(args.assignment_id, args.student_id, args.name)
        if args.name and submission.student.name != args.name:
            book.submissions.update_student_name(submission.id, args.name)
        for pair in args.select:
            question_id, sep, comment_id = pair.partition(":")
            if not sep or not question_id or not comment_id:
                raise CommandError(f"Expected QID:CID, got {pair!r}")
            book.toggle_comment(submission.id, question_id, comment_id, True)
        book.resync(args.assignment_id)
        graded = book.submissions.get(submission.id)
        print(f"{graded.id}\t{format_points(graded.score)}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        config = ScorebookConfig.from_file(
            args.config or get_settings_path(),
            data_dir=args.data_dir,
            base_score=args.base_score,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    logger.debug(f"Using data directory {config.data_dir}")
    book = Gradebook.from_config(config)

    try:
        run_command(book, args)
    except (CommandError, ValidationError, MarkdownApplyError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
