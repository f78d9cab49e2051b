"""
Tests for the Gradebook: score syncing, markdown apply and imports.
"""
from datetime import datetime

import pytest

from scorebook.core.schemas import ValidationError
from scorebook.store import gradebook as gradebook_module
from scorebook.store.gradebook import Gradebook, MarkdownApplyError
from scorebook.store.storage import MemoryStorage


@pytest.fixture
def book(storage, ids):
    return Gradebook(storage, id_factory=ids)


@pytest.fixture
def graded(book, rubric, make_submission):
    """Gradebook holding the rubric and one submission with c1 selected."""
    book.assignments.add_assignment(rubric)
    book.submissions.add_submission(make_submission({"q1": ["c1"]}, score=90))
    return book


class TestRubricCommands:

    def test_create_assignment_when_no_title_then_numbered_default(self, book):
        first = book.create_assignment()
        second = book.create_assignment()
        assert first.title == "New assignment (1)"
        assert second.title == "New assignment (2)"
        assert (first.id, second.id) == ("gen-1", "gen-2")

    def test_add_question_when_no_title_then_numbered_default(self, book):
        lab = book.create_assignment("Lab")
        question = book.add_question(lab.id)
        assert question.title == "Question 1"
        assert book.assignments.get(lab.id).questions == (question,)

    def test_add_question_when_unknown_assignment_then_none(self, book):
        assert book.add_question("nope") is None

    def test_rename_when_blank_then_placeholder(self, graded):
        graded.rename_assignment("a1", "   ")
        graded.rename_question("a1", "q1", "")
        assignment = graded.assignments.get("a1")
        assert assignment.title == "Untitled assignment"
        assert assignment.find_question("q1").title == "unnamed question"

    def test_update_comment_when_deduction_changes_then_scores_resync(self, graded):
        graded.update_comment("a1", "q1", "c1", deduction=20)
        assert graded.submissions.get("sub-1").score == 80

    def test_remove_comment_when_selected_then_no_longer_counted(self, graded):
        graded.remove_comment("a1", "q1", "c1")
        assert graded.submissions.get("sub-1").score == 100
        # Selection map is left as it was
        assert graded.submissions.get("sub-1").selection_for("q1").to_list() == ["c1"]

    def test_remove_question_when_selected_then_rescored(self, graded):
        graded.remove_question("a1", "q1")
        assert graded.submissions.get("sub-1").score == 100

    def test_replace_questions_when_applied_then_rescored(self, graded, rubric):
        assert graded.replace_questions("a1", rubric.questions[1:]) is True
        assert [q.id for q in graded.assignments.get("a1").questions] == ["q2"]
        assert graded.submissions.get("sub-1").score == 100

    def test_add_comment_returns_new_comment(self, graded):
        comment = graded.add_comment("a1", "q2", "no diagram", 4)
        assert comment.id == "gen-1"
        assert graded.assignments.get("a1").find_question("q2").comments[-1] == comment

    def test_add_comment_when_unknown_question_then_none(self, graded):
        assert graded.add_comment("a1", "nope", "x", 1) is None

    def test_remove_assignment_when_removed_then_submissions_orphaned(self, graded):
        graded.remove_assignment("a1")
        assert graded.submissions.get("sub-1") is not None
        assert graded.transcript("sub-1") == ""


class TestGrading:

    def test_add_student_then_toggle_then_score(self, graded):
        sub = graded.add_student("a1", "S2", "Grace")
        assert sub.score == 100
        rescored = graded.toggle_comment(sub.id, "q1", "c2", True)
        assert rescored.score == 95
        rescored = graded.toggle_comment(sub.id, "q2", "c3", True)
        assert rescored.score == 93

    def test_toggle_comment_when_unchecked_then_points_restored(self, graded):
        assert graded.toggle_comment("sub-1", "q1", "c1", False).score == 100

    def test_toggle_comment_when_unknown_submission_then_none(self, graded):
        assert graded.toggle_comment("nope", "q1", "c1") is None

    def test_set_question_selection(self, graded):
        sub = graded.set_question_selection("sub-1", "q1", ["c1", "c2"])
        assert sub.score == 85

    def test_base_score_when_configured_then_used(self, storage, rubric):
        book = Gradebook(storage, base_score=50)
        book.assignments.add_assignment(rubric)
        sub = book.add_student("a1", "S1")
        assert sub.score == 50
        assert book.toggle_comment(sub.id, "q1", "c1").score == 40

    def test_transcript(self, graded):
        assert graded.transcript("sub-1") == "# Q1\n\n- wrong formula (-10)"

    def test_transcript_when_unknown_submission_then_empty(self, graded):
        assert graded.transcript("nope") == ""


class TestMarkdown:

    def test_markdown_when_unknown_assignment_then_empty(self, book):
        assert book.markdown("nope") == ""

    def test_apply_markdown_when_deduction_edited_then_rubric_and_scores_updated(self, graded):
        text = graded.markdown("a1").replace("wrong formula (-10)", "wrong formula (-30)")
        parsed = graded.apply_markdown("a1", text)
        assert parsed.find_question("q1").find_comment("c1").deduction == 30
        assert graded.assignments.get("a1") == parsed
        assert graded.submissions.get("sub-1").score == 70

    def test_apply_markdown_when_unknown_assignment_then_key_error(self, book):
        with pytest.raises(KeyError):
            book.apply_markdown("nope", "# Q")

    def test_apply_markdown_when_parser_fails_then_nothing_changes(
        self, graded, rubric, monkeypatch
    ):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(gradebook_module, "from_markdown", broken)
        events = []
        graded.assignments.assignmentsChanged.connect(lambda: events.append(1))

        with pytest.raises(MarkdownApplyError, match="Markdown parsing failed"):
            graded.apply_markdown("a1", "# Anything")

        assert graded.assignments.get("a1") == rubric
        assert events == []


class TestReports:

    def test_grades_csv(self, graded):
        assert graded.grades_csv("a1") == (
            "Student ID,Name,Score,Comments\n"
            'S1,Ada,90,"wrong formula"\n'
        )

    def test_grades_csv_when_unknown_assignment_then_none(self, graded):
        assert graded.grades_csv("nope") is None

    def test_export_backup_contains_both_collections(self, graded):
        text = graded.export_backup(datetime(2024, 1, 2, 3, 4, 5))
        assert '"assignments"' in text
        assert '"submissions"' in text
        assert "2024-01-02T03:04:05" in text


class TestImports:

    def test_import_assignment_when_valid_then_added(self, book, rubric):
        imported = book.import_assignment(rubric.to_dict())
        assert book.assignments.get("a1") == imported == rubric

    def test_import_assignment_when_same_id_then_overwritten_and_rescored(
        self, graded, rubric
    ):
        data = rubric.to_dict()
        data["questions"][0]["comments"][0]["deduction"] = 25
        graded.import_assignment(data)
        assert len(graded.assignments) == 1
        assert graded.submissions.get("sub-1").score == 75

    def test_import_assignment_when_invalid_then_rejected(self, book):
        with pytest.raises(ValidationError):
            book.import_assignment({"id": "x", "questions": []})
        assert len(book.assignments) == 0

    def test_import_backup_merges_submissions(self, graded, rubric, make_submission):
        backup = {
            "assignments": [rubric.to_dict()],
            "submissions": [
                make_submission({"q1": ["c2"]}, sid="other", score=10).to_dict(),
                make_submission(sid="new", student_id="S9", name="Linus").to_dict(),
            ],
        }
        graded.import_backup(backup)

        assert len(graded.assignments) == 1
        merged = graded.submissions.get("sub-1")
        assert merged.selection_for("q1").to_list() == ["c1", "c2"]
        # Scores are recomputed after the merge
        assert merged.score == 85
        assert graded.submissions.get("new").score == 100

    def test_import_backup_when_twice_then_selections_stable(self, graded, rubric, make_submission):
        backup = {
            "assignments": [rubric.to_dict()],
            "submissions": [make_submission({"q2": ["c3"]}).to_dict()],
        }
        graded.import_backup(backup)
        once = graded.submissions.submissions
        graded.import_backup(backup)
        assert graded.submissions.submissions == once

    def test_import_backup_when_any_entry_invalid_then_nothing_applied(self, graded):
        backup = {
            "assignments": [{"id": "a9", "title": "New", "questions": []}],
            "submissions": [{"id": "s", "assignmentId": "a9"}],
        }
        with pytest.raises(ValidationError):
            graded.import_backup(backup)
        assert graded.assignments.get("a9") is None


class TestPersistence:

    def test_reopened_gradebook_sees_same_records(self, graded, storage):
        reopened = Gradebook(storage)
        assert reopened.assignments.assignments == graded.assignments.assignments
        assert reopened.submissions.submissions == graded.submissions.submissions

    def test_separate_storages_are_independent(self, graded):
        assert len(Gradebook(MemoryStorage()).assignments) == 0
