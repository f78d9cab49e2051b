"""
Unit Tests for the rubric and submission models.
"""

import pytest

from scorebook.core.models import (
    Assignment,
    Comment,
    Question,
    SelectionSet,
    Student,
    Submission,
    DEFAULT_BASE_SCORE,
)


class TestRubricModels:
    """Tests for Comment, Question and Assignment."""

    def test_find_comment_when_missing_then_returns_none(self, rubric):
        q1 = rubric.find_question("q1")
        assert q1.find_comment("c1").text == "wrong formula"
        assert q1.find_comment("gone") is None

    def test_counts(self, rubric):
        assert rubric.question_count == 2
        assert rubric.comment_count == 4

    def test_with_questions_when_called_then_keeps_id_title_and_extra(self):
        a = Assignment(id="a1", title="Lab", extra={"course": "CS101"})
        edited = a.with_questions((Question(id="q9", title="New"),))
        assert edited.id == "a1"
        assert edited.title == "Lab"
        assert edited.extra == {"course": "CS101"}
        assert [q.id for q in edited.questions] == ["q9"]
        assert a.questions == ()

    def test_to_dict_when_serialized_then_uses_interchange_shape(self, rubric):
        d = rubric.to_dict()
        assert d["id"] == "a1"
        assert d["questions"][0]["comments"][0] == {
            "id": "c1", "text": "wrong formula", "deduction": 10,
        }

    def test_from_dict_when_extra_fields_then_preserved_on_write(self):
        data = {"id": "a1", "title": "Lab", "questions": [], "course": "CS101"}
        a = Assignment.from_dict(data)
        assert a.extra == {"course": "CS101"}
        assert a.to_dict()["course"] == "CS101"

    def test_from_dict_when_optional_fields_missing_then_defaults(self):
        q = Question.from_dict({"id": "q1", "comments": [{"id": "c1"}]})
        assert q.title == ""
        assert q.comments == (Comment(id="c1", text="", deduction=0),)

    def test_roundtrip_when_serialized_then_equal(self, rubric):
        assert Assignment.from_dict(rubric.to_dict()) == rubric

    def test_models_are_frozen(self, rubric):
        with pytest.raises(AttributeError):
            rubric.title = "changed"


class TestSubmissionModel:
    """Tests for Student and Submission."""

    def test_to_dict_when_serialized_then_uses_camel_case_keys(self, make_submission):
        sub = make_submission({"q1": ["c1", "c2"]}, score=85)
        d = sub.to_dict()
        assert d == {
            "id": "sub-1",
            "assignmentId": "a1",
            "student": {"id": "S1", "name": "Ada"},
            "selected": {"q1": ["c1", "c2"]},
            "score": 85,
        }

    def test_from_dict_when_duplicate_selection_ids_then_collapsed(self):
        sub = Submission.from_dict({
            "id": "s1",
            "assignmentId": "a1",
            "student": {"id": "S1", "name": "Ada"},
            "selected": {"q1": ["c1", "c1", "c2"]},
            "score": 90,
        })
        assert sub.selection_for("q1").to_list() == ["c1", "c2"]

    def test_from_dict_when_score_missing_then_base_score(self):
        sub = Submission.from_dict({
            "id": "s1", "assignmentId": "a1", "student": {"id": "S1"},
        })
        assert sub.score == DEFAULT_BASE_SCORE
        assert sub.selected == {}
        assert sub.student == Student(id="S1", name="")

    def test_selection_for_when_question_unselected_then_empty(self, make_submission):
        sub = make_submission()
        assert sub.selection_for("q1") == SelectionSet.empty()

    def test_with_selection_when_list_given_then_new_instance(self, make_submission):
        sub = make_submission({"q1": ["c1"]})
        updated = sub.with_selection("q2", ["c3", "c3"])
        assert updated.selection_for("q2").to_list() == ["c3"]
        assert sub.selection_for("q2") == SelectionSet.empty()

    def test_identity_key(self, make_submission):
        assert make_submission().identity_key == ("a1", "S1")
