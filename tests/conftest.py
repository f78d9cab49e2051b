import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import scorebook
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from scorebook.core.ids import sequential_ids
from scorebook.core.models import (
    Assignment,
    Comment,
    Question,
    SelectionSet,
    Student,
    Submission,
)
from scorebook.store.storage import MemoryStorage


# Common test fixtures
@pytest.fixture
def rubric() -> Assignment:
    """Two-question rubric: q1 deducts 10 and 5, q2 deducts 2 and 0."""
    return Assignment(
        id="a1",
        title="Lab 1",
        questions=(
            Question(
                id="q1",
                title="Q1",
                comments=(
                    Comment(id="c1", text="wrong formula", deduction=10),
                    Comment(id="c2", text="late", deduction=5),
                ),
            ),
            Question(
                id="q2",
                title="Q2",
                comments=(
                    Comment(id="c3", text="missing units", deduction=2),
                    Comment(id="c4", text="", deduction=0),
                ),
            ),
        ),
    )


@pytest.fixture
def make_submission():
    """Factory for submissions against assignment a1."""
    def _make(selected=None, *, sid="sub-1", student_id="S1", name="Ada",
              assignment_id="a1", score=100):
        return Submission(
            id=sid,
            assignment_id=assignment_id,
            student=Student(id=student_id, name=name),
            selected={qid: SelectionSet.of(ids) for qid, ids in (selected or {}).items()},
            score=score,
        )
    return _make


@pytest.fixture
def ids():
    """Deterministic id generator."""
    return sequential_ids("gen")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()
