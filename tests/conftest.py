"""
Pytest configuration and shared fixtures.
"""
import pytest

from watchmatch.ids import SequentialIdGenerator
from watchmatch.quiz import process_quiz_completion
from watchmatch.reference import default_reference
from watchmatch.scoring import PairwiseScorer

from profile_builder import NOW


@pytest.fixture(scope="session")
def reference():
    return default_reference()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def scorer(clock):
    return PairwiseScorer(clock=clock)


@pytest.fixture
def max_answers(reference):
    """Highest-scoring option for every question in the bank."""
    answers = []
    for question in reference.questions.values():
        best = max(question.options, key=lambda o: o.points)
        answers.append({"questionId": question.id, "selectedValue": best.value})
    return answers


@pytest.fixture
def min_answers(reference):
    """Lowest-scoring option for every question in the bank."""
    answers = []
    for question in reference.questions.values():
        worst = min(question.options, key=lambda o: o.points)
        answers.append({"questionId": question.id, "selectedValue": worst.value})
    return answers


@pytest.fixture
def make_attempt(clock):
    """Score an answer set with deterministic ids and timestamps."""
    ids = SequentialIdGenerator("quiz")

    def _make(user_id, answers):
        return process_quiz_completion(user_id, answers, id_generator=ids, clock=clock)

    return _make


@pytest.fixture
def opposite_category_compatibility(reference):
    """
    Category similarity between the max_answers and min_answers sets.

    Some questions have no 0-point option, so the lowest answers do not
    always bottom a category out.
    """
    best: dict = {}
    worst: dict = {}
    for question in reference.questions.values():
        points = [o.points for o in question.options]
        best[question.category] = best.get(question.category, 0.0) + max(points)
        worst[question.category] = worst.get(question.category, 0.0) + min(points)
    differences = [(best[c] - worst[c]) / best[c] * 100 for c in best]
    return 100 - sum(differences) / len(differences)
