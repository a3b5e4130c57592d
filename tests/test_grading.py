import pytest
from bson import ObjectId

from prepwise.grading import grade_submission, round_half_up


def question(kind, correct=None, points=1, **extra):
    q = {"_id": ObjectId(), "type": kind, "text": "q", "points": points, **extra}
    if correct is not None:
        q["correctAnswer"] = correct
    return q


@pytest.mark.parametrize("value, expected", [
    (0, 0),
    (33.4, 33),
    (66.5, 67),
    (12.5, 13),
    (99.99, 100),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_all_correct():
    questions = [question("MCQ", "2", options=["1", "2"]), question("FITB", "Paris", points=3)]
    answers = [
        {"questionId": str(questions[0]["_id"]), "answer": "2"},
        {"questionId": str(questions[1]["_id"]), "answer": "  PARIS "},
    ]

    graded = grade_submission(questions, answers)
    assert (graded["totalScore"], graded["maxScore"], graded["accuracy"]) == (4, 4, 100)
    assert [a["earnedPoints"] for a in graded["answers"]] == [1, 3]
    assert all(a["isCorrect"] for a in graded["answers"])


def test_descriptive_counts_toward_max_but_not_accuracy():
    questions = [question("FITB", "a"), question("FITB", "b"), question("DESCRIPTIVE", points=10)]
    answers = [
        {"questionId": str(questions[0]["_id"]), "answer": "a"},
        {"questionId": str(questions[1]["_id"]), "answer": "x"},
        {"questionId": str(questions[2]["_id"]), "answer": "essay"},
    ]

    graded = grade_submission(questions, answers)
    assert graded["totalScore"] == 1
    assert graded["maxScore"] == 12
    assert graded["accuracy"] == 50
    assert graded["answers"][2] == {
        "questionId": questions[2]["_id"],
        "answer": "essay",
        "isCorrect": False,
        "earnedPoints": 0,
    }


def test_accuracy_rounds_half_up():
    questions = [question("FITB", "a") for _ in range(3)]
    answers = [{"questionId": str(q["_id"]), "answer": "a"} for q in questions[:2]]
    assert grade_submission(questions, answers)["accuracy"] == 67


def test_unanswered_and_unknown_answers():
    questions = [question("MCQ", "2", options=["1", "2"])]
    answers = [{"questionId": str(ObjectId()), "answer": "2"}]

    graded = grade_submission(questions, answers)
    assert graded["answers"][0]["answer"] == ""
    assert graded["answers"][0]["isCorrect"] is False
    assert graded["accuracy"] == 0


def test_first_answer_for_a_question_wins():
    q = question("FITB", "a")
    answers = [{"questionId": str(q["_id"]), "answer": "a"}, {"questionId": str(q["_id"]), "answer": "b"}]
    assert grade_submission([q], answers)["totalScore"] == 1


def test_empty_answer_never_matches():
    q = question("FITB", "")
    assert grade_submission([q], [{"questionId": str(q["_id"]), "answer": ""}])["totalScore"] == 0


def test_missing_points_default_to_one():
    q = question("FITB", "a")
    del q["points"]
    graded = grade_submission([q], [{"questionId": str(q["_id"]), "answer": "a"}])
    assert (graded["totalScore"], graded["maxScore"]) == (1, 1)
