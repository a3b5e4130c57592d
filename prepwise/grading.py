# prepwise/grading.py
import math

from prepwise.models.quiz import AUTO_GRADED_TYPES


def round_half_up(value):
    # Python's round() is banker's rounding; percentages here round .5 up
    return int(math.floor(value + 0.5))


def normalise(answer):
    return str(answer).strip().lower()


def grade_submission(questions, answers):
    """
    Evaluate a student's answers against the quiz questions.

    `answers` is a list of {"questionId", "answer"}; questions without a
    matching answer are graded as an empty answer. DESCRIPTIVE questions are
    never auto-graded: they earn 0 points and are marked not correct.

    Returns {"answers", "totalScore", "maxScore", "accuracy"}.
    """
    by_question = {}
    for given in answers:
        by_question.setdefault(str(given.get("questionId")), given.get("answer") or "")

    evaluated = []
    total_score = 0
    max_score = 0
    correct = 0
    auto_graded = 0

    for question in questions:
        points = question.get("points") or 1
        answer = by_question.get(str(question["_id"]), "")
        row = {
            "questionId": question["_id"],
            "answer": answer,
            "isCorrect": False,
            "earnedPoints": 0,
        }
        max_score += points

        if question["type"] in AUTO_GRADED_TYPES:
            auto_graded += 1
            expected = question.get("correctAnswer")
            if answer and expected and normalise(answer) == normalise(expected):
                row["isCorrect"] = True
                row["earnedPoints"] = points
                total_score += points
                correct += 1

        evaluated.append(row)

    accuracy = (
        round_half_up(correct / auto_graded * 100)
        if auto_graded > 0 else 0
    )

    return {
        "answers": evaluated,
        "totalScore": total_score,
        "maxScore": max_score,
        "accuracy": accuracy,
    }
