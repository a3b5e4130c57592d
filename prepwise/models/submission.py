# prepwise/models/submission.py
from typing import List

from pydantic import BaseModel, Field, field_validator


class AnswerIn(BaseModel):
    questionId: str
    answer: str = ""

    @field_validator("questionId", "answer", mode="before")
    @classmethod
    def as_text(cls, value):
        return "" if value is None else str(value)


class SubmissionIn(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)
    timeTaken: int = Field(0, ge=0)

    @field_validator("timeTaken", mode="before")
    @classmethod
    def missing_time_is_zero(cls, value):
        return 0 if value in (None, "") else value


def submission_document(quiz, student_id, graded, now):
    return {
        "quiz": quiz["_id"],
        "student": student_id,
        "answers": graded["answers"],
        "totalScore": graded["totalScore"],
        "maxScore": graded["maxScore"],
        "submittedAt": now,
        "createdAt": now,
        "updatedAt": now,
    }


def attempt_document(quiz, student_id, graded, time_taken, now):
    """Denormalised copy of a submission, shaped for the analytics queries."""
    return {
        "student": student_id,
        "quiz": quiz["_id"],
        "subject": quiz["subject"],
        "unit": quiz.get("unit") or 1,
        "regulation": quiz["regulation"],
        "year": quiz["year"],
        "semester": quiz["semester"],
        "score": graded["totalScore"],
        "totalMarks": graded["maxScore"],
        "accuracy": graded["accuracy"],
        "timeTaken": time_taken,
        "submittedAt": now,
        "createdAt": now,
        "updatedAt": now,
    }
