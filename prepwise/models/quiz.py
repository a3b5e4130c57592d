# prepwise/models/quiz.py
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, Field, StringConstraints, field_validator, model_validator

from prepwise.models.common import Regulation, Text, to_naive_utc

ALLOWED_SUBJECTS = [
    "Software Engineering",
    "Operating System",
    "Design and Analysis of Algorithm",
    "Computer Organisation",
    "Economics and Engineering Accountancy",
]

AUTO_GRADED_TYPES = ("MCQ", "FITB")

SCHEDULED = "SCHEDULED"
AVAILABLE = "AVAILABLE"
CLOSED = "CLOSED"


# =====================================================
# QUESTIONS (one model per question type)
# =====================================================
class BaseQuestion(BaseModel):
    text: Text
    points: int = Field(1, ge=1)


class McqQuestion(BaseQuestion):
    type: Literal["MCQ"]
    options: List[str]
    correctAnswer: Text

    @field_validator("options")
    @classmethod
    def at_least_two_options(cls, options):
        if len(options) < 2:
            raise ValueError("MCQ questions must have at least 2 options.")
        return options


class FitbQuestion(BaseQuestion):
    type: Literal["FITB"]
    options: List[str] = Field(default_factory=list)
    correctAnswer: Text


class DescriptiveQuestion(BaseQuestion):
    type: Literal["DESCRIPTIVE"]
    options: List[str] = Field(default_factory=list)
    correctAnswer: Optional[str] = None


Question = Annotated[
    Union[McqQuestion, FitbQuestion, DescriptiveQuestion],
    Field(discriminator="type"),
]


# =====================================================
# QUIZ
# =====================================================
class QuizIn(BaseModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]] = None
    subject: Text
    unit: int = Field(1, ge=1, le=5)
    regulation: Regulation = "R22"
    year: int = Field(2, ge=1, le=4)
    semester: int = Field(1, ge=1, le=2)
    questions: List[Question]
    timeLimit: int = Field(30, ge=1, le=180)
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None

    @field_validator("questions")
    @classmethod
    def has_questions(cls, questions):
        if not questions:
            raise ValueError("Quiz must have at least one question")
        return questions

    @field_validator("startTime", "endTime")
    @classmethod
    def naive_utc(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_subject_and_window(self):
        if self.regulation == "R22" and self.subject not in ALLOWED_SUBJECTS:
            raise ValueError(f"Subject must be one of: {', '.join(ALLOWED_SUBJECTS)}")
        if self.startTime and self.endTime and self.endTime <= self.startTime:
            raise ValueError("End time must be after start time")
        return self


def quiz_document(payload: QuizIn, teacher_id, now: datetime) -> dict:
    quiz = payload.model_dump(exclude_none=True)
    for question in quiz["questions"]:
        question["_id"] = ObjectId()
    quiz["createdBy"] = teacher_id
    quiz["createdAt"] = now
    quiz["updatedAt"] = now
    return quiz


# =====================================================
# DERIVED FIELDS
# =====================================================
def total_marks(quiz) -> int:
    return sum(question.get("points") or 1 for question in quiz.get("questions", []))


def quiz_status(quiz, now: datetime) -> str:
    """Status is never stored; it depends only on the clock and the window."""
    start, end = quiz.get("startTime"), quiz.get("endTime")
    if start and start > now:
        return SCHEDULED
    if end and end < now:
        return CLOSED
    return AVAILABLE


def quiz_view(quiz) -> dict:
    view = dict(quiz)
    view["totalMarks"] = total_marks(quiz)
    return view


def student_quiz_view(quiz) -> dict:
    """Same as quiz_view but without any correct answers."""
    view = quiz_view(quiz)
    view["questions"] = [
        {key: value for key, value in question.items() if key != "correctAnswer"}
        for question in quiz.get("questions", [])
    ]
    return view


def same_batch(quiz, student) -> bool:
    return (
        quiz.get("regulation") == student.get("regulation")
        and quiz.get("year") == student.get("year")
        and quiz.get("semester") == student.get("semester")
    )
