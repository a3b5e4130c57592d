# prepwise/models/teacher.py
from pydantic import BaseModel, Field, field_validator

from prepwise.models.common import Email, Text, UpperText
from prepwise.models.quiz import ALLOWED_SUBJECTS


class TeacherRegistration(BaseModel):
    employeeId: UpperText
    employeeName: Text
    subjectDealing: Text
    section: UpperText
    email: Email
    password: str = Field(min_length=6)

    @field_validator("subjectDealing")
    @classmethod
    def subject_allowed(cls, value):
        if value not in ALLOWED_SUBJECTS:
            raise ValueError(f"Subject must be one of: {', '.join(ALLOWED_SUBJECTS)}")
        return value


def teacher_view(teacher):
    return {
        "id": teacher["_id"],
        "employeeId": teacher["employeeId"],
        "employeeName": teacher["employeeName"],
        "subjectDealing": teacher["subjectDealing"],
        "section": teacher["section"],
        "email": teacher["email"],
        "role": teacher["role"],
    }
