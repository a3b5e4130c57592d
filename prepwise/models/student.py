# prepwise/models/student.py
from pydantic import BaseModel, Field

from prepwise.models.common import Email, Regulation, Text, UpperText


class StudentRegistration(BaseModel):
    name: Text
    rollNo: UpperText
    section: UpperText
    year: int = Field(ge=1, le=4)
    semester: int = Field(1, ge=1, le=2)
    regulation: Regulation = "R22"
    email: Email
    password: str = Field(min_length=6)


def student_view(student):
    return {
        "id": student["_id"],
        "name": student["name"],
        "rollNo": student["rollNo"],
        "section": student["section"],
        "year": student["year"],
        "email": student["email"],
        "role": student["role"],
    }
