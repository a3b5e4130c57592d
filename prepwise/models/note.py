# prepwise/models/note.py
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from prepwise.models.common import Text


class NoteIn(BaseModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    subject: Text
    unit: int = Field(ge=1, le=5)


def full_file_url(file_url: str, base_url: str) -> str:
    """
    Join BASE_URL with the stored path, normalised to start at "uploads/".
    """
    path = file_url.replace("\\", "/")
    if "/uploads/" in path:
        path = "uploads/" + path.split("/uploads/", 1)[1]
    elif "uploads/" in path:
        path = "uploads/" + path.split("uploads/", 1)[1]
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def note_view(note, base_url: str) -> dict:
    view = dict(note)
    view["fullFileUrl"] = full_file_url(note["fileUrl"], base_url)
    return view
