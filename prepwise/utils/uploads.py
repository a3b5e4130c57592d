# prepwise/utils/uploads.py
import os
import re
import time

from werkzeug.utils import secure_filename

from prepwise.utils.errors import ValidationFailed

ALLOWED_EXTENSIONS = {"pdf"}
ALLOWED_MIMETYPE = "application/pdf"

# public URL segment for stored files, independent of UPLOAD_FOLDER
URL_PREFIX = "uploads"


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def subject_folder(subject):
    cleaned = re.sub(r"[^a-zA-Z0-9 _-]", "", (subject or "").strip())
    return cleaned or "General"


def file_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def validate_pdf(files, max_bytes):
    """
    Return the single uploaded PDF under the "file" field, or raise.
    Nothing is written to disk here.
    """
    uploads = [f for f in files.getlist("file") if f and f.filename]
    if not uploads:
        raise ValidationFailed("Please upload a PDF file")
    if len(uploads) > 1 or len(files) > 1:
        raise ValidationFailed("Only one file can be uploaded at a time")

    file = uploads[0]
    if not allowed_file(file.filename) or file.mimetype != ALLOWED_MIMETYPE:
        raise ValidationFailed("Only PDF files are allowed")

    if file_size(file) > max_bytes:
        raise ValidationFailed(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
    return file


def save_pdf(file, upload_root, subject):
    """
    Write the file to <upload_root>/<subject>/<ms timestamp>-<name>.

    Returns the public path under URL_PREFIX, e.g.
    "uploads/Operating System/1718000000000-unit1.pdf".
    """
    folder = subject_folder(subject)
    target_dir = os.path.join(upload_root, folder)
    os.makedirs(target_dir, exist_ok=True)

    filename = f"{int(time.time() * 1000)}-{secure_filename(file.filename) or 'note.pdf'}"
    file.save(os.path.join(target_dir, filename))

    return "/".join([URL_PREFIX, folder, filename])


def remove_upload(upload_root, file_url):
    """Delete a stored file given its relative fileUrl. Missing files are ignored."""
    relative = file_url.replace("\\", "/").split("/", 1)[-1]
    path = os.path.normpath(os.path.join(upload_root, relative))
    if not path.startswith(os.path.normpath(upload_root) + os.sep):
        return False
    if os.path.isfile(path):
        os.remove(path)
        return True
    return False
