# prepwise/routes/note_routes.py

import logging
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from flask import Blueprint, current_app, jsonify, request

from prepwise.database import NOTES, TEACHERS, get_db, populate
from prepwise.models.note import NoteIn, note_view
from prepwise.utils.auth import current_user, protect, restrict_to
from prepwise.utils.uploads import remove_upload, save_pdf, validate_pdf

logger = logging.getLogger(__name__)

notes = Blueprint("notes", __name__)


# =====================================================
# ✅ UPLOAD NOTE (TEACHER)
# =====================================================
@notes.post("")
@protect
@restrict_to("teacher")
def create_note():
    config = current_app.config
    file = validate_pdf(request.files, config["MAX_UPLOAD_BYTES"])

    form = request.form
    if not form.get("title") or not form.get("subject") or not form.get("unit"):
        return jsonify({"success": False, "message": "Title, subject, and unit are required"}), 400

    payload = NoteIn.model_validate(form.to_dict())

    file_url = save_pdf(file, config["UPLOAD_FOLDER"], payload.subject)

    now = datetime.utcnow()
    note = {
        **payload.model_dump(),
        "regulation": config["PINNED_REGULATION"],
        "year": config["PINNED_YEAR"],
        "semester": config["PINNED_SEMESTER"],
        "fileUrl": file_url,
        "uploadedBy": current_user()["_id"],
        "createdAt": now,
        "updatedAt": now,
    }
    note["_id"] = get_db()[NOTES].insert_one(note).inserted_id
    logger.info(f"Note uploaded: {file_url}")

    return jsonify({
        "success": True,
        "message": "Note uploaded successfully",
        "note": note_view(note, config["BASE_URL"]),
    }), 201


# =====================================================
# ✅ LIST NOTES (ROLE-SCOPED)
# =====================================================
@notes.get("")
@protect
def get_notes():
    user = current_user()
    db = get_db()
    query = {}

    if user["role"] == "student":
        section_teachers = db[TEACHERS].find({"section": user["section"]}, {"_id": 1})
        query["uploadedBy"] = {"$in": [t["_id"] for t in section_teachers]}
        query["regulation"] = user["regulation"]
        query["year"] = user["year"]
        query["semester"] = user["semester"]
    else:
        query["uploadedBy"] = user["_id"]

    if request.args.get("subject"):
        query["subject"] = request.args["subject"]
    if request.args.get("unit"):
        try:
            query["unit"] = int(request.args["unit"])
        except ValueError:
            return jsonify({"success": False, "message": "Unit must be a number"}), 400

    rows = list(db[NOTES].find(query).sort("createdAt", -1))
    populate(rows, "uploadedBy", TEACHERS, ["employeeName", "subjectDealing", "section"])

    base_url = current_app.config["BASE_URL"]
    return jsonify({
        "success": True,
        "count": len(rows),
        "notes": [note_view(n, base_url) for n in rows],
    }), 200


# =====================================================
# ✅ DELETE NOTE (UPLOADER ONLY)
# =====================================================
@notes.delete("/<note_id>")
@protect
@restrict_to("teacher")
def delete_note(note_id):
    not_found = jsonify({"success": False, "message": "Note not found or unauthorized"}), 404

    try:
        oid = ObjectId(note_id)
    except InvalidId:
        return not_found

    # foreign and missing notes look the same to the caller
    note = get_db()[NOTES].find_one({"_id": oid, "uploadedBy": current_user()["_id"]})
    if not note:
        return not_found

    get_db()[NOTES].delete_one({"_id": oid})
    remove_upload(current_app.config["UPLOAD_FOLDER"], note["fileUrl"])
    logger.info(f"Note deleted: {note_id}")

    return jsonify({"success": True, "message": "Note deleted successfully"}), 200
