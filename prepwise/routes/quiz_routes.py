# prepwise/routes/quiz_routes.py

import io
import logging
from datetime import datetime

import pandas as pd
from bson import ObjectId
from bson.errors import InvalidId
from flask import Blueprint, jsonify, request, send_file
from pymongo.errors import DuplicateKeyError, PyMongoError

from prepwise.database import QUIZ_ATTEMPTS, QUIZZES, STUDENTS, SUBMISSIONS, get_db, populate
from prepwise.grading import grade_submission
from prepwise.models.quiz import (
    SCHEDULED,
    QuizIn,
    quiz_document,
    quiz_status,
    quiz_view,
    same_batch,
    student_quiz_view,
)
from prepwise.models.submission import SubmissionIn, attempt_document, submission_document
from prepwise.utils.auth import current_user, protect, restrict_to
from prepwise.utils.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

quiz = Blueprint("quiz", __name__)


def _fail(message, status):
    return jsonify({"success": False, "message": message}), status


def _find_quiz(quiz_id):
    try:
        oid = ObjectId(quiz_id)
    except InvalidId:
        raise NotFound("Quiz not found")
    doc = get_db()[QUIZZES].find_one({"_id": oid})
    if not doc:
        raise NotFound("Quiz not found")
    return doc


# =====================================================
# ✅ CREATE QUIZ (TEACHER)
# =====================================================
@quiz.post("")
@protect
@restrict_to("teacher")
def create_quiz():
    payload = QuizIn.model_validate(request.get_json(silent=True) or {})

    doc = quiz_document(payload, current_user()["_id"], datetime.utcnow())
    doc["_id"] = get_db()[QUIZZES].insert_one(doc).inserted_id
    logger.info(f"Quiz created: {doc['_id']} ({len(doc['questions'])} questions)")

    return jsonify({"success": True, "data": quiz_view(doc)}), 201


# =====================================================
# ✅ LIST QUIZZES
# =====================================================
@quiz.get("")
@protect
def get_quizzes():
    user = current_user()
    db = get_db()

    if user["role"] == "teacher":
        rows = [quiz_view(q) for q in db[QUIZZES].find({"createdBy": user["_id"]}).sort("createdAt", -1)]
        return jsonify({"success": True, "count": len(rows), "data": rows}), 200

    rows = db[QUIZZES].find({
        "regulation": user["regulation"],
        "year": user["year"],
        "semester": user["semester"],
    }).sort("createdAt", -1)

    submitted = {s["quiz"] for s in db[SUBMISSIONS].find({"student": user["_id"]}, {"quiz": 1})}
    now = datetime.utcnow()

    data = []
    for q in rows:
        view = student_quiz_view(q)
        view["isSubmitted"] = q["_id"] in submitted
        view["status"] = quiz_status(q, now)

        # ❌ no questions before the quiz opens
        if view["status"] == SCHEDULED:
            view.pop("questions", None)
        data.append(view)

    return jsonify({"success": True, "count": len(data), "data": data}), 200


# =====================================================
# ✅ GET ONE QUIZ
# =====================================================
@quiz.get("/<quiz_id>")
@protect
def get_quiz(quiz_id):
    user = current_user()
    doc = _find_quiz(quiz_id)

    if user["role"] == "teacher":
        if doc["createdBy"] != user["_id"]:
            return _fail("Unauthorized access", 403)

        submissions = list(get_db()[SUBMISSIONS].find({"quiz": doc["_id"]}).sort("totalScore", -1))
        populate(submissions, "student", STUDENTS, ["name", "rollNo", "section"])

        view = quiz_view(doc)
        view["submissions"] = submissions
        return jsonify({"success": True, "data": view}), 200

    if not same_batch(doc, user):
        return _fail("Unauthorized access", 403)

    now = datetime.utcnow()
    status = quiz_status(doc, now)
    if status == SCHEDULED:
        return _fail("Quiz has not started yet", 403)

    view = student_quiz_view(doc)
    view["status"] = status
    view["isSubmitted"] = get_db()[SUBMISSIONS].find_one(
        {"quiz": doc["_id"], "student": user["_id"]}, {"_id": 1}
    ) is not None
    return jsonify({"success": True, "data": view}), 200


# =====================================================
# ✅ SUBMIT QUIZ (STUDENT, ONCE)
# =====================================================
@quiz.post("/<quiz_id>/submit")
@protect
def submit_quiz(quiz_id):
    user = current_user()
    if user["role"] != "student":
        return _fail("Only students can submit quizzes", 403)

    doc = _find_quiz(quiz_id)

    now = datetime.utcnow()
    if doc.get("startTime") and doc["startTime"] > now:
        return _fail("Quiz has not started yet", 400)
    if doc.get("endTime") and doc["endTime"] < now:
        return _fail("Quiz submission period has ended", 400)

    db = get_db()
    if db[SUBMISSIONS].find_one({"quiz": doc["_id"], "student": user["_id"]}, {"_id": 1}):
        return _fail("You have already submitted this quiz", 400)

    body = request.get_json(silent=True) or {}
    if "answers" in body and not isinstance(body["answers"], list):
        raise ValidationFailed("answers must be an array")
    payload = SubmissionIn.model_validate(body)

    graded = grade_submission(doc["questions"], [a.model_dump() for a in payload.answers])

    submission = submission_document(doc, user["_id"], graded, now)
    try:
        submission["_id"] = db[SUBMISSIONS].insert_one(submission).inserted_id
    except DuplicateKeyError:
        # lost a race with a concurrent submit for the same (quiz, student)
        logger.warning(f"Duplicate submission blocked: quiz={doc['_id']} student={user['_id']}")
        return _fail("You have already submitted this quiz", 400)

    # the submission stands even if the analytics copy cannot be written
    try:
        db[QUIZ_ATTEMPTS].insert_one(attempt_document(doc, user["_id"], graded, payload.timeTaken, now))
    except PyMongoError as e:
        logger.error(f"QuizAttempt not recorded for submission {submission['_id']}: {e}")

    logger.info(
        f"Quiz {doc['_id']} submitted by {user['rollNo']}: "
        f"{graded['totalScore']}/{graded['maxScore']} ({graded['accuracy']}%)"
    )

    return jsonify({
        "success": True,
        "message": "Quiz submitted successfully",
        "data": {
            "submission": submission,
            "result": {
                "score": graded["totalScore"],
                "totalMarks": graded["maxScore"],
                "accuracy": graded["accuracy"],
                "timeTaken": payload.timeTaken,
            },
        },
    }), 201


# =====================================================
# ✅ EXPORT QUIZ RESULTS → EXCEL (CREATOR ONLY)
# =====================================================
@quiz.get("/<quiz_id>/export")
@protect
@restrict_to("teacher")
def export_quiz(quiz_id):
    doc = _find_quiz(quiz_id)
    if doc["createdBy"] != current_user()["_id"]:
        return _fail("Unauthorized access", 403)

    submissions = list(get_db()[SUBMISSIONS].find({"quiz": doc["_id"]}).sort("totalScore", -1))
    if not submissions:
        return _fail("No submissions found", 404)
    populate(submissions, "student", STUDENTS, ["name", "rollNo", "section"])

    rows = []
    for s in submissions:
        student = s["student"] if isinstance(s["student"], dict) else {}
        rows.append([
            student.get("rollNo", ""),
            student.get("name", ""),
            student.get("section", ""),
            s["totalScore"],
            s["maxScore"],
            round(s["totalScore"] / s["maxScore"] * 100, 2) if s["maxScore"] else 0,
            s["submittedAt"],
        ])

    df = pd.DataFrame(
        rows,
        columns=[
            "Roll No", "Name", "Section", "Score",
            "Max Score", "Percentage", "Submitted At"
        ]
    )

    out = io.BytesIO()
    df.to_excel(out, index=False)
    out.seek(0)

    return send_file(
        out,
        as_attachment=True,
        download_name=f"{doc['title']}_results.xlsx",
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
