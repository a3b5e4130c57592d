# prepwise/routes/analytics_routes.py

from bson import ObjectId
from bson.errors import InvalidId
from flask import Blueprint, current_app, jsonify

from prepwise import analytics
from prepwise.database import QUIZ_ATTEMPTS, QUIZZES, STUDENTS, get_db, populate
from prepwise.utils.auth import current_user, protect, restrict_to

analytics_bp = Blueprint("analytics", __name__)

STUDENT_SUMMARY = {"name": 1, "rollNo": 1, "section": 1, "email": 1}


def _section_students(teacher, projection):
    config = current_app.config
    return list(get_db()[STUDENTS].find({
        "regulation": config["PINNED_REGULATION"],
        "year": config["PINNED_YEAR"],
        "semester": config["PINNED_SEMESTER"],
        "section": teacher["section"],
    }, projection).sort("rollNo", 1))


# =====================================================
# ✅ STUDENTS OF MY SECTION (TEACHER)
# =====================================================
@analytics_bp.get("/students")
@protect
@restrict_to("teacher")
def get_students():
    teacher = current_user()
    db = get_db()
    students = _section_students(teacher, STUDENT_SUMMARY)

    quiz_ids = [q["_id"] for q in db[QUIZZES].find({"createdBy": teacher["_id"]}, {"_id": 1})]
    attempts = list(db[QUIZ_ATTEMPTS].find({
        "student": {"$in": [s["_id"] for s in students]},
        "quiz": {"$in": quiz_ids},
    }))
    counts = analytics.attempt_counts(attempts)

    for s in students:
        s["attemptCount"] = counts.get(s["_id"], 0)

    return jsonify({"success": True, "count": len(students), "data": students}), 200


# =====================================================
# ✅ ONE STUDENT'S PERFORMANCE (TEACHER)
# =====================================================
@analytics_bp.get("/students/<student_id>/performance")
@protect
@restrict_to("teacher")
def get_student_performance(student_id):
    try:
        oid = ObjectId(student_id)
    except InvalidId:
        oid = None

    student = get_db()[STUDENTS].find_one({"_id": oid}, {"name": 1, "rollNo": 1, "section": 1}) if oid else None
    if not student:
        return jsonify({"success": False, "message": "Student not found"}), 404

    attempts = list(get_db()[QUIZ_ATTEMPTS].find({"student": oid}).sort("submittedAt", -1))
    summary = analytics.student_performance(attempts)
    populate(attempts, "quiz", QUIZZES, ["title", "questions", "timeLimit"])

    return jsonify({
        "success": True,
        "data": {"student": student, **summary, "attempts": attempts},
    }), 200


# =====================================================
# ✅ SECTION OVERVIEW (TEACHER)
# =====================================================
@analytics_bp.get("/analytics/overview")
@protect
@restrict_to("teacher")
def get_analytics_overview():
    students = _section_students(current_user(), {"_id": 1})

    attempts = list(get_db()[QUIZ_ATTEMPTS].find(
        {"student": {"$in": [s["_id"] for s in students]}}
    ).sort("submittedAt", -1))
    overview = analytics.section_overview(attempts)

    recent = attempts[:10]
    populate(recent, "student", STUDENTS, ["name", "rollNo", "section"])

    return jsonify({
        "success": True,
        "data": {**overview, "recentAttempts": recent},
    }), 200


# =====================================================
# ✅ MY PERFORMANCE (STUDENT)
# =====================================================
@analytics_bp.get("/my-performance")
@protect
@restrict_to("student")
def get_my_performance():
    attempts = list(get_db()[QUIZ_ATTEMPTS].find({"student": current_user()["_id"]}).sort("submittedAt", -1))
    summary = analytics.my_performance(attempts)

    recent = attempts[:5]
    populate(recent, "quiz", QUIZZES, ["title", "subject", "unit", "timeLimit"])

    return jsonify({
        "success": True,
        "data": {**summary, "recentAttempts": recent},
    }), 200


# =====================================================
# ✅ MY ATTEMPTS (STUDENT)
# =====================================================
@analytics_bp.get("/my-attempts")
@protect
@restrict_to("student")
def get_my_attempts():
    attempts = list(get_db()[QUIZ_ATTEMPTS].find({"student": current_user()["_id"]}).sort("submittedAt", -1))
    populate(attempts, "quiz", QUIZZES, ["title", "subject", "unit", "timeLimit"])

    return jsonify({"success": True, "count": len(attempts), "data": attempts}), 200
