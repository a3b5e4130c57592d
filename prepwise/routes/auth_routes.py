# prepwise/routes/auth_routes.py

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from prepwise.database import QUIZZES, STUDENTS, SUBMISSIONS, TEACHERS, get_db
from prepwise.models.student import StudentRegistration, student_view
from prepwise.models.teacher import TeacherRegistration, teacher_view
from prepwise.utils.auth import PRINCIPALS, principals_for, protect, restrict_to, current_user
from prepwise.utils.jwt_manager import create_token

logger = logging.getLogger(__name__)

auth = Blueprint("auth", __name__)

TEACHER_FIELDS = ["employeeId", "employeeName", "subjectDealing", "section", "email", "password", "confirmPassword"]
STUDENT_FIELDS = ["name", "rollNo", "section", "year", "email", "password", "confirmPassword"]


def _fail(message, status=400):
    return jsonify({"success": False, "message": message}), status


def _json_object():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _missing(data, fields):
    return any(data.get(k) in (None, "") for k in fields)


def _institutional(email):
    domain = current_app.config["INSTITUTION_EMAIL_DOMAIN"]
    return str(email).strip().lower().endswith(domain.lower())


def _domain_error():
    domain = current_app.config["INSTITUTION_EMAIL_DOMAIN"]
    return _fail(f"Invalid email. Only {domain} emails are allowed.")


# =====================================================
# ✅ REGISTER TEACHER
# =====================================================
@auth.post("/register/teacher")
def register_teacher():
    data = _json_object()
    if data is None:
        return _fail("Request body must be a JSON object")

    if _missing(data, TEACHER_FIELDS):
        return _fail("All fields are required including confirmPassword")

    if data["password"] != data["confirmPassword"]:
        return _fail("Passwords do not match")

    if not _institutional(data["email"]):
        return _domain_error()

    payload = TeacherRegistration.model_validate(data)
    teachers = get_db()[TEACHERS]

    # ❌ Duplicate checks
    if teachers.find_one({"email": payload.email}):
        return _fail("A teacher with this email already exists")
    if teachers.find_one({"employeeId": payload.employeeId}):
        return _fail("Employee ID is already registered")

    now = datetime.utcnow()
    teacher_doc = {
        **payload.model_dump(exclude={"password"}),
        "passwordHash": generate_password_hash(payload.password),
        "role": "teacher",
        "createdAt": now,
        "updatedAt": now,
    }
    teacher_doc["_id"] = teachers.insert_one(teacher_doc).inserted_id
    logger.info(f"Teacher registered: {payload.employeeId}")

    return jsonify({
        "success": True,
        "message": "Teacher registered successfully",
        "token": create_token(teacher_doc["_id"], "teacher"),
        "user": teacher_view(teacher_doc),
    }), 201


# =====================================================
# ✅ REGISTER STUDENT
# =====================================================
@auth.post("/register/student")
def register_student():
    data = _json_object()
    if data is None:
        return _fail("Request body must be a JSON object")

    if _missing(data, STUDENT_FIELDS):
        return _fail("All fields are required including confirmPassword")

    if data["password"] != data["confirmPassword"]:
        return _fail("Passwords do not match")

    try:
        year = int(data["year"])
    except (TypeError, ValueError):
        year = None
    if year not in (1, 2, 3, 4):
        return _fail("Year must be 1, 2, 3, or 4")

    if not _institutional(data["email"]):
        return _domain_error()

    # this deployment only serves one batch, whatever the client sends
    config = current_app.config
    payload = StudentRegistration.model_validate({
        **data,
        "year": config["PINNED_YEAR"],
        "semester": config["PINNED_SEMESTER"],
        "regulation": config["PINNED_REGULATION"],
    })
    students = get_db()[STUDENTS]

    if students.find_one({"email": payload.email}):
        return _fail("A student with this email already exists")
    if students.find_one({"rollNo": payload.rollNo}):
        return _fail("Roll number is already registered")

    now = datetime.utcnow()
    student_doc = {
        **payload.model_dump(exclude={"password"}),
        "passwordHash": generate_password_hash(payload.password),
        "role": "student",
        "createdAt": now,
        "updatedAt": now,
    }
    student_doc["_id"] = students.insert_one(student_doc).inserted_id
    logger.info(f"Student registered: {payload.rollNo}")

    return jsonify({
        "success": True,
        "message": "Student registered successfully",
        "token": create_token(student_doc["_id"], "student"),
        "user": student_view(student_doc),
    }), 201


# =====================================================
# ✅ LOGIN (TEACHER OR STUDENT)
# =====================================================
@auth.post("/login")
def login():
    data = _json_object()
    if data is None:
        return _fail("Request body must be a JSON object")

    if _missing(data, ["email", "password", "role"]):
        return _fail("email, password, and role are required")

    role = data["role"]
    if not isinstance(role, str) or role not in PRINCIPALS:
        return _fail("Role must be 'teacher' or 'student'")

    email = str(data["email"]).lower().strip()
    user = principals_for(role).find_one({"email": email})

    # same answer for unknown email and wrong password
    if not user or not check_password_hash(user["passwordHash"], str(data["password"])):
        logger.info(f"Failed {role} login for {email}")
        return _fail("Invalid credentials", 401)

    return jsonify({
        "success": True,
        "message": "Login successful",
        "token": create_token(user["_id"], user["role"]),
        "user": {
            "id": user["_id"],
            "role": user["role"],
            "email": user["email"],
            "name": user.get("employeeName") or user.get("name"),
        },
    }), 200


# =====================================================
# ✅ MY STUDENTS (TEACHER-SCOPED)
# =====================================================
@auth.get("/my-students")
@protect
@restrict_to("teacher")
def my_students():
    teacher = current_user()
    db = get_db()

    students = list(
        db[STUDENTS].find({"section": teacher["section"]}, {"passwordHash": 0}).sort("rollNo", 1)
    )

    quiz_ids = [q["_id"] for q in db[QUIZZES].find({"createdBy": teacher["_id"]}, {"_id": 1})]
    submissions = list(db[SUBMISSIONS].find(
        {"quiz": {"$in": quiz_ids}},
        {"student": 1, "totalScore": 1, "maxScore": 1},
    ))

    for student in students:
        own = [s for s in submissions if s["student"] == student["_id"]]
        total_score = sum(s["totalScore"] for s in own)
        max_score = sum(s["maxScore"] for s in own)
        student["performance"] = {
            "quizzesAttempted": len(own),
            "totalScore": total_score,
            "maxScore": max_score,
            "averagePercentage": f"{total_score / max_score * 100:.1f}%" if max_score > 0 else "N/A",
        }

    return jsonify({
        "success": True,
        "count": len(students),
        "section": teacher["section"],
        "students": students,
    }), 200
