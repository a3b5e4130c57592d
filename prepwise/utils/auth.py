# prepwise/utils/auth.py
import logging
from functools import wraps

import jwt
from bson import ObjectId
from bson.errors import InvalidId
from flask import g, request

from prepwise.database import STUDENTS, TEACHERS, get_db
from prepwise.utils.errors import Forbidden, Unauthorized
from prepwise.utils.jwt_manager import decode_token

logger = logging.getLogger(__name__)

# role tag -> collection holding that kind of principal
PRINCIPALS = {
    "teacher": TEACHERS,
    "student": STUDENTS,
}


def principals_for(role):
    """Collection for a role, or None when the role is unknown."""
    collection = PRINCIPALS.get(role)
    return get_db()[collection] if collection else None


def bearer_token(req):
    header = req.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header.split(" ", 1)[1].strip() or None


def load_principal(token):
    try:
        payload = decode_token(token)
        user_id = ObjectId(payload["id"])
    except (jwt.PyJWTError, InvalidId, KeyError, TypeError) as e:
        logger.info(f"Rejected token: {e}")
        raise Unauthorized("Not authorized, invalid token")

    principals = principals_for(payload.get("role"))
    if principals is None:
        raise Unauthorized("Invalid token role")

    # the database, not the token, decides who the user is now
    user = principals.find_one({"_id": user_id}, {"passwordHash": 0})
    if not user:
        raise Unauthorized("User no longer exists")
    return user


# =====================================================
# ROUTE DECORATORS
# =====================================================
def protect(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token(request)
        if not token:
            raise Unauthorized("Not authorized, no token provided")
        g.user = load_principal(token)
        return view(*args, **kwargs)

    return wrapper


def restrict_to(*roles):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if g.user["role"] not in roles:
                raise Forbidden(f"Access denied. Only {' or '.join(roles)} can access this.")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user():
    return g.user
