# prepwise/utils/jwt_manager.py
import jwt
from datetime import datetime, timedelta
from flask import current_app

ALGORITHM = "HS256"


def create_token(user_id, role):
    payload = {
        "id": str(user_id),
        "role": role,
        "exp": datetime.utcnow() + timedelta(days=current_app.config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def decode_token(token):
    return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[ALGORITHM])
