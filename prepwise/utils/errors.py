# prepwise/utils/errors.py


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


def validation_message(exc):
    """Flatten a pydantic ValidationError into one readable sentence."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        if error["type"] == "missing":
            messages.append(f"{field} is required")
        elif error["type"] == "value_error" or not field:
            messages.append(error["msg"].removeprefix("Value error, "))
        else:
            messages.append(f"{field}: {error['msg']}")
    return ", ".join(messages)
