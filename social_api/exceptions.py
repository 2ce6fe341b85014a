from typing import List, Optional

from fastapi import HTTPException


class ApiError(HTTPException):
    """Base for every error the API reports.

    Rendered as ``{"errors": [{"msg": ...}, ...]}`` by the app-level handler.
    """

    status_code = 500

    def __init__(self, msg: str, errors: Optional[List[dict]] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or type(self).status_code, detail=msg)
        self.errors = errors or [{"msg": msg}]

    def to_dict(self) -> dict:
        return {"errors": self.errors}


class ValidationError(ApiError):
    status_code = 400

    def __init__(self, errors: List[dict]):
        super().__init__(errors[0]["msg"] if errors else "Invalid request", errors=errors)


class AuthError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 400


class InternalError(ApiError):
    status_code = 500

    def __init__(self, msg: str = "Server Error"):
        super().__init__(msg)
