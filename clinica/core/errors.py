"""
Errores de la API. Cada clase lleva su código HTTP; el despachador
(`clinica.main`) los convierte en `{"error": mensaje}`.
"""


class ApiError(Exception):
    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class ConflictError(ApiError):
    # campo único duplicado o registros dependientes
    status_code = 400


class QueryError(ApiError):
    status_code = 500
