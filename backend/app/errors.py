from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pymysql import MySQLError
from pymysql.err import Error as PyMySQLError

GENERIC_DB_ERROR_MESSAGE = "Database error. Please try again later."


class CareError(Exception):
    """Base class for failures surfaced to the acting user.

    The message is meant to be shown as-is, so keep it human readable.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CareError):
    """Malformed input rejected before any remote call. Never retried."""

    status_code = 400


class NotFoundError(CareError):
    """Referenced entity is absent from the cache or the store."""

    status_code = 404


class FetchError(CareError):
    """Transport or auth failure talking to the store. Not retried internally."""

    status_code = 503


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    - Map CareError subclasses to their status code with the user-facing message.
    - Map stray DB driver exceptions to HTTP 500 with a generic message.
    - Do NOT override HTTPException handling provided by FastAPI.
    """

    @app.exception_handler(CareError)
    async def care_error_handler(request: Request, exc: CareError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(MySQLError)
    async def mysql_error_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: ANN001
        return JSONResponse(status_code=500, content={"detail": GENERIC_DB_ERROR_MESSAGE})

    @app.exception_handler(PyMySQLError)
    async def pymysql_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:  # noqa: ANN001
        return JSONResponse(status_code=500, content={"detail": GENERIC_DB_ERROR_MESSAGE})
