"""
Domain error taxonomy and the FastAPI handlers that render it.

Services raise these; routers let them propagate. ``MyPlanError`` subclasses
``ValueError`` so older ``except ValueError`` call sites keep working.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from myplan.logging_config import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class MyPlanError(ValueError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MyPlanError):
    """Bad or missing input"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(MyPlanError):
    """Entity does not exist or does not belong to the caller"""
    status_code = status.HTTP_404_NOT_FOUND


class PolicyViolation(MyPlanError):
    """Business rule rejection"""
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(MyPlanError):
    """Unexpected store failure; message never reaches the client"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE):
        super().__init__(message)


async def myplan_error_handler(request: Request, exc: MyPlanError):
    if isinstance(exc, PersistenceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": GENERIC_ERROR_MESSAGE})

    logger.info("request_rejected", error_type=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MyPlanError, myplan_error_handler)
