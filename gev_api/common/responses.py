"""
Helpers that turn service results and errors into the JSON envelope.
"""
import logging
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status

from gev_api.common.exceptions import AppError
from gev_api.common.schemas import ApiResponse

logger = logging.getLogger(__name__)


def _payload(response: ApiResponse) -> dict:
    # Only top-level empty keys are dropped; nested nulls are part of the data
    content = {"success": response.success}
    if response.success:
        content["data"] = jsonable_encoder(response.data)
        if response.message is not None:
            content["message"] = response.message
        if response.total is not None:
            content["total"] = response.total
    else:
        content["error"] = response.error
    return content


def success_response(data: Any = None, message: Optional[str] = None,
                     total: Optional[int] = None,
                     status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Wrap a service result in the success envelope."""
    return JSONResponse(
        status_code=status_code,
        content=_payload(ApiResponse.ok(data, message=message, total=total)),
    )


def error_response(message: str, status_code: int) -> JSONResponse:
    """Build the failure envelope with the given HTTP status."""
    return JSONResponse(status_code=status_code, content=_payload(ApiResponse.fail(message)))


def app_error_response(exc: AppError) -> JSONResponse:
    return error_response(exc.message, exc.status_code)


def unexpected_error_response(exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving request: %s", exc)
    return error_response("Erro interno do servidor", status.HTTP_500_INTERNAL_SERVER_ERROR)
