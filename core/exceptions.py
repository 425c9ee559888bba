from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("teamreg.api")

# Headers DRF sets on error responses that clients rely on
PRESERVED_HEADERS = ("WWW-Authenticate", "Retry-After")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here. `code` carries the machine-readable
    reason (`registration_closed`, `team_code_conflict`, ...).
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        view = context.get("view")
        logger.info(
            f"API error {response.status_code} in {type(view).__name__ if view else 'unknown view'}: "
            f"{response.data}"
        )
        wrapped = Response(
            {
                "success": False,
                "status_code": response.status_code,
                "code": exc.default_code if isinstance(exc, APIException) else None,
                "errors": response.data,
            },
            status=response.status_code,
        )
        for header in PRESERVED_HEADERS:
            if header in response:
                wrapped[header] = response[header]
        return wrapped

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "code": "server_error",
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
