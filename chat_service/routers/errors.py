import logging

from fastapi import HTTPException
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from chat_service.errors import ChatServiceError, TransientStoreError

logger = logging.getLogger(__name__)

TRANSIENT_STORE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


def http_error(error: Exception, context: str) -> HTTPException:
    """Translate a service-layer failure into the HTTP error to return.

    Storage details never reach the client.
    """
    if isinstance(error, TRANSIENT_STORE_ERRORS):
        logger.warning("%s: store unavailable: %s", context, error)
        error = TransientStoreError("Service temporarily unavailable")

    if isinstance(error, ChatServiceError):
        return HTTPException(status_code=error.status_code, detail=error.message)

    logger.error("%s", context, exc_info=error)
    return HTTPException(status_code=500, detail="Internal server error")
