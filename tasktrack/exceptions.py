import logging

from rest_framework import status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Log rejected API operations, then defer to DRF's default handling.

    Policy rejections (403), missing rows (404), conflicts (409) and
    validation failures (400) keep DRF's ``{"detail": ...}`` / field-error
    body. Anything DRF does not recognise propagates as a server error.
    """
    response = exception_handler(exc, context)
    view = context.get('view')
    request = context.get('request')
    view_name = view.__class__.__name__ if view is not None else '-'
    user = getattr(request, 'user', None)
    user_id = getattr(user, 'pk', None)

    if response is None:
        logger.exception("Unhandled error in %s (user=%s)", view_name, user_id)
        return None

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s failed with %s: %s", view_name, response.status_code, exc)
    elif response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        logger.warning(
            "%s rejected for user=%s (%s): %s",
            view_name, user_id, response.status_code, exc,
        )
    else:
        logger.info(
            "%s returned %s for user=%s: %s",
            view_name, response.status_code, user_id, exc,
        )
    return response
