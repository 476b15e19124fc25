"""Session authentication against the account service."""

from __future__ import annotations

import logging

from aurum_heat.common.constants import AUTH_PATH, AUTH_TOKEN_HEADER, USERS_PATH
from aurum_heat.common.errors import AuthError
from aurum_heat.common.http import Deadline, HttpClient, TimeoutConfig
from aurum_heat.common.models import Credentials, Session

logger = logging.getLogger(__name__)


def _extract_token(response) -> str:
    token = response.headers.get(AUTH_TOKEN_HEADER)
    if token:
        return token
    # Some deployments hand the token back as a cookie instead of a header.
    cookies = getattr(response, "cookies", None)
    if cookies is not None:
        return cookies.get(AUTH_TOKEN_HEADER) or ""
    return ""


def _extract_user_id(response) -> str:
    try:
        payload = response.json()
    except ValueError:
        logger.warning("authentication body is not JSON, continuing without user id")
        return ""
    if not isinstance(payload, dict):
        logger.warning("authentication body is not an object, continuing without user id")
        return ""
    user_id = payload.get("userId")
    if not user_id:
        logger.warning("authentication body has no userId")
        return ""
    return str(user_id)


def authenticate(
    client: HttpClient,
    base_url: str,
    credentials: Credentials,
    *,
    timeout: TimeoutConfig | None = None,
    deadline: Deadline | None = None,
) -> Session:
    """Exchange credentials for a session token and user id.

    Only an HTTP 200 counts as success. A 200 with an unusable body still
    produces a session, with an empty user id.
    """
    response = client.post_json(
        f"{base_url}{AUTH_PATH}",
        {"loginName": credentials.username, "password": credentials.password},
        timeout=timeout,
        deadline=deadline,
    )
    status = response.status_code
    if status != 200:
        raise AuthError(
            f"statuscode from authentication was not 200 but {status}",
            status_code=status,
        )

    token = _extract_token(response)
    if not token:
        logger.warning("authentication succeeded without an %s", AUTH_TOKEN_HEADER)
    return Session(token=token, user_id=_extract_user_id(response))


def require_session(session: Session) -> Session:
    if session.is_empty:
        raise AuthError("no session: authenticate before calling user endpoints")
    if not session.user_id:
        raise AuthError("session has no user id; cannot address user endpoints")
    return session


def users_url(base_url: str, session: Session, endpoint: str) -> str:
    require_session(session)
    return f"{base_url}{USERS_PATH}/{session.user_id}/{endpoint}"
