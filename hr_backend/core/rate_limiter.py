"""Rate limiting for unauthenticated credential endpoints.

The limiter is built per application from its ``Settings``; routes opt in
with ``Depends(login_rate_limit)``.
"""

import logging

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


def create_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        enabled=settings.RATE_LIMIT_ENABLED,
    )


class RateLimit:
    """Dependency that counts one attempt per client address.

    ``setting`` names the ``Settings`` attribute holding the limit string,
    e.g. ``"10/minute"``; it is read from the app serving the request.
    """

    def __init__(self, setting: str):
        self.setting = setting

    async def __call__(self, request: Request) -> None:
        limiter: Limiter = request.app.state.limiter
        if not limiter.enabled:
            return
        limit = parse(getattr(request.app.state.settings, self.setting))
        client = get_remote_address(request)
        if not limiter.limiter.hit(limit, client, request.url.path):
            logger.warning("Rate limit %s exceeded by %s on %s", limit, client, request.url.path)
            raise RateLimitError("Muitas tentativas. Tente novamente mais tarde.")


login_rate_limit = RateLimit("LOGIN_RATE_LIMIT")
