"""
Bearer credentials for learning history access
"""

import logging

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
TOKEN_SALT = "learning-history"


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value"""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class TokenService:
    """Issues and verifies signed, expiring user tokens"""

    def __init__(self, secret: str, ttl_hours: int = 168):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.serializer = URLSafeTimedSerializer(secret, salt=TOKEN_SALT)
        self.ttl_seconds = ttl_hours * 3600

    def issue_token(self, user_id: int) -> str:
        return self.serializer.dumps(user_id)

    def verify_token(self, token: str | None) -> int | None:
        """Return the user id carried by a valid token, None otherwise"""
        if not token:
            return None

        try:
            user_id = self.serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            logger.debug("Rejected expired token")
            return None
        except BadData:
            logger.debug("Rejected invalid token")
            return None

        try:
            return int(user_id)
        except (TypeError, ValueError):
            return None
