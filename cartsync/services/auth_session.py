# cartsync/services/auth_session.py
from typing import Any, Dict

from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


class AuthSession:
    """
    Logged-in user and bearer token.
    The cart store only reads is_authenticated at call time, it is never notified about changes;
    after login the caller has to run fetch_cart itself.
    """

    def __init__(self):
        self.user: Dict[str, Any] | None = None
        self.token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, user: Dict[str, Any], token: str) -> None:
        if not token:
            raise ValueError("Token must not be empty")
        self.user = dict(user)
        self.token = token
        logger.info(f"Session started for user {self.user.get('id')}")

    def logout(self) -> None:
        if self.user is not None:
            logger.info(f"Session ended for user {self.user.get('id')}")
        self.user = None
        self.token = None

    def update_user(self, **fields: Any) -> None:
        if self.user is None:
            return
        self.user.update(fields)
