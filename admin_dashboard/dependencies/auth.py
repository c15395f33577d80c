#!/usr/bin/env python3
"""
Authentication dependencies injected into the API transport
"""

import logging
from typing import Callable, Optional

from admin_dashboard.services.kv_store import MemoryStore

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_KEY = "smartiAdminToken"
DEFAULT_LOGIN_PATH = "/login"


class CredentialProvider:
    """Reads the bearer token from a key/value store on every call"""

    def __init__(self, store: Optional[MemoryStore] = None, key: str = DEFAULT_TOKEN_KEY):
        self.store = store if store is not None else MemoryStore()
        self.key = key

    def get_token(self) -> Optional[str]:
        """Current token, or None when logged out"""
        return self.store.get(self.key)

    def set_token(self, token: str) -> None:
        self.store.set(self.key, token)
        logger.info("🔐 Admin token stored")

    def clear(self) -> None:
        self.store.delete(self.key)
        logger.info("🔓 Admin token cleared")

    def authorization_header(self) -> dict:
        """Authorization header; a missing token is still sent and left to the backend to reject"""
        return {"Authorization": f"Bearer {self.get_token()}"}


class AuthGuard:
    """Handler for HTTP 401 responses: drop the token and ask for a redirect to login"""

    def __init__(
        self,
        credentials: CredentialProvider,
        on_redirect: Optional[Callable[[str], None]] = None,
        login_path: str = DEFAULT_LOGIN_PATH,
    ):
        self.credentials = credentials
        self.on_redirect = on_redirect
        self.login_path = login_path
        self.redirect_requested = False

    def handle_unauthorized(self) -> None:
        logger.warning(f"🚫 Backend rejected credentials, redirecting to {self.login_path}")
        self.credentials.clear()
        self.redirect_requested = True
        if self.on_redirect is not None:
            self.on_redirect(self.login_path)

    def reset(self) -> None:
        self.redirect_requested = False
