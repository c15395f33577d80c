"""
One object holding every resource client over a shared transport
"""

import logging
from typing import Callable, Optional

from admin_dashboard.api.courses import CoursesApi
from admin_dashboard.api.enrollments import EnrollmentsApi
from admin_dashboard.api.newsletter import NewsletterApi
from admin_dashboard.api.orders import OrdersApi
from admin_dashboard.api.payments import PaymentsApi
from admin_dashboard.config import Settings
from admin_dashboard.dependencies.auth import AuthGuard, CredentialProvider
from admin_dashboard.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class DashboardApi:
    """Orders, payments, enrollments, newsletter and courses behind one session"""

    def __init__(self, client: ApiClient):
        self.client = client
        self.orders = OrdersApi(client)
        self.payments = PaymentsApi(client)
        self.enrollments = EnrollmentsApi(client)
        self.newsletter = NewsletterApi(client)
        self.courses = CoursesApi(client)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: CredentialProvider,
        on_redirect: Optional[Callable[[str], None]] = None,
    ) -> "DashboardApi":
        guard = AuthGuard(credentials, on_redirect=on_redirect, login_path=settings.login_path)
        client = ApiClient(
            settings.api_base_url,
            credentials,
            auth_guard=guard,
            timeout=settings.request_timeout,
        )
        logger.info(f"🌐 Dashboard API configured for {settings.api_base_url}")
        return cls(client)

    @property
    def auth_guard(self) -> Optional[AuthGuard]:
        return self.client.auth_guard

    async def __aenter__(self) -> "DashboardApi":
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.client.close()

    async def close(self) -> None:
        await self.client.close()
