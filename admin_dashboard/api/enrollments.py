"""
Enrollments resource client (read only)
"""

from typing import Optional

from admin_dashboard.api.base import ResourceApi
from admin_dashboard.models.pagination import PagedResult
from admin_dashboard.models.schemas import Enrollment


class EnrollmentsApi(ResourceApi):
    path = "enrollments"
    label = "enrollments"
    record_model = Enrollment

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> PagedResult[Enrollment]:
        return await self._list(page=page, limit=limit)

    async def get(self, enrollment_id: str) -> Enrollment:
        return await self._get(enrollment_id)
