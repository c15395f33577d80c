"""
Courses resource client
CRUD on /courses plus image upload to /uploads/image
"""

import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

import aiohttp
from pydantic import ValidationError

from admin_dashboard.api.base import ResourceApi, require_id
from admin_dashboard.exceptions import ValidationFailure
from admin_dashboard.models.pagination import PagedResult
from admin_dashboard.models.schemas import Course, UploadResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"title": "Title is required", "description": "Description is required"}
TEXT_FIELDS = ("title", "description", "instructor")
# Empty or zero numbers are left out of the payload
OPTIONAL_NUMBERS = ("price", "priceUSD", "modules")


def build_course_payload(course: Union[Course, Dict[str, Any]], partial: bool = False) -> Dict[str, Any]:
    """
    Validate and clean a course form before it is sent.

    With partial=True only the fields present are checked (update patch).
    Raises ValidationFailure; nothing is sent in that case.
    """
    if isinstance(course, Course):
        model = course
    else:
        try:
            model = Course.model_validate(dict(course))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ValidationFailure(f"Invalid value for {field}", field=field)

    payload = model.model_dump(mode="json", by_alias=True, exclude_none=True, exclude_unset=partial)

    for name in TEXT_FIELDS:
        if isinstance(payload.get(name), str):
            payload[name] = payload[name].strip()

    for name, message in REQUIRED_FIELDS.items():
        if partial and name not in payload:
            continue
        if not payload.get(name):
            raise ValidationFailure(message, field=name)

    for name in OPTIONAL_NUMBERS:
        if name in payload and not payload[name]:
            del payload[name]

    return payload


class CoursesApi(ResourceApi):
    path = "courses"
    label = "courses"
    record_model = Course

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> PagedResult[Course]:
        return await self._list(page=page, limit=limit)

    async def create(self, course: Union[Course, Dict[str, Any]]) -> Course:
        payload = build_course_payload(course)
        body = await self.client.post(self.path, json_body=payload, error_message="Failed to create course")
        created = self._to_record(body, sent=payload)
        logger.info(f"🎓 Course created: {created.title} ({created.identifier})")
        return created

    async def update(self, course_id: str, patch: Union[Course, Dict[str, Any]]) -> Course:
        course_id = require_id(course_id, "course")
        payload = build_course_payload(patch, partial=True)
        body = await self.client.put(self._item_path(course_id), json_body=payload, error_message="Failed to update course")
        return self._to_record(body, sent=payload)

    async def remove(self, course_id: str) -> None:
        course_id = require_id(course_id, "course")
        await self.client.delete(self._item_path(course_id), error_message="Failed to delete course")
        logger.info(f"🗑️ Course {course_id} deleted")

    async def upload_image(
        self,
        file: Union[bytes, BinaryIO, str, Path],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        """Upload an image as multipart form data and return its public URL"""
        if isinstance(file, (str, Path)):
            path = Path(file)
            filename = filename or path.name
            content = path.read_bytes()
        elif isinstance(file, (bytes, bytearray)):
            content = bytes(file)
        else:
            content = file.read()
            filename = filename or Path(getattr(file, "name", "") or "upload").name

        form = aiohttp.FormData()
        form.add_field("file", content, filename=filename or "upload", content_type=content_type)

        body = await self.client.request("POST", "uploads/image", form=form, error_message="Image upload failed")
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        result = UploadResult.model_validate(body if isinstance(body, dict) else {})
        if result.url:
            logger.info(f"🖼️ Image uploaded: {result.url}")
        else:
            logger.warning("⚠️ Upload succeeded but no URL was returned")
        return result
