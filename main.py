#!/usr/bin/env python3
"""
Main entry point for the admin dashboard client
Usage: python main.py [overview|orders|payments|enrollments|courses|drafts] [page]
"""

import asyncio
import logging
import os
import sys
from typing import Any, List

from admin_dashboard.api.client import DashboardApi
from admin_dashboard.config import Settings, configure_logging, get_settings
from admin_dashboard.dependencies.auth import CredentialProvider
from admin_dashboard.exceptions import ApiError, AuthenticationError
from admin_dashboard.models.schemas import Course, Draft, Enrollment, Order, Payment
from admin_dashboard.services.dashboard_service import DashboardService
from admin_dashboard.services.draft_editor import DraftEditor
from admin_dashboard.services.kv_store import JsonFileStore
from admin_dashboard.services.list_view import (
    COURSES_PAGE_SIZE,
    ENROLLMENTS_PAGE_SIZE,
    ORDERS_PAGE_SIZE,
    PAYMENTS_PAGE_SIZE,
    PagedListView,
)

logger = logging.getLogger(__name__)

COMMANDS = ("overview", "orders", "payments", "enrollments", "courses", "drafts")


def describe(item: Any) -> str:
    """One line per record for terminal output"""
    if isinstance(item, Order):
        return f"{item.order_id or item.identifier}  {item.customer or '-'}  {item.total or '-'}  [{item.status_label}]"
    if isinstance(item, Payment):
        return f"{item.reference or item.identifier}  {item.email or '-'}  {item.amount}  [{item.status_kind.value}]"
    if isinstance(item, Enrollment):
        courses = ", ".join(ci.course_title or ci.course_id for ci in item.course_items)
        return f"{item.full_name or '-'}  {item.email or '-'}  {courses}  [{item.payment_status or '-'}]"
    if isinstance(item, Course):
        return f"{item.title or '-'}  by {item.instructor or '-'}  {item.price if item.price is not None else ''}"
    if isinstance(item, Draft):
        return f"{item.draft_id}  {item.title or 'Untitled Draft'}  (updated {item.updated_at or '-'})"
    return str(item)


def print_rows(rows: List[Any]) -> None:
    if not rows:
        print("  (nothing to show)")
    for row in rows:
        print(f"  - {describe(row)}")


def build_api(settings: Settings) -> DashboardApi:
    store = JsonFileStore(os.path.join(settings.state_dir, "credentials.json"))
    credentials = CredentialProvider(store, key=settings.token_key)
    if settings.api_token:
        credentials.set_token(settings.api_token)

    def on_redirect(path: str) -> None:
        print(f"Session expired or invalid. Sign in again ({path}).")

    return DashboardApi.from_settings(settings, credentials, on_redirect=on_redirect)


async def show_overview(api: DashboardApi) -> int:
    overview = await DashboardService(api).load_overview()
    print(f"Subscribers: {overview.subscribers_count}")
    print(f"Pending orders (latest {len(overview.recent_orders)}): {overview.pending_orders}")
    print("Recent orders:")
    print_rows(overview.recent_orders)
    print("Recent drafts:")
    print_rows(overview.recent_drafts)
    return 0


async def show_drafts(api: DashboardApi, settings: Settings, page: int) -> int:
    autosave = JsonFileStore(os.path.join(settings.state_dir, "autosave.json"))
    editor = DraftEditor(api.newsletter, autosave, page_size=settings.page_size)
    await editor.load(page)
    if editor.error:
        print(f"Error: {editor.error}")
        return 1
    print(f"Drafts ({editor.state.value}):")
    print_rows(editor.drafts)
    print(f"Page {editor.page}/{editor.total_pages} ({editor.total} total)")
    return 0


async def show_list(api: DashboardApi, command: str, page: int) -> int:
    sources = {
        "orders": (api.orders.list, ORDERS_PAGE_SIZE),
        "payments": (api.payments.list, PAYMENTS_PAGE_SIZE),
        "enrollments": (api.enrollments.list, ENROLLMENTS_PAGE_SIZE),
        "courses": (api.courses.list, COURSES_PAGE_SIZE),
    }
    fetch, page_size = sources[command]
    view = PagedListView(fetch, page_size=page_size, name=command)
    applied = await view.load(page)
    if not applied:
        if view.error:
            print(f"Error: {view.error}")
        return 1
    print(f"{command.capitalize()}:")
    print_rows(view.items)
    print(f"Page {view.page}/{view.total_pages} ({view.total} total)")
    return 0


async def run(argv: List[str]) -> int:
    settings = get_settings()
    configure_logging(settings)

    command = argv[0] if argv else "overview"
    if command not in COMMANDS:
        print(__doc__.strip())
        return 2
    try:
        page = int(argv[1]) if len(argv) > 1 else 1
    except ValueError:
        print(f"Invalid page number: {argv[1]}")
        return 2

    if not settings.api_base_url:
        print("ADMIN_API_BASE_URL is not set")
        return 2

    logger.info(f"🚀 Admin dashboard client: {command} (page {page})")

    async with build_api(settings) as api:
        try:
            if command == "overview":
                return await show_overview(api)
            if command == "drafts":
                return await show_drafts(api, settings, page)
            return await show_list(api, command, page)
        except AuthenticationError:
            return 1
        except ApiError as e:
            print(f"Error: {e.message}")
            return 1


def main() -> None:
    sys.exit(asyncio.run(run(sys.argv[1:])))


if __name__ == "__main__":
    main()
