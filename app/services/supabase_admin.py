"""
Supabase Auth Admin
===================

Thin client for the Supabase Auth admin REST API (user management),
authenticated with the service role key.
"""

import logging
from typing import Any, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseAdminError(Exception):
    """An admin API call failed."""


class SupabaseAdminClient:
    """Service for Supabase Auth admin operations."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.service_role_key = service_role_key or settings.SUPABASE_SERVICE_ROLE_KEY
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self) -> dict[str, str]:
        """Common headers for admin API calls."""
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        **kwargs: Any,
    ) -> dict:
        async with httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            headers=self._get_headers(),
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.HTTPError as e:
                raise SupabaseAdminError(f"{action} failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
                detail = body.get("msg") or body.get("message") or body.get("error_description")
            except ValueError:
                detail = None
            raise SupabaseAdminError(
                f"{action} failed ({response.status_code}): {detail or response.text[:200]}"
            )
        return response.json()

    async def list_users(self, page: int = 1, per_page: int = 1000) -> list[dict]:
        """List auth users (one page)."""
        data = await self._request(
            "GET",
            "/admin/users",
            "List users",
            params={"page": page, "per_page": per_page},
        )
        return data.get("users", [])

    async def find_user_by_email(self, email: str) -> Optional[dict]:
        """Return the auth user with ``email`` from the first page, if any."""
        users = await self.list_users()
        return next((user for user in users if user.get("email") == email), None)

    async def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
    ) -> dict:
        """Create an auth user."""
        user = await self._request(
            "POST",
            "/admin/users",
            "Create user",
            json={"email": email, "password": password, "email_confirm": email_confirm},
        )
        if not user.get("id"):
            raise SupabaseAdminError("Create user returned no user id")
        logger.info("Created auth user %s", email)
        return user

    async def update_user_by_id(self, user_id: str, attributes: dict[str, Any]) -> dict:
        """Update an auth user's attributes (e.g. password)."""
        return await self._request(
            "PUT",
            f"/admin/users/{user_id}",
            "Update user",
            json=attributes,
        )
