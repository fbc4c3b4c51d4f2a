import httpx
import logging
from urllib.parse import quote

from logitrack.config import Settings
from logitrack.credentials import CredentialProvider, Role, SettingsCredentials, is_config_ready

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
NOTIFICATIONS_TABLE = "notifications"

def eq_filter(column: str, value) -> str:
    return f"{column}=eq.{quote(str(value), safe='')}"

class SupabaseAgent:
    def __init__(self, settings: Settings, credentials: CredentialProvider | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.credentials = credentials or SettingsCredentials(settings)
        self.transport = transport

    def is_ready(self, role: Role) -> bool:
        return is_config_ready(self.settings, self.credentials, role)

    def _headers(self, role: Role, method: str) -> dict:
        key = self.credentials.key_for(role)
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        if method in ("POST", "PATCH"):
            headers["Prefer"] = "return=representation"
        return headers

    def _url(self, table: str, method: str, query: str) -> str:
        base = self.settings.SUPABASE_URL.rstrip("/")
        if not query and method == "GET":
            query = "select=*"
        return f"{base}/rest/v1/{table}" + (f"?{query}" if query else "")

    async def request(self, table: str, method: str = "GET", role: Role = Role.USER, body=None, query: str = ""):
        """Call the REST endpoint with the role's key.

        Returns None when the role is not configured or the call failed in any
        way, [] for an empty 204 answer, otherwise the decoded JSON body.
        """
        if not self.is_ready(role):
            return None

        url = self._url(table, method, query)
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.settings.REMOTE_TIMEOUT) as client:
                response = await client.request(method, url, headers=self._headers(role, method), json=body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, table, e)
            return None

        if response.status_code == 204:
            return []

        if not response.is_success:
            logger.warning("%s %s returned %s: %s", method, table, response.status_code, response.text[:500])
            return None

        if not response.content:
            return []

        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s %s returned a malformed body: %s", method, table, e)
            return None

    async def select_orders(self, role: Role = Role.USER, newest_first: bool = False):
        query = "select=*"
        if newest_first:
            query += "&order=updated_at.desc"
        return await self.request(ORDERS_TABLE, "GET", role, query=query)

    async def find_orders_by_code(self, order_code: str):
        return await self.request(ORDERS_TABLE, "GET", Role.ADMIN, query=f"select=*&{eq_filter('order_code', order_code)}")

    async def insert_order(self, payload: dict):
        return await self.request(ORDERS_TABLE, "POST", Role.ADMIN, body=payload)

    async def update_order(self, order_code: str, payload: dict):
        return await self.request(ORDERS_TABLE, "PATCH", Role.ADMIN, body=payload, query=eq_filter("order_code", order_code))

    async def update_order_by_id(self, order_id: str, payload: dict):
        return await self.request(ORDERS_TABLE, "PATCH", Role.ADMIN, body=payload, query=eq_filter("id", order_id))

    async def delete_order(self, order_id: str):
        return await self.request(ORDERS_TABLE, "DELETE", Role.ADMIN, query=eq_filter("id", order_id))

    async def select_notifications(self, role: Role = Role.USER):
        return await self.request(NOTIFICATIONS_TABLE, "GET", role, query="select=*&order=created_at.desc")
