import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from supabase import Client, ClientOptions, create_client

from app.config.settings import Settings
from app.core.exceptions import UpstreamError, error_message

logger = logging.getLogger(__name__)


async def call_store(fn: Callable[..., Any], *args: Any, timeout: float) -> Any:
    """Run a blocking SDK call in a worker thread, bounded by ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=timeout)
    except asyncio.TimeoutError:
        raise UpstreamError(f"store call timed out after {timeout:g}s")


class SupabaseClients:
    """The two long-lived clients, built once at startup and injected into services."""

    def __init__(self, service: Client, anon: Optional[Client] = None):
        self.service = service
        self.anon = anon

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClients":
        options = ClientOptions(
            postgrest_client_timeout=settings.store_timeout_seconds,
            auto_refresh_token=False,
            persist_session=False,
        )
        service = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key.get_secret_value(),
            options=options,
        )
        anon = None
        if settings.supabase_anon_key:
            anon = create_client(
                settings.supabase_url,
                settings.supabase_anon_key.get_secret_value(),
                options=options,
            )
        return cls(service=service, anon=anon)


class SupabaseTable:
    """Async CRUD over one PostgREST table. Every failure surfaces as UpstreamError."""

    def __init__(self, client: Client, name: str, timeout: float):
        self.client = client
        self.name = name
        self.timeout = timeout

    async def _execute(self, build: Callable[[], Any]) -> Any:
        try:
            return await call_store(lambda: build().execute(), timeout=self.timeout)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(error_message(e))

    async def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._execute(lambda: self.client.table(self.name).insert(row))
        if not result.data:
            raise UpstreamError(f"insert into {self.name} returned no row")
        return result.data[0]

    async def fetch_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        def build():
            query = self.client.table(self.name).select("*")
            for column, value in filters.items():
                query = query.eq(column, value)
            return query.limit(1)

        result = await self._execute(build)
        return result.data[0] if result.data else None

    async def update(self, values: Dict[str, Any], **filters: Any) -> List[Dict[str, Any]]:
        def build():
            query = self.client.table(self.name).update(values)
            for column, value in filters.items():
                query = query.eq(column, value)
            return query

        result = await self._execute(build)
        return result.data or []

    async def delete(self, **filters: Any) -> List[Dict[str, Any]]:
        def build():
            query = self.client.table(self.name).delete()
            for column, value in filters.items():
                query = query.eq(column, value)
            return query

        result = await self._execute(build)
        return result.data or []

    async def list(self, columns: str = "*", order_by: Optional[str] = None) -> List[Dict[str, Any]]:
        def build():
            query = self.client.table(self.name).select(columns)
            if order_by:
                query = query.order(order_by)
            return query

        result = await self._execute(build)
        return result.data or []


class SupabaseStore:
    """Hands out tables bound to the privileged client."""

    def __init__(self, client: Client, timeout: float):
        self.client = client
        self.timeout = timeout

    def table(self, name: str) -> SupabaseTable:
        return SupabaseTable(self.client, name, self.timeout)
