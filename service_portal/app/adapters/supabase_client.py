"""
Supabase (PostgREST) data store adapter.
"""

from typing import Any, Dict, List, Mapping, Optional, Union
import httpx

from shared.logging import get_logger
from shared.errors import DataStoreError
from .data_store import DataStore, Order, Row


OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"
# PostgREST code for "JSON object requested, multiple (or no) rows returned".
NO_SINGLE_ROW_CODE = "PGRST116"


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class SupabaseDataStore(DataStore):
    """Table access over the Supabase REST endpoint."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        schema: str = "public",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.schema = schema
        self.timeout = timeout
        self.logger = get_logger("portal.data_store.supabase")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "x-client-info": "finlogic-portal",
                    "Accept-Profile": self.schema,
                    "Content-Profile": self.schema,
                },
            )
        return self._client

    async def start(self) -> None:
        self._get_client()
        self.logger.info("Supabase data store started", base_url=self.base_url)

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self.logger.info("Supabase data store stopped")

    async def health_check(self) -> bool:
        try:
            response = await self._get_client().get("/")
        except httpx.HTTPError:
            return False
        return response.status_code < 500

    async def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Order] = None,
        single: bool = False,
    ) -> Union[List[Row], Optional[Row]]:
        params = {"select": "*", **self._filter_params(filters)}
        if order is not None:
            params["order"] = f"{order.column}.{'asc' if order.ascending else 'desc'}"
        headers = {"Accept": OBJECT_MEDIA_TYPE} if single else {}

        response = await self._request("GET", table, params=params, headers=headers)
        if single and self._is_missing_row(response):
            return None
        self._raise_for_status(response, table)
        return response.json()

    async def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        response = await self._request(
            "POST",
            table,
            json=dict(values),
            headers={"Accept": OBJECT_MEDIA_TYPE, "Prefer": "return=representation"},
        )
        self._raise_for_status(response, table)
        return response.json()

    async def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> Optional[Row]:
        response = await self._request(
            "PATCH",
            table,
            params=self._filter_params(filters),
            json=dict(values),
            headers={"Accept": OBJECT_MEDIA_TYPE, "Prefer": "return=representation"},
        )
        if self._is_missing_row(response):
            return None
        self._raise_for_status(response, table)
        return response.json()

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        if not filters:
            raise DataStoreError(self.name, "Refusing to delete without filters", details={"table": table})
        response = await self._request("DELETE", table, params=self._filter_params(filters))
        self._raise_for_status(response, table)

    def _filter_params(self, filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        return {column: f"eq.{_filter_value(value)}" for column, value in (filters or {}).items()}

    async def _request(self, method: str, table: str, **kwargs) -> httpx.Response:
        try:
            response = await self._get_client().request(method, f"/{table}", **kwargs)
        except httpx.HTTPError as exc:
            self.logger.error("Data store request failed", method=method, table=table, error=str(exc))
            raise DataStoreError(self.name, str(exc), details={"table": table, "method": method}) from exc

        self.logger.debug("Data store request", method=method, table=table, status_code=response.status_code)
        return response

    @staticmethod
    def _error_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text}
        return body if isinstance(body, dict) else {"message": response.text}

    def _is_missing_row(self, response: httpx.Response) -> bool:
        return response.status_code == 406 and self._error_body(response).get("code") == NO_SINGLE_ROW_CODE

    def _raise_for_status(self, response: httpx.Response, table: str) -> None:
        if response.is_success:
            return

        body = self._error_body(response)
        self.logger.error(
            "Data store returned an error",
            table=table,
            status_code=response.status_code,
            code=body.get("code"),
            response=body.get("message"),
        )
        raise DataStoreError(
            self.name,
            body.get("message") or f"Unexpected status {response.status_code}",
            details={"table": table, "status_code": response.status_code, "code": body.get("code")},
        )
