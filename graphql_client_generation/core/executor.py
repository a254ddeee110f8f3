"""GraphQL executor for executing operations against a GraphQL endpoint.

Handles HTTP communication, error handling, and response parsing. The
generated clients delegate every call to an instance of this class.
"""

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .ir import IROperation, IRSchema
from .query_builder import FieldSelection, QueryBuilder


class GraphQLError(Exception):
    """Raised when a response carries an ``errors`` array."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


class GraphQLExecutor:
    """Executes GraphQL operations against an endpoint.

    Examples:
        executor = GraphQLExecutor(url, auth=BearerAuth(token), schema=ir)
        data = await executor.execute("query { hello }")
        user = await executor.execute_operation(["user"], {"id": "1"})
    """

    def __init__(
        self,
        url: str,
        auth: httpx.Auth | None = None,
        *,
        schema: IRSchema | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the executor.

        Args:
            url: GraphQL endpoint URL
            auth: httpx auth applied to every request, e.g. BearerAuth(token)
            schema: Schema used to build operation documents
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. for tests
        """
        self.url = url
        self.timeout = timeout
        self._auth = auth
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._query_builder: QueryBuilder | None = None
        self._operations: dict[tuple[str, tuple[str, ...]], IROperation] = {}
        self.schema: IRSchema | None = None

        if schema:
            self._init_schema(schema)

    def _init_schema(self, schema: IRSchema):
        """Initialize query builder and operation lookup from schema."""
        self.schema = schema
        self._query_builder = QueryBuilder(schema)
        for op in schema.all_operations:
            self._operations[(op.operation_type, tuple(op.path))] = op

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                auth=self._auth,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Execute a raw GraphQL document.

        Returns:
            The 'data' portion of the response

        Raises:
            GraphQLError: If the response contains errors
            httpx.HTTPStatusError: If the endpoint answers with an HTTP error
        """
        client = await self._get_client()

        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = self._serialize_variables(variables)
        if operation_name:
            payload["operationName"] = operation_name

        logger.debug(f"POST {self.url} operation={operation_name or '<anonymous>'}")
        response = await client.post(self.url, json=payload)
        response.raise_for_status()

        result = response.json()

        if result.get("errors"):
            error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
            logger.warning(f"GraphQL errors from {self.url}: {error_messages}")
            raise GraphQLError(f"GraphQL errors: {error_messages}", result["errors"])

        return result.get("data") or {}

    async def execute_operation(
        self,
        operation_path: list[str],
        variables: dict[str, Any],
        fields: FieldSelection = FieldSelection.ALL,
        operation_type: str | None = None,
    ) -> Any:
        """Execute an operation by its path.

        Args:
            operation_path: Path like ['policy', 'internetFirewall', 'addRule']
            variables: Operation variables keyed by variable name
            fields: Field selection mode
            operation_type: 'query' or 'mutation'; needed only when both
                roots define the same path

        Returns:
            The operation result (extracted from nested response)
        """
        if not self._query_builder:
            raise RuntimeError("Schema not initialized; pass schema= to the executor")

        operation = self.find_operation(operation_path, operation_type)
        query = self._query_builder.build(operation, fields)
        data = await self.execute(query, variables)
        return self._extract_path(data, operation_path)

    def find_operation(self, operation_path: list[str], operation_type: str | None = None) -> IROperation:
        """Look up an operation by path, raising ValueError if unknown."""
        path = tuple(operation_path)
        kinds = (operation_type,) if operation_type else ("query", "mutation")
        for kind in kinds:
            operation = self._operations.get((kind, path))
            if operation:
                return operation
        raise ValueError(f"Unknown operation: {'.'.join(operation_path)}")

    @staticmethod
    def _extract_path(data: dict[str, Any], path: list[str]) -> Any:
        """Extract nested data at the given path."""
        result: Any = data
        for segment in path:
            if not isinstance(result, dict):
                return None
            result = result.get(segment)
        return result

    @staticmethod
    def _serialize_variables(variables: dict[str, Any]) -> dict[str, Any]:
        """Serialize variables for the request, dropping unset ones.

        Pydantic models are dumped by alias; dates, enums, UUIDs and
        decimals become their JSON forms.
        """
        result = {}
        for key, value in variables.items():
            if value is None:
                continue
            if isinstance(value, BaseModel):
                result[key] = value.model_dump(mode="json", by_alias=True, exclude_none=True)
            elif isinstance(value, list):
                result[key] = [
                    v.model_dump(mode="json", by_alias=True, exclude_none=True)
                    if isinstance(v, BaseModel)
                    else to_jsonable_python(v)
                    for v in value
                ]
            else:
                result[key] = to_jsonable_python(value)
        return result
