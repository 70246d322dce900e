"""GraphQL executor for sending split operations to an endpoint.

Handles HTTP communication, error handling, and response parsing. Each
request carries only the minimal document of the operation being run.
"""

from collections.abc import Mapping
from typing import Any

import httpx
from graphql import print_ast
from pydantic import BaseModel

from .ir import LoadedDocuments


class GraphQLResponseError(Exception):
    """Exception raised when a response carries GraphQL errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


class GraphQLExecutor:
    """Executes GraphQL operations against an endpoint.

    Examples:
        executor = GraphQLExecutor(url, headers={"Authorization": f"Bearer {token}"})
        data = await executor.execute_operation(loaded, "FeedQuery", {"first": 10})
    """

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the executor.

        Args:
            url: GraphQL endpoint URL
            headers: Extra request headers (auth tokens and the like)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.url = url
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            headers.update(self.headers)

            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self.transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GraphQLExecutor":
        return self

    async def __aexit__(self, *_exc_info):
        await self.close()

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Execute a raw GraphQL query.

        Args:
            query: GraphQL query string
            variables: Query variables
            operation_name: Operation to run when the query holds several

        Returns:
            The 'data' portion of the response

        Raises:
            GraphQLResponseError: If the response contains errors
            httpx.HTTPStatusError: On a non-2xx response
        """
        client = await self._get_client()

        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = self._serialize_variables(variables)
        if operation_name:
            payload["operationName"] = operation_name

        response = await client.post(self.url, json=payload)
        response.raise_for_status()

        result = response.json()

        if result.get("errors"):
            error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
            raise GraphQLResponseError(f"GraphQL errors: {error_messages}", result["errors"])

        return result.get("data") or {}

    async def execute_operation(
        self,
        loaded: LoadedDocuments,
        operation_name: str | None = None,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute one operation of a loaded source.

        Only the operation's minimal document is sent. ``operation_name``
        may be omitted for a source holding a single operation.

        Raises:
            KeyError: If the operation is not part of ``loaded``
        """
        document = loaded.document_for(operation_name)
        return await self.execute(print_ast(document), variables, operation_name)

    def _serialize_variables(self, variables: dict[str, Any]) -> dict[str, Any]:
        """Serialize variables for the GraphQL request.

        Handles Pydantic models by converting them to dicts.
        """
        result = {}
        for key, value in variables.items():
            if value is None:
                continue
            if isinstance(value, BaseModel):
                result[key] = value.model_dump(by_alias=True, exclude_none=True)
            elif isinstance(value, list):
                result[key] = [
                    v.model_dump(by_alias=True, exclude_none=True) if isinstance(v, BaseModel) else v
                    for v in value
                ]
            else:
                result[key] = value
        return result
