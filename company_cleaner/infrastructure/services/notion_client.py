"""
Name: Notion Document Store Client

Responsibilities:
  - Implement DocumentSource (list block children, paginated)
  - Implement DocumentSink (create page with initial blocks, append blocks)
  - Map Notion block JSON to ContentNode and OutputBlock to Notion JSON
  - Retry reads on rate limits / 5xx / timeouts with backoff, honoring Retry-After
  - Retry writes on rate limits only (create and append are not idempotent)
  - Translate transport failures into the pipeline's error taxonomy

Collaborators:
  - httpx.AsyncClient: HTTP transport (injectable for tests)
  - infrastructure.services.retry: tenacity decorators
  - exceptions: CollaboratorReadError / WriteError / TimeoutError

Constraints:
  - Every call has an explicit timeout
  - child_page / child_database blocks are never descended into
  - At most 100 children per create/append request (caller batches)

Notes:
  - Endpoints: GET blocks/{id}/children, POST pages, PATCH blocks/{id}/children
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

import httpx

from ...config import NOTION_MAX_BATCH_BLOCKS
from ...domain.entities import BlockKind, ChildrenPage, ContentNode, NodeKind, OutputBlock
from ...exceptions import (
    CollaboratorReadError,
    CollaboratorTimeoutError,
    CollaboratorWriteError,
)
from ...logger import logger
from .retry import create_retry_decorator, is_rate_limited, is_transient_error

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"

# R: Linked pages/databases are separate documents, not part of this page
_NON_DESCENDING_TYPES = frozenset({"child_page", "child_database"})


def block_to_node(block: Dict[str, Any]) -> ContentNode:
    """R: Map one Notion block object to a ContentNode."""
    block_type = block.get("type", "")
    data = block.get(block_type) or {}
    spans = tuple(
        span.get("plain_text") or (span.get("text") or {}).get("content", "")
        for span in data.get("rich_text", [])
    )
    return ContentNode(
        id=block.get("id", ""),
        kind=NodeKind.from_type(block_type),
        spans=spans,
        has_children=bool(block.get("has_children"))
        and block_type not in _NON_DESCENDING_TYPES,
        checked=bool(data.get("checked", False)),
    )


def output_block_to_json(block: OutputBlock) -> Dict[str, Any]:
    """R: Map one OutputBlock to a Notion block object."""
    kind = block.kind.value
    if block.kind == BlockKind.DIVIDER:
        return {"object": "block", "type": kind, kind: {}}

    body: Dict[str, Any] = {
        "rich_text": [
            {
                "type": "text",
                "text": {"content": span.text},
                "annotations": {"bold": span.bold},
            }
            for span in block.spans
        ]
    }
    if block.kind == BlockKind.TO_DO:
        body["checked"] = block.checked
    elif block.kind == BlockKind.CODE:
        body["language"] = "plain text"
    return {"object": "block", "type": kind, kind: body}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("code") or payload)[:200]
    return str(payload)[:200]


class NotionClient:
    """
    R: Async Notion API client implementing DocumentSource and DocumentSink.

    The client owns its httpx.AsyncClient; call aclose() at shutdown.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout_seconds: float = 30.0,
        retry_max_attempts: int | None = None,
        retry_base_delay_seconds: float | None = None,
        retry_max_delay_seconds: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not token:
            raise ValueError("token is required for NotionClient")
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )
        self._retry_options = {
            "max_attempts": retry_max_attempts,
            "base_delay": retry_base_delay_seconds,
            "max_delay": retry_max_delay_seconds,
        }

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        response = await self._client.request(method, path, params=params, json=payload)
        response.raise_for_status()
        return response.json()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        retry_on: Callable[[BaseException], bool] = is_transient_error,
    ) -> Dict[str, Any]:
        """
        R: Send one request with retry and return the JSON body.

        Raises:
            CollaboratorTimeoutError: If the last attempt timed out
            httpx.HTTPStatusError / httpx.HTTPError: Left for the caller to map
        """
        send = create_retry_decorator(
            operation=operation, retry_on=retry_on, **self._retry_options
        )(self._send)
        try:
            return await send(method, path, params=params, payload=payload)
        except httpx.TimeoutException as e:
            logger.error(
                "Notion call timed out",
                extra={"operation": operation, "timeout_seconds": self.timeout_seconds},
            )
            raise CollaboratorTimeoutError(
                f"Notion {operation} timed out after {self.timeout_seconds}s",
                operation=operation,
                original_error=e,
            ) from e

    # ------------------------------------------------------------------
    # DocumentSource
    # ------------------------------------------------------------------

    async def list_children(
        self, node_id: str, *, page_size: int = 100, cursor: Optional[str] = None
    ) -> ChildrenPage:
        params: Dict[str, Any] = {"page_size": page_size}
        if cursor:
            params["start_cursor"] = cursor

        try:
            data = await self._request(
                "list_children", "GET", f"/blocks/{node_id}/children", params=params
            )
        except httpx.HTTPStatusError as e:
            raise CollaboratorReadError(
                f"Listing children of {node_id} failed "
                f"(HTTP {e.response.status_code}): {_error_message(e.response)}",
                status_code=e.response.status_code,
                original_error=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise CollaboratorReadError(
                f"Listing children of {node_id} failed: {e}", original_error=e
            ) from e

        return ChildrenPage(
            items=[block_to_node(block) for block in data.get("results", [])],
            has_more=bool(data.get("has_more")),
            next_cursor=data.get("next_cursor"),
        )

    # ------------------------------------------------------------------
    # DocumentSink
    # ------------------------------------------------------------------

    async def create_document(
        self, parent_id: str, title: str, blocks: Sequence[OutputBlock]
    ) -> str:
        self._check_batch(blocks)
        payload = {
            "parent": {"page_id": parent_id},
            "properties": {
                "title": {"title": [{"type": "text", "text": {"content": title}}]}
            },
            "children": [output_block_to_json(block) for block in blocks],
        }

        data = await self._write("create_document", "POST", "/pages", payload)
        document_id = data.get("id")
        if not document_id:
            raise CollaboratorWriteError("Notion create_document returned no page id")

        logger.info(
            "Destination page created",
            extra={"document_id": document_id, "blocks": len(blocks)},
        )
        return document_id

    async def append_blocks(self, document_id: str, blocks: Sequence[OutputBlock]) -> None:
        self._check_batch(blocks)
        payload = {"children": [output_block_to_json(block) for block in blocks]}
        await self._write(
            "append_blocks",
            "PATCH",
            f"/blocks/{document_id}/children",
            payload,
            document_id=document_id,
        )

    async def _write(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Dict[str, Any],
        document_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            return await self._request(
                operation, method, path, payload=payload, retry_on=is_rate_limited
            )
        except httpx.HTTPStatusError as e:
            raise CollaboratorWriteError(
                f"Notion {operation} failed "
                f"(HTTP {e.response.status_code}): {_error_message(e.response)}",
                status_code=e.response.status_code,
                document_id=document_id,
                original_error=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise CollaboratorWriteError(
                f"Notion {operation} failed: {e}",
                document_id=document_id,
                original_error=e,
            ) from e

    @staticmethod
    def _check_batch(blocks: Sequence[OutputBlock]) -> None:
        if len(blocks) > NOTION_MAX_BATCH_BLOCKS:
            raise ValueError(
                f"At most {NOTION_MAX_BATCH_BLOCKS} blocks per request, got {len(blocks)}"
            )
