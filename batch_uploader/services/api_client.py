"""HTTP adapter for the file upload endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..errors import TransportError
from ..models import DEFAULT_TIMEOUT, UploadCandidate, UploadedFile, UploadMetadata

logger = logging.getLogger(__name__)

SINGLE_UPLOAD_ENDPOINT = "/files/upload"
MULTI_UPLOAD_ENDPOINT = "/files/upload-multiple"


def build_form_fields(metadata: UploadMetadata) -> Dict[str, str]:
    """Multipart form fields shared by both endpoints."""
    fields = {"category": metadata.category.value}
    if metadata.project_id:
        fields["projectId"] = metadata.project_id
    if metadata.description:
        fields["description"] = metadata.description
    if metadata.tags:
        fields["tags"] = json.dumps(list(metadata.tags))
    return fields


class HTTPUploadTransport:
    """
    HTTP client adapter for the upload API.

    Implements IUploadTransport protocol. No retries: a failed request
    fails the batch.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def upload_file(self, candidate: UploadCandidate, metadata: UploadMetadata) -> UploadedFile:
        files = [("file", self._file_part(candidate))]
        data = await self._post(SINGLE_UPLOAD_ENDPOINT, files, metadata)
        if isinstance(data, list):
            if not data:
                raise TransportError("Upload failed")
            data = data[0]
        return self._descriptor(data)

    async def upload_files(
        self,
        candidates: Sequence[UploadCandidate],
        metadata: UploadMetadata,
    ) -> List[UploadedFile]:
        files = [("files", self._file_part(candidate)) for candidate in candidates]
        data = await self._post(MULTI_UPLOAD_ENDPOINT, files, metadata)
        if not isinstance(data, list) or len(data) != len(candidates):
            count = len(data) if isinstance(data, list) else 1
            raise TransportError(
                f"Server returned {count} file(s) for {len(candidates)} uploaded"
            )
        return [self._descriptor(item) for item in data]

    @staticmethod
    def _file_part(candidate: UploadCandidate) -> Tuple[str, bytes, str]:
        return (candidate.filename, candidate.data, candidate.media_type)

    @staticmethod
    def _descriptor(payload: Any) -> UploadedFile:
        try:
            return UploadedFile.from_dict(payload)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

    async def _post(self, endpoint: str, files: list, metadata: UploadMetadata) -> Any:
        if not self._client:
            raise RuntimeError("HTTPUploadTransport not initialized. Use 'async with' context.")

        try:
            response = await self._client.post(
                endpoint,
                data=build_form_fields(metadata),
                files=files,
            )
        except httpx.HTTPError as exc:
            logger.debug("POST %s failed: %s", endpoint, exc)
            raise TransportError(str(exc) or "Upload failed") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = self._error_message(body) or f"HTTP {response.status_code}"
            raise TransportError(
                message,
                status_code=response.status_code,
                code=self._error_code(body),
            )

        if not isinstance(body, dict) or not body.get("success") or body.get("data") is None:
            raise TransportError(
                self._error_message(body) or "Upload failed",
                status_code=response.status_code,
                code=self._error_code(body),
            )

        return body["data"]

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
            if body.get("message") and body.get("success") is False:
                return str(body["message"])
        return None

    @staticmethod
    def _error_code(body: Any) -> Optional[str]:
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            return body["error"].get("code")
        return None
