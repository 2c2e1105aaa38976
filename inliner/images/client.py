import logging
from typing import Any

import httpx

from inliner.images.config import InlinerConfig
from inliner.images.exceptions import APIError, UploadError
from inliner.images.models import UploadRequest, UploadResult
from inliner.images.urls import status_url

logger = logging.getLogger(__name__)


class InlinerClient:
    """Async wrapper around the Inliner REST API."""

    def __init__(
        self,
        config: InlinerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=f"{config.api_url}/",
            timeout=httpx.Timeout(config.request_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "InlinerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, *, json_payload: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        if json_payload:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise APIError(f"Request to {path} failed: {e}") from e

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._request(
            method, path, headers=self._headers(json_payload=True), **kwargs
        )
        if not response.is_success:
            raise APIError(
                f"API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"Invalid JSON from {path}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def list_projects(self) -> dict[str, Any]:
        return await self._json("GET", "account/projects")

    async def create_project(
        self,
        project: str,
        display_name: str,
        description: str | None = None,
        is_default: bool = False,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"project": project, "displayName": display_name}
        if description:
            body["description"] = description
        if is_default:
            body["isDefault"] = True

        response = await self._request(
            "POST",
            "account/projects",
            headers=self._headers(json_payload=True),
            json=body,
        )
        try:
            data = response.json()
        except ValueError:
            data = {}
        # The API may answer 200 with success=false, so check the flag first.
        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            raise APIError(
                message or "Failed to create project",
                status_code=response.status_code,
                body=response.text,
            )
        if not response.is_success:
            raise APIError(
                data.get("message") or f"HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        logger.info("Created project %s", project)
        return data

    async def get_project(self, project_id: str) -> dict[str, Any]:
        return await self._json("GET", f"account/projects/{project_id}")

    async def get_plan_usage(self) -> dict[str, Any]:
        return await self._json("GET", "account/plan-usage")

    async def get_current_plan(self) -> dict[str, Any]:
        return await self._json("GET", "account/current-plan")

    async def list_images(
        self, limit: int = 20, project_id: str | None = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": limit}
        if project_id:
            params["projectId"] = project_id
        return await self._json("GET", "content/images", params=params)

    async def upload_image(self, upload: UploadRequest) -> UploadResult:
        """Upload a local image so it can be edited like a generated one."""
        logger.info("Uploading %s to project %s", upload.filename, upload.project)
        try:
            response = await self._client.post(
                "content/upload",
                headers=self._headers(),
                data={"project": upload.project, "prompt": upload.prompt},
                files={
                    "file": (upload.filename, upload.content, upload.content_type)
                },
            )
        except httpx.HTTPError as e:
            raise UploadError(f"Upload failed: {e}") from e
        if not response.is_success:
            raise UploadError(
                f"Upload failed {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise UploadError(
                "Upload failed: invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e
        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            raise UploadError(
                f"Upload failed: {message or 'Unknown error'}",
                status_code=response.status_code,
                body=response.text,
            )
        # content.prompt is the full path: {project}/{prompt}.{ext}
        uploaded = (data.get("content") or {}).get("prompt")
        if not uploaded:
            raise UploadError(
                "Upload succeeded but no prompt returned in response",
                status_code=response.status_code,
                body=response.text,
            )
        return UploadResult(uploaded_path=uploaded)

    async def request_status(self, path: str, query: str = "") -> httpx.Response:
        """Fetch the generation status of a resource path.

        Transport errors propagate as ``httpx.HTTPError``; the poller
        decides whether they are fatal.
        """
        url = status_url(path, self.config.api_url, query)
        return await self._client.get(url, headers=self._headers())

    async def fetch_bytes(self, url: str) -> bytes:
        response = await self._client.get(url)
        response.raise_for_status()
        return response.content
