import asyncio
import logging
from pathlib import Path
from typing import Any

from inliner.images.client import InlinerClient
from inliner.images.config import InlinerConfig
from inliner.images.dimensions import recommend_dimensions
from inliner.images.exceptions import APIError, InvalidRequestError
from inliner.images.models import (
    MAX_DIMENSION,
    MIN_DIMENSION,
    DimensionRecommendation,
    EditedImage,
    GeneratedImage,
    ImageFormat,
    ImageLink,
    ProjectCreated,
)
from inliner.images.poller import GenerationPoller
from inliner.images.sources import prepare_upload, resolve_edit_source
from inliner.images.urls import (
    build_edit_path,
    build_html,
    build_image_path,
    edit_slug,
    image_url,
    make_spec,
    validate_project,
)

logger = logging.getLogger(__name__)

FALLBACK_PROJECT = "default"


def save_image(data: bytes, output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Saved %d bytes to %s", len(data), path)
    return path


class InlinerImages:
    """The operations exposed to agents, independent of any transport."""

    def __init__(
        self,
        config: InlinerConfig,
        client: InlinerClient | None = None,
        poller: GenerationPoller | None = None,
    ) -> None:
        self.config = config
        self.client = client or InlinerClient(config)
        self.poller = poller or GenerationPoller(
            self.client,
            max_attempts=config.poll_attempts,
            interval=config.poll_interval,
        )

    async def __aenter__(self) -> "InlinerImages":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def image_url(
        self,
        project: str,
        description: str,
        width: int,
        height: int,
        format: ImageFormat | str = ImageFormat.PNG,
        edit: str | None = None,
    ) -> ImageLink:
        """Build the URL and HTML for an image without generating it."""
        spec = make_spec(
            project=project,
            description=description,
            width=width,
            height=height,
            format=format,
            edit=edit,
        )
        path = build_image_path(spec)
        url = image_url(path, self.config.image_url)
        return ImageLink(
            url=url,
            html=build_html(url, spec.description, spec.width, spec.height),
            path=path,
        )

    async def generate_image(
        self,
        project: str,
        description: str,
        width: int,
        height: int,
        format: ImageFormat | str = ImageFormat.PNG,
        output_path: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> GeneratedImage:
        """Generate an image, wait for it and optionally save it locally."""
        link = self.image_url(project, description, width, height, format)
        logger.info("Generating %s", link.path)
        result = await self.poller.poll(link.path, cancel=cancel)
        if output_path:
            save_image(result.data, output_path)
        return GeneratedImage(
            url=link.url,
            html=link.html,
            saved=bool(output_path),
            output_path=output_path,
            size=len(result.data),
            project=project,
            attempts=result.attempts,
        )

    async def create_image(
        self,
        description: str,
        project: str | None = None,
        width: int = 800,
        height: int = 600,
        format: ImageFormat | str = ImageFormat.PNG,
        output_path: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> GeneratedImage:
        resolved = await self.resolve_project(project)
        return await self.generate_image(
            resolved,
            description,
            width,
            height,
            format,
            output_path=output_path,
            cancel=cancel,
        )

    async def resolve_project(self, project: str | None = None) -> str:
        """Pick the project namespace for a request.

        Order: the explicit or configured project, the account's default
        project, the first project on the account, then ``"default"``.
        """
        if project := project or self.config.default_project:
            return project
        try:
            data = await self.client.list_projects()
        except APIError as e:
            logger.warning("Could not list projects, using fallback: %s", e)
            return FALLBACK_PROJECT

        listed = data.get("projects") if isinstance(data, dict) else None
        if not isinstance(listed, list):
            return FALLBACK_PROJECT

        projects = [
            p
            for p in listed
            if isinstance(p, dict) and p.get("project")
        ]
        for p in projects:
            if p.get("isDefault"):
                return p["project"]
        if projects:
            return projects[0]["project"]
        return FALLBACK_PROJECT

    async def edit_image(
        self,
        edit_instruction: str,
        source_url: str | None = None,
        source_path: str | None = None,
        project: str | None = None,
        upload_prompt: str | None = None,
        width: int | None = None,
        height: int | None = None,
        format: ImageFormat | str | None = None,
        output_path: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> EditedImage:
        """Edit an existing image, uploading a local file first if needed.

        Args:
            edit_instruction: What to change, e.g. ``make-it-blue``.
            source_url: Existing image on the image host.
            source_path: Local file to upload when no URL is given.
            project: Project to upload into; required with ``source_path``.
            upload_prompt: Name for the uploaded image.
            width: New width, resizes the image.
            height: New height, resizes the image.
            format: Output format, defaults to the source format.
            output_path: Where to save the edited image.
            cancel: Stops polling when set.
        """
        for name, value in (("width", width), ("height", height)):
            if value is not None and not MIN_DIMENSION <= value <= MAX_DIMENSION:
                raise InvalidRequestError(
                    f"{name} must be between {MIN_DIMENSION} and {MAX_DIMENSION}"
                )
        edit_slug(edit_instruction)
        try:
            requested_format = ImageFormat(format) if format else None
        except ValueError:
            raise InvalidRequestError(
                f"Invalid format {format!r}, use png or jpg"
            ) from None

        if not source_url:
            if not source_path:
                raise InvalidRequestError(
                    "Either source_url or source_path must be provided."
                )
            if not project:
                raise InvalidRequestError(
                    "Project is required when uploading a local file."
                )
            upload = prepare_upload(source_path, project, upload_prompt)
            uploaded = await self.client.upload_image(upload)
            source_url = image_url(uploaded.uploaded_path, self.config.image_url)

        source = resolve_edit_source(
            source_url, self.config.image_url, local_file=source_path
        )
        output_format = str(requested_format or source.format)
        out_width = width or source.width
        out_height = height or source.height
        resize = (out_width, out_height) if (width or height) else None

        path = build_edit_path(source.path, edit_instruction, output_format, resize)
        url = image_url(path, self.config.image_url, source.query)
        logger.info("Editing %s", path)
        result = await self.poller.poll(path, query=source.query, cancel=cancel)
        if output_path:
            save_image(result.data, output_path)
        return EditedImage(
            url=url,
            html=build_html(url, edit_instruction, out_width, out_height),
            saved=bool(output_path),
            output_path=output_path,
            size=len(result.data),
            edit_instruction=edit_instruction,
            dimensions=f"{out_width}x{out_height}",
            attempts=result.attempts,
        )

    async def list_projects(self) -> dict[str, Any]:
        return await self.client.list_projects()

    async def create_project(
        self,
        project: str,
        display_name: str,
        description: str | None = None,
        is_default: bool = False,
    ) -> ProjectCreated:
        validate_project(project)
        data = await self.client.create_project(
            project, display_name, description, is_default
        )
        return ProjectCreated(
            project=data.get("project"),
            message=(
                f"Project '{project}' created successfully. Use this namespace "
                f"with --project {project} or in image URLs."
            ),
        )

    async def get_project_details(self, project_id: str) -> dict[str, Any]:
        return await self.client.get_project(project_id)

    async def get_usage(self) -> dict[str, Any]:
        return await self.client.get_plan_usage()

    async def get_current_plan(self) -> dict[str, Any]:
        return await self.client.get_current_plan()

    async def list_images(
        self, limit: int = 20, project_id: str | None = None
    ) -> dict[str, Any]:
        if not 1 <= limit <= 100:
            raise InvalidRequestError("limit must be between 1 and 100")
        return await self.client.list_images(limit, project_id)

    def get_image_dimensions(self, use_case: str) -> DimensionRecommendation:
        return recommend_dimensions(use_case)
