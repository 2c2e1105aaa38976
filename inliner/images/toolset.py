import json
from typing import Any, Literal

from pydantic_ai import RunContext
from pydantic_ai.toolsets import FunctionToolset

from inliner.images.config import InlinerConfig
from inliner.images.exceptions import InlinerError
from inliner.images.service import InlinerImages


class InlinerToolset(FunctionToolset[Any]):
    """Inliner image tools for pydantic-ai agents.

    Failures are returned to the model as ``Error: ...`` strings.
    """

    def __init__(
        self,
        config: InlinerConfig,
        images: InlinerImages | None = None,
    ) -> None:
        super().__init__()
        self.images = images or InlinerImages(config)
        self._register_tools()

    async def aclose(self) -> None:
        await self.images.aclose()

    async def image_url(
        self,
        ctx: RunContext[Any],
        project: str,
        description: str,
        width: int,
        height: int,
        format: Literal["png", "jpg"] = "png",
        edit: str | None = None,
    ) -> str:
        """Build an Inliner image URL and <img> tag without generating the image.

        Args:
            project: Project namespace.
            description: Hyphenated image description.
            width: Image width in pixels (100-4096).
            height: Image height in pixels (100-4096).
            format: png for transparency, jpg for photos.
            edit: Optional edit instruction.
        """
        try:
            link = self.images.image_url(
                project, description, width, height, format, edit
            )
        except InlinerError as e:
            return f"Error: {e}"
        return link.to_json()

    async def create_image(
        self,
        ctx: RunContext[Any],
        description: str,
        project: str | None = None,
        width: int = 800,
        height: int = 600,
        format: Literal["png", "jpg"] = "png",
        output_path: str | None = None,
    ) -> str:
        """Generate an image and wait until it is ready.

        Args:
            description: Hyphenated image description.
            project: Project namespace, defaults to the account default.
            width: Image width in pixels (100-4096).
            height: Image height in pixels (100-4096).
            format: png for transparency, jpg for photos.
            output_path: Optional local file to save the image to.
        """
        try:
            result = await self.images.create_image(
                description, project, width, height, format, output_path
            )
        except InlinerError as e:
            return f"Error: {e}"
        return result.to_json()

    async def edit_image(
        self,
        ctx: RunContext[Any],
        edit_instruction: str,
        source_url: str | None = None,
        source_path: str | None = None,
        project: str | None = None,
        width: int | None = None,
        height: int | None = None,
        output_path: str | None = None,
    ) -> str:
        """Edit an existing Inliner image or upload and edit a local file.

        Args:
            edit_instruction: What to change, e.g. make-it-blue.
            source_url: URL of an existing Inliner image.
            source_path: Local file to upload when there is no URL.
            project: Project to upload into.
            width: Optional new width.
            height: Optional new height.
            output_path: Optional local file to save the result to.
        """
        try:
            result = await self.images.edit_image(
                edit_instruction,
                source_url=source_url,
                source_path=source_path,
                project=project,
                width=width,
                height=height,
                output_path=output_path,
            )
        except InlinerError as e:
            return f"Error: {e}"
        return result.to_json()

    async def list_projects(self, ctx: RunContext[Any]) -> str:
        """List the projects on the Inliner account."""
        try:
            data = await self.images.list_projects()
        except InlinerError as e:
            return f"Error: {e}"
        return json.dumps(data, indent=2)

    async def get_usage(self, ctx: RunContext[Any]) -> str:
        """Remaining credits for the current billing period."""
        try:
            data = await self.images.get_usage()
        except InlinerError as e:
            return f"Error: {e}"
        return json.dumps(data, indent=2)

    async def get_image_dimensions(self, ctx: RunContext[Any], use_case: str) -> str:
        """Recommended dimensions for a use case.

        Args:
            use_case: hero, product, profile, card, thumbnail, social, logo, youtube or banner.
        """
        try:
            return self.images.get_image_dimensions(use_case).to_json()
        except InlinerError as e:
            return f"Error: {e}"

    def _register_tools(self) -> None:
        self.tool(self.image_url)
        self.tool(self.create_image)
        self.tool(self.edit_image)
        self.tool(self.list_projects)
        self.tool(self.get_usage)
        self.tool(self.get_image_dimensions)
