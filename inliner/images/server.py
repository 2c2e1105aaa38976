import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from inliner.images.config import InlinerConfig
from inliner.images.exceptions import InlinerError
from inliner.images.guide import parse_guide
from inliner.images.models import MAX_DIMENSION, MIN_DIMENSION, PROJECT_PATTERN
from inliner.images.service import InlinerImages

logger = logging.getLogger(__name__)

SERVER_NAME = "inliner"

Project = Annotated[
    str, Field(description="Project namespace from Inliner dashboard (e.g. 'my-project')")
]
Description = Annotated[
    str,
    Field(description="Hyphenated image description (e.g. 'modern-office-team-meeting')"),
]
Width = Annotated[
    int,
    Field(
        ge=MIN_DIMENSION,
        le=MAX_DIMENSION,
        description="Image width in pixels (100-4096)",
    ),
]
Height = Annotated[
    int,
    Field(
        ge=MIN_DIMENSION,
        le=MAX_DIMENSION,
        description="Image height in pixels (100-4096)",
    ),
]
Format = Annotated[
    Literal["png", "jpg"],
    Field(description="Image format: png (transparency) or jpg (photos)"),
]
OutputPath = Annotated[
    str | None,
    Field(description="Optional local file path to save the image (e.g. './images/hero.png')"),
]


def _dump(data: Any) -> str:
    if hasattr(data, "to_json"):
        return data.to_json()
    return json.dumps(data, indent=2)


@asynccontextmanager
async def _tool_errors(action: str) -> AsyncIterator[None]:
    try:
        yield
    except InlinerError as e:
        logger.warning("Error %s: %s", action, e)
        raise ToolError(f"Error {action}: {e}") from e


def create_server(
    config: InlinerConfig,
    images: InlinerImages | None = None,
) -> FastMCP:
    """Build the MCP server exposing Inliner tools and the reference guide."""
    images = images or InlinerImages(config)
    guide = parse_guide()

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[InlinerImages]:
        try:
            yield images
        finally:
            await images.aclose()

    mcp = FastMCP(SERVER_NAME, lifespan=lifespan)

    @mcp.tool()
    async def generate_image_url(
        project: Project,
        description: Description,
        width: Width,
        height: Height,
        format: Format = "png",
        edit: Annotated[
            str | None,
            Field(
                description="Optional edit instruction to apply to an existing "
                "image (e.g. 'make-background-blue')"
            ),
        ] = None,
    ) -> str:
        """Build a properly formatted Inliner.ai image URL from a description, dimensions, and project namespace"""
        async with _tool_errors("building image URL"):
            return _dump(
                images.image_url(project, description, width, height, format, edit)
            )

    @mcp.tool()
    async def generate_image(
        project: Project,
        description: Description,
        width: Width,
        height: Height,
        format: Format = "png",
        output_path: OutputPath = None,
    ) -> str:
        """Generate an image and optionally save it to a local file. Polls until generation is complete (up to 3 minutes)."""
        async with _tool_errors("generating image"):
            result = await images.generate_image(
                project, description, width, height, format, output_path
            )
            return _dump(result)

    @mcp.tool()
    async def create_image(
        description: Annotated[
            str,
            Field(description="Image description (e.g., 'happy-duck', 'modern-office-hero')"),
        ],
        project: Annotated[
            str | None,
            Field(
                description="Project namespace (defaults to the account default "
                "or first available project if not specified)"
            ),
        ] = None,
        width: Width = 800,
        height: Height = 600,
        format: Format = "png",
        output_path: OutputPath = None,
    ) -> str:
        """Quick alias for generating images with sensible defaults. Generates an 800x600 PNG image by default, polls until ready, and optionally saves to a local file."""
        async with _tool_errors("creating image"):
            result = await images.create_image(
                description, project, width, height, format, output_path
            )
            return _dump(result)

    @mcp.tool()
    async def edit_image(
        edit_instruction: Annotated[
            str,
            Field(
                description="Edit instruction (e.g., 'make-it-blue', "
                "'remove-background', 'add-sunset')"
            ),
        ],
        source_url: Annotated[
            str | None,
            Field(
                description="Source image URL (e.g., "
                "'https://img.inliner.ai/project/image_800x800.png')"
            ),
        ] = None,
        source_path: Annotated[
            str | None,
            Field(description="Optional local file path to upload and edit (e.g., '/tmp/photo.png')"),
        ] = None,
        project: Annotated[
            str | None,
            Field(description="Project namespace used when uploading a local file"),
        ] = None,
        upload_prompt: Annotated[
            str | None,
            Field(description="Optional prompt/filename for uploaded image (no slashes)"),
        ] = None,
        width: Annotated[
            int | None,
            Field(
                ge=MIN_DIMENSION,
                le=MAX_DIMENSION,
                description="Optional new width in pixels (resizes the image)",
            ),
        ] = None,
        height: Annotated[
            int | None,
            Field(
                ge=MIN_DIMENSION,
                le=MAX_DIMENSION,
                description="Optional new height in pixels (resizes the image)",
            ),
        ] = None,
        format: Annotated[
            Literal["png", "jpg"] | None,
            Field(description="Optional output format (defaults to source format)"),
        ] = None,
        output_path: Annotated[
            str | None,
            Field(description="Optional local file path to save the edited image"),
        ] = None,
    ) -> str:
        """Edit an existing image by URL, apply edit instructions, optionally resize, and save to a local file. Polls until edit is complete (up to 3 minutes)."""
        async with _tool_errors("editing image"):
            result = await images.edit_image(
                edit_instruction,
                source_url=source_url,
                source_path=source_path,
                project=project,
                upload_prompt=upload_prompt,
                width=width,
                height=height,
                format=format,
                output_path=output_path,
            )
            return _dump(result)

    @mcp.tool()
    async def get_projects() -> str:
        """List all Inliner projects for the authenticated account, including namespaces and settings"""
        async with _tool_errors("fetching projects"):
            return _dump(await images.list_projects())

    @mcp.tool()
    async def create_project(
        project: Annotated[
            str,
            Field(
                pattern=PROJECT_PATTERN,
                description="Project namespace (e.g. 'my-project', 'marketing', 'dev')",
            ),
        ],
        display_name: Annotated[
            str,
            Field(description="Display name for the project (e.g. 'My Project', 'Marketing Team')"),
        ],
        description: Annotated[
            str | None, Field(description="Optional description for the project")
        ] = None,
        is_default: Annotated[
            bool,
            Field(description="Set this project as the default project for the account"),
        ] = False,
    ) -> str:
        """Create a new project (reserves the namespace for your account). Use this to create a project namespace like 'my-project' that you can then use for generating images."""
        async with _tool_errors("creating project"):
            result = await images.create_project(
                project, display_name, description, is_default
            )
            return _dump(result)

    @mcp.tool()
    async def get_project_details(
        project_id: Annotated[str, Field(description="Project ID from get_projects")],
    ) -> str:
        """Get detailed configuration for a specific project including namespace, custom prompt, and reference images"""
        async with _tool_errors("fetching project"):
            return _dump(await images.get_project_details(project_id))

    @mcp.tool()
    async def get_usage() -> str:
        """Check remaining credits by type (base images, premium images, edits, infill, enhancement) for the current billing period"""
        async with _tool_errors("fetching usage"):
            return _dump(await images.get_usage())

    @mcp.tool()
    async def get_current_plan() -> str:
        """Get the current subscription plan and its feature allocations"""
        async with _tool_errors("fetching plan"):
            return _dump(await images.get_current_plan())

    @mcp.tool()
    async def list_images(
        project_id: Annotated[
            str | None, Field(description="Filter by project ID (from get_projects)")
        ] = None,
        limit: Annotated[
            int,
            Field(ge=1, le=100, description="Number of images to return (1-100, default 20)"),
        ] = 20,
    ) -> str:
        """List generated images in a project, with optional filtering"""
        async with _tool_errors("fetching images"):
            return _dump(await images.list_images(limit, project_id))

    @mcp.tool()
    async def get_image_dimensions(
        use_case: Annotated[
            Literal[
                "hero",
                "product",
                "profile",
                "card",
                "thumbnail",
                "social",
                "logo",
                "youtube",
                "banner",
            ],
            Field(description="The intended use case for the image"),
        ],
    ) -> str:
        """Get recommended image dimensions for common use cases"""
        async with _tool_errors("looking up dimensions"):
            return _dump(images.get_image_dimensions(use_case))

    @mcp.resource(
        guide.uri,
        name=guide.name,
        description=guide.description,
        mime_type=guide.mime_type,
    )
    def inliner_guide() -> str:
        return guide.text

    return mcp
