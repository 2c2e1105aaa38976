import json
import logging
import sys

import typer
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

from inliner.images.config import InlinerConfig  # noqa: E402
from inliner.images.dimensions import recommend_dimensions  # noqa: E402
from inliner.images.exceptions import InlinerError  # noqa: E402
from inliner.images.models import ImageFormat  # noqa: E402
from inliner.images.urls import build_html, build_image_path, image_url, make_spec  # noqa: E402

cli = typer.Typer(help="inliner.images — Inliner.ai image tools for AI agents")


@cli.command("serve", help="Run the MCP server over stdio")
def serve(
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Inliner API key (defaults to INLINER_API_KEY)",
    ),
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        help="Inliner API base URL (defaults to INLINER_API_URL)",
    ),
    default_project: str | None = typer.Option(
        None,
        "--default-project",
        help="Project namespace used when a tool call does not name one",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level, written to stderr",
    ),
) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = InlinerConfig.from_env(
            api_key=api_key,
            api_url=api_url,
            default_project=default_project,
        )
    except InlinerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    from inliner.images.server import create_server

    create_server(config).run(transport="stdio")


@cli.command("url", help="Print the URL and <img> tag for an image")
def url(
    project: str = typer.Argument(..., help="Project namespace"),
    description: str = typer.Argument(..., help="Image description"),
    width: int = typer.Argument(..., help="Width in pixels (100-4096)"),
    height: int = typer.Argument(..., help="Height in pixels (100-4096)"),
    format: ImageFormat = typer.Option(ImageFormat.PNG, "-f", "--format"),
    edit: str | None = typer.Option(None, "-e", "--edit", help="Edit instruction"),
    image_base: str = typer.Option(
        "https://img.inliner.ai",
        "--image-url",
        envvar="INLINER_IMAGE_URL",
        help="Image host base URL",
    ),
) -> None:
    try:
        spec = make_spec(
            project=project,
            description=description,
            width=width,
            height=height,
            format=format,
            edit=edit,
        )
        path = build_image_path(spec)
    except InlinerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    full_url = image_url(path, image_base)
    typer.echo(full_url)
    typer.echo(build_html(full_url, description, width, height))


@cli.command("dimensions", help="Show recommended dimensions for a use case")
def dimensions(
    use_case: str = typer.Argument(..., help="hero, product, profile, card, ..."),
) -> None:
    try:
        recommendation = recommend_dimensions(use_case)
    except InlinerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(recommendation.model_dump(by_alias=True), indent=2))
