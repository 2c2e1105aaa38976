"""Canonical image paths, URLs and HTML snippets.

A resource path such as ``my-project/happy-duck_800x600.png`` addresses
both the rendered image on the image host and its generation status on
the API host.
"""

import html
import re

from pydantic import ValidationError

from inliner.images.exceptions import InvalidRequestError
from inliner.images.models import PROJECT_PATTERN, ImageFormat, ImageSpec

DESCRIPTION_MAX_LENGTH = 100
STATUS_ENDPOINT = "content/request-json"

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-+")
_FILENAME_PATTERN = re.compile(r"^(.+)_(\d+)x(\d+)\.(png|jpg)$")
_PROJECT = re.compile(PROJECT_PATTERN)


def canonicalize(text: str, max_length: int | None = None) -> str:
    """Turn free text into a URL-safe slug.

    The result only contains lowercase ASCII letters, digits and single
    hyphens, and never starts or ends with a hyphen.
    """
    slug = _INVALID_CHARS.sub("-", text.lower())
    slug = _HYPHEN_RUNS.sub("-", slug).strip("-")
    if max_length is not None:
        slug = slug[:max_length].rstrip("-")
    return slug


def description_slug(description: str) -> str:
    return canonicalize(description, DESCRIPTION_MAX_LENGTH)


def edit_slug(
    instruction: str,
    resize: tuple[int, int] | None = None,
) -> str:
    """Slug for an edit instruction, carrying the target size when resizing."""
    slug = canonicalize(instruction)
    if not slug:
        raise InvalidRequestError(
            f"Edit instruction {instruction!r} has no usable characters"
        )
    if resize is not None:
        slug += f"-{resize[0]}x{resize[1]}"
    return slug


def make_spec(**fields: object) -> ImageSpec:
    """Validate image fields, raising InvalidRequestError on bad input."""
    try:
        return ImageSpec.model_validate(fields)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidRequestError(f"Invalid image request: {details}") from e


def build_image_path(spec: ImageSpec) -> str:
    slug = description_slug(spec.description)
    if not slug:
        raise InvalidRequestError(
            f"Description {spec.description!r} has no usable characters"
        )
    path = f"{spec.project}/{slug}_{spec.width}x{spec.height}"
    if spec.edit:
        path += f"/{edit_slug(spec.edit)}"
    return f"{path}.{spec.format}"


def build_edit_path(
    source_path: str,
    instruction: str,
    format: ImageFormat | str,
    resize: tuple[int, int] | None = None,
) -> str:
    return f"{source_path}/{edit_slug(instruction, resize)}.{format}"


def image_url(path: str, image_base: str, query: str = "") -> str:
    return f"{image_base.rstrip('/')}/{path}{query}"


def status_url(path: str, api_base: str, query: str = "") -> str:
    return f"{api_base.rstrip('/')}/{STATUS_ENDPOINT}/{path}{query}"


def build_html(url: str, alt: str, width: int, height: int) -> str:
    """Render a lazy-loading ``<img>`` tag.

    Hyphens in ``alt`` become spaces. Every attribute value is escaped.
    """
    alt_text = alt.replace("-", " ")
    return (
        f'<img src="{html.escape(url)}" alt="{html.escape(alt_text)}" '
        f'width="{width}" height="{height}" loading="lazy" />'
    )


def parse_image_filename(name: str) -> tuple[str, int, int, ImageFormat] | None:
    """Split ``{description}_{w}x{h}.{format}`` back into its parts."""
    match = _FILENAME_PATTERN.match(name)
    if match is None:
        return None
    description, width, height, fmt = match.groups()
    return description, int(width), int(height), ImageFormat(fmt)


def validate_project(project: str) -> str:
    if not _PROJECT.match(project):
        raise InvalidRequestError(
            "Project namespace must contain only lowercase letters, numbers, "
            "hyphens, and underscores"
        )
    return project
