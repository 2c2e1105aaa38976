import logging
import re
from pathlib import Path
from urllib.parse import urlsplit

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from inliner.images.exceptions import InvalidRequestError
from inliner.images.models import EditSource, UploadRequest
from inliner.images.urls import canonicalize, parse_image_filename

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_EXTENSIONS = ("png", "jpg", "jpeg", "webp", "gif")
DEFAULT_DIMENSIONS = (1024, 1024)

_UPLOADED_FILENAME = re.compile(r"^(.+)\.(png|jpg|jpeg|webp|gif)$", re.IGNORECASE)


def normalize_extension(ext: str) -> str:
    ext = ext.lower().lstrip(".")
    return "jpg" if ext == "jpeg" else ext


def prepare_upload(
    source_path: str | Path,
    project: str,
    prompt: str | None = None,
) -> UploadRequest:
    """Validate a local image and build the multipart upload for it.

    Args:
        source_path: Local image file.
        project: Project namespace to upload into.
        prompt: Name for the uploaded image; defaults to the file stem.
    """
    path = Path(source_path)
    ext = path.suffix.lower().lstrip(".")
    if ext not in ALLOWED_UPLOAD_EXTENSIONS:
        raise InvalidRequestError(
            f'Invalid file type "{ext}". '
            f"Allowed types: {', '.join(ALLOWED_UPLOAD_EXTENSIONS)}"
        )
    slug = canonicalize(prompt or path.stem)
    if not slug:
        raise InvalidRequestError("Upload prompt is required and cannot be empty.")
    if not path.is_file():
        raise InvalidRequestError(f"Source file does not exist: {path}")

    fmt = normalize_extension(ext)
    try:
        return UploadRequest(
            filename=path.name,
            content=path.read_bytes(),
            content_type=f"image/{'jpeg' if fmt == 'jpg' else fmt}",
            project=project,
            prompt=slug,
        )
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid project namespace: {project!r}") from e


def read_dimensions(path: str | Path) -> tuple[int, int] | None:
    try:
        with Image.open(path) as image:
            return image.size
    except (OSError, UnidentifiedImageError) as e:
        logger.debug("Could not read dimensions of %s: %s", path, e)
        return None


def _host_allowed(host: str, expected: str) -> bool:
    return host == expected or host.endswith(f".{expected}")


def resolve_edit_source(
    url: str,
    image_base: str,
    local_file: str | Path | None = None,
) -> EditSource:
    """Work out what an existing image URL points to.

    Generated images carry their description and size in the filename.
    Uploaded images only carry a name, so their size comes from
    ``local_file`` when given, and otherwise falls back to 1024x1024.
    """
    parts = urlsplit(url)
    expected_host = urlsplit(image_base).hostname or ""
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidRequestError(f"Invalid Inliner image URL: {url}")
    if not _host_allowed(parts.hostname.lower(), expected_host.lower()):
        raise InvalidRequestError(f"Invalid Inliner image URL: {url}")

    path = parts.path.lstrip("/")
    query = f"?{parts.query}" if parts.query else ""
    filename = path.rsplit("/", 1)[-1]

    parsed = parse_image_filename(filename)
    if parsed is not None:
        description, width, height, fmt = parsed
        return EditSource(
            path=path,
            query=query,
            description=description,
            width=width,
            height=height,
            format=str(fmt),
        )

    match = _UPLOADED_FILENAME.match(filename)
    if match is None:
        raise InvalidRequestError(f"Invalid source image path format: {path}")
    description, ext = match.groups()

    dimensions = read_dimensions(local_file) if local_file else None
    width, height = dimensions or DEFAULT_DIMENSIONS
    return EditSource(
        path=path,
        query=query,
        description=description,
        width=width,
        height=height,
        format=normalize_extension(ext),
    )
