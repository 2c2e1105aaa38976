from inliner.images.client import InlinerClient
from inliner.images.config import InlinerConfig
from inliner.images.exceptions import (
    APIError,
    ConfigurationError,
    GenerationCancelledError,
    GenerationError,
    GenerationFailedError,
    GenerationTimeoutError,
    InlinerError,
    InvalidRequestError,
    UploadError,
)
from inliner.images.models import (
    EditedImage,
    GeneratedImage,
    ImageFormat,
    ImageLink,
    ImageSpec,
)
from inliner.images.poller import GenerationPoller, PollResult
from inliner.images.service import InlinerImages
from inliner.images.toolset import InlinerToolset
from inliner.images.urls import (
    build_html,
    build_image_path,
    canonicalize,
)
