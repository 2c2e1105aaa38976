from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MIN_DIMENSION = 100
MAX_DIMENSION = 4096
PROJECT_PATTERN = r"^[a-z0-9_-]+$"

Dimension = Annotated[int, Field(ge=MIN_DIMENSION, le=MAX_DIMENSION)]
ProjectName = Annotated[str, Field(min_length=1, pattern=PROJECT_PATTERN)]


class ImageFormat(StrEnum):
    PNG = "png"
    JPG = "jpg"


class ImageSpec(BaseModel):
    project: ProjectName
    description: Annotated[str, Field(min_length=1)]
    width: Dimension
    height: Dimension
    format: ImageFormat = ImageFormat.PNG
    edit: str | None = None


class _Result(BaseModel):
    """Results are serialized with camelCase keys for tool consumers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class ImageLink(_Result):
    url: str
    html: str
    path: str


class GeneratedImage(_Result):
    url: str
    html: str
    saved: bool
    output_path: str | None = None
    size: int
    project: str
    attempts: int


class EditedImage(_Result):
    url: str
    html: str
    saved: bool
    output_path: str | None = None
    size: int
    edit_instruction: str
    dimensions: str
    attempts: int


class ProjectCreated(_Result):
    success: bool = True
    project: Any
    message: str


class DimensionPreset(BaseModel):
    width: int
    height: int
    notes: str


class DimensionRecommendation(_Result):
    use_case: str
    recommended: list[DimensionPreset]
    format_hint: str


class UploadRequest(BaseModel):
    filename: str
    content: bytes
    content_type: str
    project: ProjectName
    prompt: str


class UploadResult(BaseModel):
    uploaded_path: str


class EditSource(BaseModel):
    """An existing image resolved from its URL on the image host."""

    path: str
    query: str = ""
    description: str
    width: int
    height: int
    format: str
