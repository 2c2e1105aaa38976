from pathlib import Path

import yaml
from pydantic import BaseModel

GUIDE_PATH = Path(__file__).parent / "guide.md"


class Guide(BaseModel):
    name: str
    uri: str
    description: str
    mime_type: str = "text/markdown"
    text: str


def parse_guide(path: Path = GUIDE_PATH) -> Guide:
    """Parse a markdown reference document with YAML frontmatter."""
    content = path.read_text()

    if not content.startswith("---"):
        raise ValueError(f"Guide at {path} is missing YAML frontmatter")

    parts = content.split("---", 2)
    if len(parts) < 3:
        raise ValueError(f"Guide at {path} is missing YAML frontmatter")

    frontmatter = yaml.safe_load(parts[1])
    if not isinstance(frontmatter, dict):
        raise ValueError(f"Guide at {path} has invalid frontmatter")

    for required in ("name", "uri", "description"):
        if required not in frontmatter:
            raise ValueError(f"Guide at {path} is missing required field: {required}")

    return Guide(text=parts[2].strip() + "\n", **frontmatter)
