from enum import StrEnum

from inliner.images.exceptions import InvalidRequestError
from inliner.images.models import DimensionPreset, DimensionRecommendation


class UseCase(StrEnum):
    HERO = "hero"
    PRODUCT = "product"
    PROFILE = "profile"
    CARD = "card"
    THUMBNAIL = "thumbnail"
    SOCIAL = "social"
    LOGO = "logo"
    YOUTUBE = "youtube"
    BANNER = "banner"


PRESETS: dict[UseCase, list[tuple[int, int, str]]] = {
    UseCase.HERO: [
        (1920, 1080, "Full-width hero, 16:9"),
        (1200, 600, "Standard hero, 2:1"),
    ],
    UseCase.PRODUCT: [
        (800, 800, "Square product shot"),
        (600, 400, "Landscape product card"),
    ],
    UseCase.PROFILE: [
        (400, 400, "Standard avatar"),
        (300, 300, "Small avatar"),
    ],
    UseCase.CARD: [
        (600, 400, "Feature card"),
        (800, 600, "Large card"),
    ],
    UseCase.THUMBNAIL: [
        (200, 200, "Grid thumbnail"),
        (150, 150, "Small thumbnail"),
    ],
    UseCase.SOCIAL: [
        (1200, 630, "Open Graph / Facebook"),
        (1200, 675, "Twitter card"),
    ],
    UseCase.LOGO: [
        (200, 200, "Square logo, use .png"),
        (100, 100, "Small icon, use .png"),
    ],
    UseCase.YOUTUBE: [
        (1280, 720, "YouTube thumbnail, 16:9"),
    ],
    UseCase.BANNER: [
        (1920, 400, "Wide banner"),
        (1200, 300, "Standard banner"),
    ],
}


def recommend_dimensions(use_case: str) -> DimensionRecommendation:
    try:
        case = UseCase(use_case)
    except ValueError:
        valid = ", ".join(c.value for c in UseCase)
        raise InvalidRequestError(
            f"Unknown use case '{use_case}'. Valid: {valid}"
        ) from None

    if case is UseCase.LOGO:
        hint = "Use .png for transparency support"
    else:
        hint = "Use .jpg for photos, .png for graphics/transparency"
    return DimensionRecommendation(
        use_case=case.value,
        recommended=[
            DimensionPreset(width=w, height=h, notes=notes)
            for w, h, notes in PRESETS[case]
        ],
        format_hint=hint,
    )
