"""Scene presets, pose options and model attribute choices for a photoshoot."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_SCENE_DESCRIPTION = "Professional Studio"
CUSTOM_SCENE_ID = "custom"


@dataclass(frozen=True)
class ScenePreset:
    """A named backdrop the generator can be asked to render."""

    id: str
    name: str
    description: str


@dataclass(frozen=True)
class PoseOption:
    """A selectable pose; ``description`` is what the provider receives."""

    id: str
    label: str
    description: str


SCENE_PRESETS: Dict[str, ScenePreset] = {
    preset.id: preset
    for preset in (
        ScenePreset("auto", "AI Auto Scene", "AI selects the best scene for the garment."),
        ScenePreset(CUSTOM_SCENE_ID, "Custom Image", "Upload your own background image."),
        ScenePreset("none", "None", "No specific scene, just a plain background."),
        ScenePreset("studio", "Studio", "Clean, minimal background for e-commerce."),
        ScenePreset("outdoor", "Outdoor", "Natural lighting in parks or nature trails."),
        ScenePreset("beach", "Beach", "Sunny coastal vibe with sand and sea."),
        ScenePreset("luxury", "Luxury / Indoors", "Opulent settings like villas or modern homes."),
        ScenePreset("street", "Street / Urban", "City backgrounds with an artistic tone."),
        ScenePreset("nature", "Nature / Garden", "Lush greenery, flowers, and sunlight."),
    )
}

POSE_OPTIONS: Dict[str, PoseOption] = {
    option.id: option
    for option in (
        PoseOption("front", "Front View", "Full view, model looking at camera"),
        PoseOption("three_quarters", "3/4 Angle", "Classic editorial angle"),
        PoseOption("side", "Side Profile", "Detailed view from the side"),
        PoseOption("back", "Back View", "Showing the full back details"),
        PoseOption("close_up", "Close-up", "Fabric texture and fine details"),
        PoseOption("lifestyle", "Lifestyle", "Dynamic, natural interaction"),
    )
}

MODEL_GENDERS: Tuple[str, ...] = ("Male", "Female", "Unisex")
MODEL_AGES: Tuple[str, ...] = ("18-25", "26-35", "36-45", "46+")
MODEL_ETHNICITIES: Tuple[str, ...] = (
    "Any",
    "Asian",
    "Black",
    "Caucasian",
    "Hispanic",
    "Middle Eastern",
    "South Asian",
    "Mixed",
)
MODEL_BODY_TYPES: Tuple[str, ...] = ("Any", "Slim", "Athletic", "Average", "Curvy", "Plus-size")


def resolve_scene_description(scene_id: str | None, custom_description: Optional[str] = None) -> str:
    """Return the scene text for ``scene_id``.

    A ``custom`` scene uses the caller's description when one is supplied.
    Unknown ids fall back to a professional studio backdrop.
    """

    normalized = (scene_id or "").strip().lower()
    if normalized == CUSTOM_SCENE_ID and custom_description and custom_description.strip():
        return custom_description.strip()
    preset = SCENE_PRESETS.get(normalized)
    if preset is None:
        logger.info("Unknown scene '%s', defaulting to studio backdrop", scene_id)
        return DEFAULT_SCENE_DESCRIPTION
    return preset.description


def resolve_pose_descriptions(pose_ids: Iterable[str]) -> List[str]:
    """Map selected pose ids to descriptions in catalog order."""

    selected = {str(pose_id).strip().lower() for pose_id in pose_ids}
    unknown = sorted(selected - POSE_OPTIONS.keys())
    if unknown:
        raise ValueError(f"Unknown pose ids: {unknown}")
    if not selected:
        raise ValueError("At least one pose must be selected")
    return [option.description for pose_id, option in POSE_OPTIONS.items() if pose_id in selected]


def _require_choice(field_name: str, value: str, choices: Tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"Unsupported {field_name} '{value}'. Expected one of: {', '.join(choices)}")
    return value


@dataclass(frozen=True)
class ModelAttributes:
    """Casting choices that describe the model wearing the garment."""

    gender: str = "Female"
    age: str = "18-25"
    ethnicity: str = "Any"
    body_type: str = "Any"
    creative_details: str = ""

    def __post_init__(self) -> None:
        _require_choice("gender", self.gender, MODEL_GENDERS)
        _require_choice("age", self.age, MODEL_AGES)
        _require_choice("ethnicity", self.ethnicity, MODEL_ETHNICITIES)
        _require_choice("body type", self.body_type, MODEL_BODY_TYPES)

    def describe(self) -> str:
        base = f"{self.gender}, age {self.age}, {self.ethnicity} ethnicity, {self.body_type} build."
        details = self.creative_details.strip()
        return f"{base} {details}" if details else base


def catalog_options() -> Dict[str, object]:
    """Expose every selectable option for API clients."""

    return {
        "scenes": [vars(preset) for preset in SCENE_PRESETS.values()],
        "poses": [vars(option) for option in POSE_OPTIONS.values()],
        "model": {
            "genders": list(MODEL_GENDERS),
            "ages": list(MODEL_AGES),
            "ethnicities": list(MODEL_ETHNICITIES),
            "body_types": list(MODEL_BODY_TYPES),
        },
    }


__all__ = [
    "CUSTOM_SCENE_ID",
    "DEFAULT_SCENE_DESCRIPTION",
    "MODEL_AGES",
    "MODEL_BODY_TYPES",
    "MODEL_ETHNICITIES",
    "MODEL_GENDERS",
    "ModelAttributes",
    "POSE_OPTIONS",
    "PoseOption",
    "SCENE_PRESETS",
    "ScenePreset",
    "catalog_options",
    "resolve_pose_descriptions",
    "resolve_scene_description",
]
