"""Image payloads, garment schema, anchor cell and catalog lookups."""

import base64

import pytest
from pydantic import ValidationError

from models.catalog import (
    DEFAULT_SCENE_DESCRIPTION,
    ModelAttributes,
    catalog_options,
    resolve_pose_descriptions,
    resolve_scene_description,
)
from models.frames import AnchorAlreadySetError, GeneratedFrame, MasterAnchor, new_frame_id
from models.garment import GarmentAnalysis
from models.image import ImagePayload, sniff_mime_type

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"pixels"


def test_image_payload_decodes_data_uri_and_bare_base64() -> None:
    encoded = base64.b64encode(PNG_BYTES).decode()

    from_uri = ImagePayload.from_data_uri(f"data:image/png;base64,{encoded}")
    from_bare = ImagePayload.from_data_uri(encoded)

    assert from_uri.data == PNG_BYTES
    assert from_uri.mime_type == "image/png"
    assert from_bare.mime_type == "image/jpeg"
    assert ImagePayload.from_data_uri(from_uri.to_data_uri()) == from_uri


def test_image_payload_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        ImagePayload.from_data_uri("data:image/png;base64,not base64!")
    with pytest.raises(ValueError):
        ImagePayload(data=b"")
    with pytest.raises(ValueError):
        ImagePayload(data=b"abc", mime_type="text/plain")


def test_sniff_mime_type_and_copy() -> None:
    assert sniff_mime_type(PNG_BYTES) == "image/png"
    assert sniff_mime_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert sniff_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    payload = ImagePayload.from_bytes(PNG_BYTES)
    duplicate = payload.copy()
    assert duplicate == payload and duplicate.data is not payload.data


def test_garment_analysis_accepts_aliases_and_field_names() -> None:
    by_alias = GarmentAnalysis.model_validate(
        {
            "garmentType": "blazer",
            "fabric": "linen",
            "colorPalette": [" ivory ", "", "black"],
            "style": "relaxed",
            "gender": "female",
            "uniquenessLevel": "Contrast piping along lapels.",
        }
    )
    by_name = GarmentAnalysis(
        garment_type="blazer",
        fabric="linen",
        color_palette=["ivory", "black"],
        style="relaxed",
        gender="Female",
        uniqueness_level="Contrast piping along lapels.",
    )

    assert by_alias == by_name
    assert by_alias.color_palette == ["ivory", "black"]
    assert by_alias.to_wire()["colorPalette"] == ["ivory", "black"]


def test_garment_analysis_is_immutable_and_validated() -> None:
    analysis = GarmentAnalysis(
        garmentType="tunic",
        fabric="cotton",
        colorPalette=["red"],
        style="straight",
        gender="Unisex",
        uniquenessLevel="Block-printed paisley motifs across the body.",
    )
    with pytest.raises(ValidationError):
        analysis.garment_type = "dress"
    with pytest.raises(ValidationError):
        GarmentAnalysis(
            garmentType="tunic",
            fabric="cotton",
            colorPalette=[],
            style="straight",
            gender="Unisex",
            uniquenessLevel="none",
        )
    with pytest.raises(ValidationError):
        GarmentAnalysis(
            garmentType="tunic",
            fabric="cotton",
            colorPalette=["red"],
            style="straight",
            gender="Robot",
            uniquenessLevel="none",
        )


def test_master_anchor_is_write_once() -> None:
    anchor = MasterAnchor()
    first = ImagePayload.from_bytes(PNG_BYTES)

    assert not anchor.is_set and anchor.value is None
    anchor.set(first)
    with pytest.raises(AnchorAlreadySetError):
        anchor.set(ImagePayload.from_bytes(PNG_BYTES + b"2"))
    assert anchor.value is first


def test_generated_frame_ids() -> None:
    frame_id = new_frame_id(2)
    frame = GeneratedFrame(id=frame_id, image=ImagePayload.from_bytes(PNG_BYTES))

    assert frame_id.startswith("shot-") and frame_id.split("-")[2] == "2"
    assert frame.image_bytes == PNG_BYTES


def test_scene_resolution_with_custom_and_fallback() -> None:
    assert resolve_scene_description("beach") == "Sunny coastal vibe with sand and sea."
    assert resolve_scene_description("custom", "Rooftop at dusk") == "Rooftop at dusk"
    assert resolve_scene_description("moon-base") == DEFAULT_SCENE_DESCRIPTION


def test_pose_resolution_uses_catalog_order() -> None:
    descriptions = resolve_pose_descriptions(["back", "front", "back"])

    assert descriptions == ["Full view, model looking at camera", "Showing the full back details"]
    with pytest.raises(ValueError):
        resolve_pose_descriptions(["handstand"])
    with pytest.raises(ValueError):
        resolve_pose_descriptions([])


def test_model_attributes_description_and_validation() -> None:
    attributes = ModelAttributes(
        gender="Male", age="26-35", ethnicity="South Asian", body_type="Athletic", creative_details="Short beard."
    )

    assert attributes.describe() == "Male, age 26-35, South Asian ethnicity, Athletic build. Short beard."
    assert ModelAttributes().describe() == "Female, age 18-25, Any ethnicity, Any build."
    with pytest.raises(ValueError):
        ModelAttributes(age="12")


def test_catalog_options_lists_everything() -> None:
    options = catalog_options()

    assert {scene["id"] for scene in options["scenes"]} >= {"studio", "custom", "auto"}
    assert [pose["id"] for pose in options["poses"]][0] == "front"
    assert "Plus-size" in options["model"]["body_types"]


def test_null_palette_entries_are_dropped() -> None:
    analysis = GarmentAnalysis.model_validate(
        {
            "garmentType": "shirt",
            "fabric": "linen",
            "colorPalette": [None, "sage", None, "cream"],
            "style": "boxy",
            "gender": "Male",
            "uniquenessLevel": "Mother-of-pearl buttons.",
        }
    )

    assert analysis.color_palette == ["sage", "cream"]
    assert analysis.primary_color == "sage"
