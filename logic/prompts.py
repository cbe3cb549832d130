"""Prompt text shared by the analyzer, sequence generator and refiner."""

from __future__ import annotations

from typing import List

from models.garment import GarmentAnalysis

ANALYSIS_INSTRUCTION = (
    "AI Fashion Director: Perform a technical analysis of this garment.\n"
    "EXTRACT:\n"
    "1. Garment Type (e.g., Anarkali, Blazer, Tunic).\n"
    "2. Primary Color (the dominant hue), placed first in colorPalette.\n"
    "3. Secondary Colors (list all accent hues, embroidery colors, or print shades) after the primary color.\n"
    "4. Fabric Texture & Material.\n"
    "5. Unique Embellishments: describe exhaustively any mirror work, thread embroidery, beads, "
    "or specific prints in uniquenessLevel.\n"
    "6. Style & Silhouette: fit and cut details.\n"
    "7. Gender: Male, Female or Unisex.\n"
    "Return only valid JSON matching the schema."
)

TECHNICAL_DIRECTIVES: List[str] = [
    "8k resolution",
    "photorealistic",
    "sharp focus",
    "high-end commercial studio lighting",
]

REFINE_CONSTRAINT = "strictly maintaining the garment design and model identity"


def production_rules(analysis: GarmentAnalysis, model_description: str, scene_description: str) -> str:
    """Constant block sent with every frame of one sequence."""

    accents = ", ".join(analysis.accent_colors) or "none"
    return (
        "PROFESSIONAL FASHION CAMPAIGN.\n"
        f"GARMENT FIDELITY: Model MUST wear the EXACT {analysis.garment_type} from the product reference.\n"
        f"COLOR LOCK: Primary: {analysis.primary_color}, Accents: {accents}.\n"
        f"DETAIL LOCK: Replicate this EXACT design/embroidery: {analysis.uniqueness_level}.\n"
        f"MODEL ATTRIBUTES: {model_description}.\n"
        f"SCENE: {scene_description}.\n"
        f"TECHNICAL: {', '.join(TECHNICAL_DIRECTIVES)}."
    )


def establishing_directive(pose: str) -> str:
    return (
        "Establish the definitive model identity and background environment. "
        "The model is wearing the outfit from the first reference image, which is the only source "
        f"for the garment. Pose: {pose}."
    )


def continuity_directive(pose: str) -> str:
    return (
        "STRICT VISUAL CONSISTENCY MANDATE:\n"
        "1. CLONE THE MODEL: You MUST use the EXACT same face, eyes, skin tone, hair color, hair texture "
        "and hairstyle from the second reference image. No variations allowed.\n"
        "2. CLONE THE BACKGROUND: The background geometry, room layout, lighting direction, shadows and "
        "environment MUST be identical to the second reference image.\n"
        "3. GARMENT PERSPECTIVE: Maintain the garment design from the first reference image, adjusted only "
        f"for this pose: {pose}."
    )


def frame_instruction(rules: str, pose: str, anchored: bool) -> str:
    directive = continuity_directive(pose) if anchored else establishing_directive(pose)
    return f"{rules}\n{directive}"


def refine_instruction(instruction: str) -> str:
    return f"Refine this fashion image while {REFINE_CONSTRAINT}: {instruction.strip()}"


__all__ = [
    "ANALYSIS_INSTRUCTION",
    "REFINE_CONSTRAINT",
    "TECHNICAL_DIRECTIVES",
    "continuity_directive",
    "establishing_directive",
    "frame_instruction",
    "production_rules",
    "refine_instruction",
]
