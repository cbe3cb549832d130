"""Run a photoshoot for a local garment photo from the command line."""

import argparse
import asyncio
import json
from pathlib import Path

from models.catalog import POSE_OPTIONS, SCENE_PRESETS, ModelAttributes
from models.image import ImagePayload
from studio_app.app import PhotoshootStudioApp
from studio_app.config import StudioConfig
from tools.genai_provider import MockContentProvider

_DRY_RUN_ANALYSIS = {
    "garmentType": "blazer",
    "fabric": "wool twill",
    "colorPalette": ["navy", "gold"],
    "style": "tailored single-breasted fit",
    "gender": "Unisex",
    "uniquenessLevel": "gold button embossing on cuffs and front closure",
}

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp", "image/gif": "gif"}


def _print_progress(index: int, total: int, is_retry: bool) -> None:
    suffix = " (retrying)" if is_retry else ""
    print(f"Crafting frame {index} of {total}{suffix}...")


async def run(args: argparse.Namespace) -> None:
    config = StudioConfig.from_env()
    provider = MockContentProvider(default_text=json.dumps(_DRY_RUN_ANALYSIS)) if args.dry_run else None
    studio = PhotoshootStudioApp(config=config, provider=provider)

    garment = ImagePayload.from_bytes(Path(args.garment).read_bytes())
    analysis = await studio.analyze_garment(garment)
    print(f"Garment: {analysis.garment_type} ({', '.join(analysis.color_palette)})")

    frames = await studio.produce_photoshoot(
        user_id=args.user,
        garment_image=garment,
        analysis=analysis,
        scene_id=args.scene,
        custom_scene=args.custom_scene,
        model_attributes=ModelAttributes(
            gender=args.gender,
            age=args.age,
            ethnicity=args.ethnicity,
            body_type=args.body_type,
            creative_details=args.details,
        ),
        pose_ids=args.poses,
        on_progress=_print_progress,
    )

    output_dir = Path(args.out)
    output_dir.mkdir(parents=True, exist_ok=True)
    for frame in frames:
        path = output_dir / f"{frame.id}.{_EXTENSIONS.get(frame.image.mime_type, 'png')}"
        path.write_bytes(frame.image_bytes)
        print(f"Saved {path}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Virtual fashion photoshoot")
    parser.add_argument("garment", help="Path to the garment photo")
    parser.add_argument("--poses", nargs="+", default=["front"], choices=sorted(POSE_OPTIONS))
    parser.add_argument("--scene", default="auto", choices=sorted(SCENE_PRESETS))
    parser.add_argument("--custom-scene", default=None, help="Scene text when --scene custom")
    parser.add_argument("--gender", default="Female")
    parser.add_argument("--age", default="18-25")
    parser.add_argument("--ethnicity", default="Any")
    parser.add_argument("--body-type", default="Any")
    parser.add_argument("--details", default="", help="Free-text creative direction for the model")
    parser.add_argument("--user", default="local", help="User id for usage accounting")
    parser.add_argument("--out", default="output", help="Directory for generated frames")
    parser.add_argument("--dry-run", action="store_true", help="Use the offline mock provider")
    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
