"""Model package exports."""

from models.catalog import ModelAttributes
from models.frames import GeneratedFrame, MasterAnchor
from models.garment import GarmentAnalysis
from models.image import ImagePayload

__all__ = ["GarmentAnalysis", "GeneratedFrame", "ImagePayload", "MasterAnchor", "ModelAttributes"]
