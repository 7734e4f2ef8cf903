"""Sprite images built from downloaded image data."""

import io
import logging
from typing import Dict, Set, Tuple

import customtkinter as ctk
from PIL import Image, UnidentifiedImageError

from constants import COLORS, SPRITE_SIZE
from models import PokemonRecord

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


class SpriteManager:
    """Decodes stored image data into CTkImages, cached per Pokémon and size."""

    def __init__(self):
        self.cache: Dict[Tuple[str, Size], ctk.CTkImage] = {}
        self._placeholders: Dict[Size, ctk.CTkImage] = {}
        self._broken: Set[str] = set()

    def placeholder(self, size: Size = SPRITE_SIZE) -> ctk.CTkImage:
        """Get placeholder image for Pokémon without an image yet."""
        if size not in self._placeholders:
            img = Image.new('RGB', size, color=COLORS["placeholder"])
            self._placeholders[size] = ctk.CTkImage(light_image=img, size=size)
        return self._placeholders[size]

    def get_sprite(self, record: PokemonRecord, size: Size = SPRITE_SIZE) -> ctk.CTkImage:
        """Sprite for a Pokémon, or the placeholder if it has no usable image data."""
        if not record.has_image or record.name in self._broken:
            return self.placeholder(size)

        key = (record.name, size)
        if key in self.cache:
            return self.cache[key]

        try:
            image = Image.open(io.BytesIO(record.image_data))
            image = image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Cannot decode image for {record.name}: {e}")
            self._broken.add(record.name)
            return self.placeholder(size)

        ctk_image = ctk.CTkImage(light_image=image, size=size)
        self.cache[key] = ctk_image
        return ctk_image

    def clear_cache(self) -> None:
        self.cache.clear()
        self._broken.clear()
