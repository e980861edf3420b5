"""Shared fixtures: a small material catalog built on MemoryModel."""

from types import SimpleNamespace

import pytest

from crudkit.db import MemoryModel


@pytest.fixture
def catalog():
    """Material catalog with two association levels.

    Material -> Texture (belongs_to), MaterialType (belongs_to)
    Texture -> TextureType (belongs_to), Images (has_many)
    """
    material_type = MemoryModel("MaterialType", primary_key="uuid")
    texture_type = MemoryModel("TextureType", primary_key="uuid")
    image = MemoryModel("Image", primary_key="uuid")
    texture = MemoryModel("Texture", primary_key="uuid")
    material = MemoryModel("Material", primary_key="uuid")

    material.belongs_to(texture, foreign_key="texture_uuid", as_="Texture")
    material.belongs_to(
        material_type, foreign_key="material_type_uuid", as_="MaterialType"
    )
    texture.belongs_to(texture_type, foreign_key="texture_type_uuid", as_="TextureType")
    texture.has_many(image, foreign_key="texture_uuid", as_="Images")

    return SimpleNamespace(
        Material=material,
        MaterialType=material_type,
        Texture=texture,
        TextureType=texture_type,
        Image=image,
    )
