from .height_field import HeightField, build_height_field
