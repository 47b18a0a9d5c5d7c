"""
Display module for indicator rendering.

Provides compositing of the layered indicator images.
"""

from .renderer import IndicatorRenderer, composite_layer, generate_texture

__all__ = [
    "IndicatorRenderer",
    "composite_layer",
    "generate_texture",
]
