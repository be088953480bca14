"""Core business logic layer.

Subpackages:
- weeks: ISO week math, rotation week mapping, seasons
- composition: sub-recipe graph (cycle checks, ingredient resolution)
- scaling: non-linear portion scaling
- rotation: rotation grid and template lifecycle
- reporting: rotation quality metrics
- optimization: swap proposals and the swap application protocol
- shopping: weekly shopping list from the rendered rotation
"""
__all__ = ["weeks", "composition", "scaling", "rotation", "reporting", "optimization", "shopping"]
