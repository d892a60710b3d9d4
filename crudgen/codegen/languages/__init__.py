"""
Language-specific code generators.

Only Go is generated today; each language lives in its own subpackage.
"""

from .go import GoCrudGenerator, create_go_generator

__all__ = ["GoCrudGenerator", "create_go_generator"]
