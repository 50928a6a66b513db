"""
Rendering of derivations as expressions.

Modules:
- render.py: Full expressions (render) and top-level descriptors (render_top)
- evaluate.py: sly-based parser that evaluates rendered expressions exactly
"""

from .render import render, render_key, render_top, splice_point
from .evaluate import ExpressionError, evaluate, evaluate_int

__all__ = [
    "render",
    "render_key",
    "render_top",
    "splice_point",
    "ExpressionError",
    "evaluate",
    "evaluate_int",
]
