"""Template renderer."""

from __future__ import annotations

from zebar.renderer.core import Renderer

__all__ = ["Renderer"]
