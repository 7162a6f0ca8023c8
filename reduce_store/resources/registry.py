"""Registered resource kinds."""

from __future__ import annotations

from reduce_store.resources.base import ResourceKind


CSS = ResourceKind(name="css", file_name="RequestReducedStyle.css", content_type="text/css")
JAVASCRIPT = ResourceKind(
    name="javascript",
    file_name="RequestReducedScript.js",
    content_type="application/x-javascript",
)
SPRITE = ResourceKind(
    name="sprite",
    file_name="RequestReducedSprite.png",
    content_type="image/png",
    is_image=True,
)


DEFAULT_KINDS: tuple[ResourceKind, ...] = (CSS, JAVASCRIPT, SPRITE)


def kind_by_name(name: str | None, kinds: tuple[ResourceKind, ...] = DEFAULT_KINDS) -> ResourceKind | None:
    if not name:
        return None
    name = name.lower().lstrip(".")
    for kind in kinds:
        if name == kind.name or name == kind.extension.lstrip("."):
            return kind
    return None
