"""Visibility of generated items relative to the annotated declaration."""

from __future__ import annotations

from faultline.models.declaration import Visibility, VisibilityKind


def _super_path(depth: int) -> Visibility:
    return Visibility.restricted(*(["super"] * depth), in_token=True)


def inherited(vis: Visibility, depth: int) -> Visibility:
    """Visibility that reaches what ``vis`` reaches from ``depth`` scopes further in.

    Items of the generated namespace must not be visible more broadly than
    the declaration itself, so relative restrictions gain ``super`` steps.
    """
    match vis.kind:
        case VisibilityKind.PUBLIC | VisibilityKind.CRATE:
            return vis
        case VisibilityKind.INHERITED:
            return _super_path(depth)

    if not vis.in_token and len(vis.path) == 1:
        match vis.path[0]:
            case "self":
                return _super_path(depth)
            case "super":
                return _super_path(depth + 1)
        return vis

    head, *rest = vis.path
    if head == "self":
        return Visibility.restricted("super", *rest, in_token=True)
    if head == "super":
        return Visibility.restricted("super", *vis.path, in_token=True)
    # Any other path is rooted and reaches the same items from anywhere.
    return Visibility.restricted(*vis.path, in_token=True)
