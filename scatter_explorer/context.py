"""Context builders translating explorer state into page and JSON data."""

from __future__ import annotations

import json
from typing import Any, Optional

from flask import current_app, url_for

from .fields import split_fields
from .interaction import SelectionFilterBackend, bind_interactions
from .render import FIELD_COLOR, FIELD_X, FIELD_Y, ROLES, FieldMapping, scene_to_figure
from .state import ExplorerState

CONTROL_IDS = {
    "chart": "chart",
    "file": "fileInput",
    "x": "xField",
    "y": "yField",
    "color": "colorField",
    "image": "imageField",
    "render": "renderBtn",
    "reset": "resetBtn",
    "sample": "sampleBtn",
    "status": "status",
    "row_count": "rowCount",
    "tooltip": "tooltip",
}

PLACEHOLDERS = {
    "x": "X field",
    "y": "Y field",
    "color": "Color field",
    "image": "Image field",
}

PREFERRED_FIELDS = {"x": FIELD_X, "y": FIELD_Y, "color": FIELD_COLOR}
IMAGE_CANDIDATES = ("image", "img", "url", "picture")


def empty_select(role: str) -> dict[str, Any]:
    return {
        "id": CONTROL_IDS[role],
        "placeholder": PLACEHOLDERS[role],
        "options": [],
        "value": "",
    }


def empty_selects() -> dict[str, dict[str, Any]]:
    return {role: empty_select(role) for role in ROLES}


def build_selects(types: dict[str, str]) -> tuple[dict[str, dict[str, Any]], FieldMapping]:
    """Populate the dropdowns from inferred field types and pick defaults.

    X/Y list numeric fields (all fields when none are numeric), color lists
    every field and image lists categorical fields only. Conventional names
    win; otherwise the first option is chosen for X/Y/color.
    """
    numeric, categorical, all_fields = split_fields(types)
    selects = empty_selects()
    selects["x"]["options"] = list(numeric or all_fields)
    selects["y"]["options"] = list(numeric or all_fields)
    selects["color"]["options"] = list(all_fields)
    selects["image"]["options"] = list(categorical)

    for role, preferred in PREFERRED_FIELDS.items():
        options = selects[role]["options"]
        if preferred in options:
            selects[role]["value"] = preferred
        elif options:
            selects[role]["value"] = options[0]

    image = next((name for name in IMAGE_CANDIDATES if name in categorical), "")
    selects["image"]["value"] = image

    mapping = FieldMapping(
        x=selects["x"]["value"],
        y=selects["y"]["value"],
        color=selects["color"]["value"],
        image=image or None,
    )
    return selects, mapping


def build_ui(state: ExplorerState) -> dict[str, Any]:
    selects = {role: state.selects.get(role) or empty_select(role) for role in ROLES}
    return {
        "status": state.status,
        "row_count": state.row_count,
        "render_enabled": state.render_enabled,
        "selects": selects,
        "can_undo": state.history.can_undo(),
        "can_redo": state.history.can_redo(),
    }


def interaction_backend(state: ExplorerState) -> Optional[SelectionFilterBackend]:
    if state.scene is None:
        return None
    return SelectionFilterBackend(state.scene, current_app.config.get("EXPLORER_FILTER_FIELD"))


def build_scene_payload(state: ExplorerState) -> Optional[dict[str, Any]]:
    """Figure JSON plus interaction bindings for the current scene."""
    backend = interaction_backend(state)
    if backend is None:
        return None
    endpoints = {
        "hover": url_for("explorer.hover"),
        "click": url_for("explorer.click"),
        "undo": url_for("explorer.undo_selection"),
        "redo": url_for("explorer.redo_selection"),
    }
    bindings = bind_interactions(state.scene, backend, endpoints).to_dict()
    figure = scene_to_figure(state.scene, bindings)
    return {
        "figure": json.loads(figure.to_json()),
        "bindings": bindings,
        "mark_count": state.scene.mark_count,
    }


def build_page(state: ExplorerState) -> dict[str, Any]:
    return {
        "app_name": current_app.config["APP_NAME"],
        "controls": CONTROL_IDS,
        "ui": build_ui(state),
        "scene": build_scene_payload(state),
    }
