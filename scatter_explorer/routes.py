"""HTTP routes for the scatter explorer."""

from __future__ import annotations

from typing import Any, Optional

from flask import Blueprint, current_app, jsonify, render_template, request
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

from .context import (
    build_page,
    build_scene_payload,
    build_selects,
    build_ui,
    empty_selects,
    interaction_backend,
)
from .fields import infer_field_types
from .loader import DatasetError, load_sample, parse_upload
from .render import ROLES, RenderRequest, render_scene
from .state import (
    STATUS_INCOMPLETE,
    ExplorerState,
    get_current_state,
    load_records,
    record_load_failure,
    reset_state,
    set_field,
    store_scene,
)

explorer_blueprint = Blueprint("explorer", __name__)


def ui_response(state: ExplorerState, status_code: int = 200, **extra: Any):
    return jsonify({"ui": build_ui(state), **extra}), status_code


def error_response(state: ExplorerState, message: str, status_code: int = 400):
    return ui_response(state, status_code, error=message)


def _load_into_state(state: ExplorerState, records: list, source: str) -> None:
    field_types = infer_field_types(records)
    selects, mapping = build_selects(field_types)
    load_records(state, records, source, field_types, selects, mapping)


def _row_from_payload(state: ExplorerState) -> Optional[int]:
    payload = request.get_json(silent=True) or {}
    try:
        row = int(payload.get("row"))
    except (TypeError, ValueError):
        return None
    if state.scene is None or state.scene.mark_for_row(row) is None:
        return None
    return row


@explorer_blueprint.app_errorhandler(RequestEntityTooLarge)
def file_too_large(exc):
    limit_mb = current_app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
    return jsonify({"error": f"File exceeds the {limit_mb} MB upload limit."}), 413


@explorer_blueprint.route("/")
def index():
    state = get_current_state()
    return render_template("explorer.html", **build_page(state))


@explorer_blueprint.route("/api/state")
def current_state():
    state = get_current_state()
    return ui_response(state, scene=build_scene_payload(state), summary=state.to_dict())


@explorer_blueprint.route("/api/sample", methods=["POST"])
def use_sample():
    state = get_current_state()
    sample_path = current_app.config["EXPLORER_SAMPLE_PATH"]
    try:
        records = load_sample(sample_path)
    except (OSError, DatasetError) as exc:
        current_app.logger.warning("Unable to load bundled dataset: %s", exc)
        record_load_failure(state, f"Parse failed: {exc}")
        return error_response(state, str(exc))
    _load_into_state(state, records, "sample")
    current_app.logger.info("Session %s loaded bundled dataset (%d rows)", state.id, len(records))
    return ui_response(state)


@explorer_blueprint.route("/api/upload", methods=["POST"])
def upload():
    state = get_current_state()
    file = request.files.get("file")
    if not file or file.filename == "":
        return error_response(state, "Select a file before uploading.")

    display_name = secure_filename(file.filename) or "upload"
    try:
        records = parse_upload(file.filename, file.read())
    except DatasetError as exc:
        current_app.logger.warning("Upload %s rejected: %s", display_name, exc)
        record_load_failure(state, f"Parse failed: {exc}")
        return error_response(state, str(exc))

    _load_into_state(state, records, display_name)
    current_app.logger.info(
        "Session %s uploaded %s with %d rows and %d fields",
        state.id,
        display_name,
        len(records),
        len(state.field_types),
    )
    return ui_response(state)


@explorer_blueprint.route("/api/fields", methods=["POST"])
def update_field():
    state = get_current_state()
    payload = request.get_json(silent=True) or {}
    role = payload.get("role")
    value = payload.get("value") or ""
    if role not in ROLES:
        return error_response(state, f"Unknown field role {role!r}.")
    if not isinstance(value, str):
        return error_response(state, "Field value must be a string.")
    set_field(state, role, value)
    return ui_response(state)


@explorer_blueprint.route("/api/render", methods=["POST"])
def render():
    state = get_current_state()
    if not state.render_enabled:
        state.status = STATUS_INCOMPLETE
        return error_response(state, STATUS_INCOMPLETE)

    try:
        scene = render_scene(RenderRequest.build(state.records, state.mapping))
        store_scene(state, scene)
        payload = build_scene_payload(state)
    except Exception as exc:  # pragma: no cover - surfaced to user
        current_app.logger.exception("Render failed")
        return error_response(state, f"Render failed: {exc}", 500)

    current_app.logger.info(
        "Session %s rendered %d marks (x=%s, y=%s, color=%s)",
        state.id,
        scene.mark_count,
        state.mapping.x,
        state.mapping.y,
        state.mapping.color,
    )
    return ui_response(state, scene=payload)


@explorer_blueprint.route("/api/hover", methods=["POST"])
def hover():
    state = get_current_state()
    row = _row_from_payload(state)
    if row is None:
        return error_response(state, "Hovered mark is not part of the current scene.")
    backend = interaction_backend(state)
    tooltip = backend.on_hover(state.scene.request.records[row])
    return jsonify({"tooltip": tooltip.to_dict() if tooltip else None})


@explorer_blueprint.route("/api/click", methods=["POST"])
def click():
    state = get_current_state()
    row = _row_from_payload(state)
    if row is None:
        return error_response(state, "Clicked mark is not part of the current scene.")
    backend = interaction_backend(state)
    highlight = backend.on_click(state.scene.request.records[row])
    state.history.push(highlight)
    return ui_response(state, highlight=highlight.to_dict())


@explorer_blueprint.route("/api/selection/undo", methods=["POST"])
def undo_selection():
    state = get_current_state()
    highlight = state.history.undo()
    return ui_response(state, highlight=highlight.to_dict() if highlight else None)


@explorer_blueprint.route("/api/selection/redo", methods=["POST"])
def redo_selection():
    state = get_current_state()
    highlight = state.history.redo()
    return ui_response(state, highlight=highlight.to_dict() if highlight else None)


@explorer_blueprint.route("/api/reset", methods=["POST"])
def reset():
    state = get_current_state()
    reset_state(state, empty_selects())
    current_app.logger.info("Session %s reset", state.id)
    return ui_response(state, scene=None)
