"""In-memory explorer state, one entry per browser session."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Optional
from uuid import uuid4

from flask import current_app, session

from .fields import infer_field_types
from .interaction import SelectionHistory
from .loader import DatasetError, Record, load_sample
from .render import SAMPLE_MAPPING, FieldMapping, RenderRequest, Scene, render_scene

STATUS_INITIAL = "Choose a data file or use the bundled sample."
STATUS_LOADED = "Data loaded. Choose fields, then click Render."
STATUS_INCOMPLETE = "Choose X, Y and color fields first."
STATUS_RENDERED = "Render complete."
STATUS_RESET = "Cleared. Choose a data file."


@dataclass
class ExplorerState:
    """Container for one session's dataset, field choices and last scene."""

    id: str
    records: Optional[list[Record]] = None
    source: Optional[str] = None
    field_types: dict[str, str] = field(default_factory=dict)
    mapping: FieldMapping = field(default_factory=FieldMapping)
    selects: dict[str, dict[str, Any]] = field(default_factory=dict)
    status: str = STATUS_INITIAL
    row_count: int = 0
    render_blocked: bool = False
    scene: Optional[Scene] = None
    history: SelectionHistory = field(default_factory=SelectionHistory)
    last_action: Optional[datetime] = None

    @property
    def render_enabled(self) -> bool:
        return (
            self.records is not None
            and self.mapping.is_complete()
            and not self.render_blocked
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a view-friendly dictionary (excluding raw records)."""
        return {
            "id": self.id,
            "source": self.source,
            "status": self.status,
            "row_count": self.row_count,
            "render_enabled": self.render_enabled,
            "field_types": dict(self.field_types),
            "mapping": {
                "x": self.mapping.x,
                "y": self.mapping.y,
                "color": self.mapping.color,
                "image": self.mapping.image,
            },
            "mark_count": self.scene.mark_count if self.scene else 0,
            "last_action": (
                self.last_action.strftime("%Y-%m-%d %H:%M UTC") if self.last_action else None
            ),
        }


STATE_STORE: OrderedDict[str, ExplorerState] = OrderedDict()
_STORE_LOCK = Lock()


def _touch(state: ExplorerState) -> None:
    state.last_action = datetime.now(timezone.utc)


def create_state() -> ExplorerState:
    """New session state showing the bundled dataset with the sample mapping."""
    state = ExplorerState(id=uuid4().hex)
    sample_path = current_app.config["EXPLORER_SAMPLE_PATH"]
    try:
        records = load_sample(sample_path)
    except (OSError, DatasetError) as exc:
        current_app.logger.warning("Bundled dataset unavailable (%s): %s", sample_path, exc)
        return state
    state.records = records
    state.source = "sample"
    state.field_types = infer_field_types(records)
    state.row_count = len(records)
    state.scene = render_scene(RenderRequest.build(records, SAMPLE_MAPPING))
    _touch(state)
    return state


def get_current_state() -> ExplorerState:
    """Retrieve (or create) the state associated with the current session.

    The store keeps at most ``EXPLORER_MAX_SESSIONS`` entries; the least
    recently used one is dropped when a new session pushes past the limit.
    """
    state_id = session.get("explorer_id")
    with _STORE_LOCK:
        state = STATE_STORE.get(state_id) if state_id else None
        if state is not None:
            STATE_STORE.move_to_end(state.id)
            return state
        state = create_state()
        STATE_STORE[state.id] = state
        session["explorer_id"] = state.id
        limit = current_app.config.get("EXPLORER_MAX_SESSIONS") or 0
        while limit and len(STATE_STORE) > limit:
            evicted, _ = STATE_STORE.popitem(last=False)
            current_app.logger.info("Evicted idle session %s", evicted)
    return state


def load_records(
    state: ExplorerState,
    records: list[Record],
    source: str,
    field_types: dict[str, str],
    selects: dict[str, dict[str, Any]],
    mapping: FieldMapping,
) -> None:
    state.records = records
    state.source = source
    state.field_types = field_types
    state.selects = selects
    state.mapping = mapping
    state.row_count = len(records)
    state.render_blocked = False
    state.status = STATUS_LOADED
    _touch(state)


def record_load_failure(state: ExplorerState, message: str) -> None:
    state.status = message
    state.row_count = 0
    state.render_blocked = True
    _touch(state)


def set_field(state: ExplorerState, role: str, value: Optional[str]) -> None:
    state.mapping = state.mapping.with_field(role, value)
    if role in state.selects:
        state.selects[role]["value"] = value or ""
    state.render_blocked = False
    _touch(state)


def store_scene(state: ExplorerState, scene: Scene) -> None:
    """Replace the previous scene; selections never survive a re-render."""
    state.scene = scene
    state.history.clear()
    state.status = STATUS_RENDERED
    _touch(state)


def reset_state(state: ExplorerState, selects: dict[str, dict[str, Any]]) -> None:
    state.records = None
    state.source = None
    state.field_types = {}
    state.mapping = FieldMapping()
    state.selects = selects
    state.scene = None
    state.history.clear()
    state.row_count = 0
    state.render_blocked = False
    state.status = STATUS_RESET
    _touch(state)
