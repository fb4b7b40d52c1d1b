"""Hover and click behaviours attached to a rendered scene.

Backends implement :class:`InteractionBackend`; the page script only knows
the endpoints and the binding description returned by
:func:`bind_interactions`, so any backend can be swapped in.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Protocol

from .fields import is_empty
from .loader import Record
from .render import Scene

TOOLTIP_OFFSET_X = -70
TOOLTIP_OFFSET_Y = -100


@dataclass(frozen=True)
class Tooltip:
    image: str
    offset_x: float
    offset_y: float

    def to_dict(self) -> dict[str, Any]:
        return {"image": self.image, "offset": {"x": self.offset_x, "y": self.offset_y}}


@dataclass(frozen=True)
class Highlight:
    field: str
    value: Any
    rows: tuple[int, ...]
    color: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["rows"] = list(self.rows)
        return data


class InteractionBackend(Protocol):
    def on_hover(self, record: Record) -> Optional[Tooltip]:
        ...

    def on_click(self, record: Record) -> Highlight:
        ...


class SelectionFilterBackend:
    """Click selects a mark, filters marks sharing its value, highlights them.

    The filter keys on ``filter_field`` when given, otherwise on the scene's
    color field.
    """

    def __init__(self, scene: Scene, filter_field: Optional[str] = None):
        self.scene = scene
        self.filter_field = filter_field or scene.mapping.color
        margin = scene.request.margin
        self.offset = (TOOLTIP_OFFSET_X - margin.left, TOOLTIP_OFFSET_Y - margin.top)

    def on_hover(self, record: Record) -> Optional[Tooltip]:
        image_field = self.scene.mapping.image
        if not image_field:
            return None
        value = record.get(image_field)
        if is_empty(value):
            return None
        return Tooltip(image=str(value), offset_x=self.offset[0], offset_y=self.offset[1])

    def on_click(self, record: Record) -> Highlight:
        value = self._select(record)
        rows = self._filter(value)
        return self._highlight(record, value, rows)

    def _select(self, record: Record) -> Any:
        return record.get(self.filter_field)

    def _filter(self, value: Any) -> tuple[int, ...]:
        records = self.scene.request.records
        return tuple(
            mark.row
            for mark in self.scene.marks
            if records[mark.row].get(self.filter_field) == value
        )

    def _highlight(self, record: Record, value: Any, rows: tuple[int, ...]) -> Highlight:
        color = self.scene.color_scale(record.get(self.scene.mapping.color))
        return Highlight(field=self.filter_field, value=value, rows=rows, color=color)


@dataclass(frozen=True)
class InteractionBindings:
    hover_enabled: bool
    image_field: Optional[str]
    filter_field: str
    offset_x: float
    offset_y: float
    endpoints: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hover": {
                "enabled": self.hover_enabled,
                "field": self.image_field,
                "offset": {"x": self.offset_x, "y": self.offset_y},
            },
            "click": {"field": self.filter_field},
            "endpoints": dict(self.endpoints),
        }


def bind_interactions(
    scene: Scene,
    backend: SelectionFilterBackend,
    endpoints: Optional[dict[str, str]] = None,
) -> InteractionBindings:
    """Describe how the page should wire hover and click for ``scene``."""
    return InteractionBindings(
        hover_enabled=bool(scene.mapping.image),
        image_field=scene.mapping.image,
        filter_field=backend.filter_field,
        offset_x=backend.offset[0],
        offset_y=backend.offset[1],
        endpoints=endpoints or {},
    )


class SelectionHistory:
    """Undo/redo track of click highlights. ``None`` marks a cleared selection."""

    def __init__(self) -> None:
        self._entries: list[Optional[Highlight]] = [None]
        self._cursor = 0

    @property
    def current(self) -> Optional[Highlight]:
        return self._entries[self._cursor]

    def push(self, highlight: Highlight) -> None:
        del self._entries[self._cursor + 1 :]
        self._entries.append(highlight)
        self._cursor += 1

    def undo(self) -> Optional[Highlight]:
        if self._cursor > 0:
            self._cursor -= 1
        return self.current

    def redo(self) -> Optional[Highlight]:
        if self._cursor < len(self._entries) - 1:
            self._cursor += 1
        return self.current

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def clear(self) -> None:
        self._entries = [None]
        self._cursor = 0
