"""Scene construction for the scatter explorer.

``render_scene`` is a pure function of a :class:`RenderRequest`. The scene it
returns carries the scales, the legend and one mark per plottable record;
``scene_to_figure`` turns that scene into a Plotly figure for the browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

import numpy as np
import plotly.graph_objects as go

from .fields import is_empty, to_number, unique_values
from .loader import Record
from .scales import TABLEAU10, LinearScale, OrdinalScale

FIELD_X = "x"
FIELD_Y = "y"
FIELD_COLOR = "label"
FIELD_IMAGE = "image"

MARK_RADIUS = 3
MARK_OPACITY = 0.7
LEGEND_SWATCH_RADIUS = 5

ROLES = ("x", "y", "color", "image")


@dataclass(frozen=True)
class Margin:
    top: int = 30
    right: int = 80
    bottom: int = 40
    left: int = 60


MARGIN = Margin()
WIDTH = 500 - MARGIN.left - MARGIN.right
HEIGHT = 400 - MARGIN.top - MARGIN.bottom


@dataclass(frozen=True)
class FieldMapping:
    x: str = ""
    y: str = ""
    color: str = ""
    image: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.x and self.y and self.color)

    def with_field(self, role: str, value: Optional[str]) -> "FieldMapping":
        if role not in ROLES:
            raise ValueError(f"Unknown field role {role!r}.")
        if role == "image":
            return replace(self, image=value or None)
        return replace(self, **{role: value or ""})


SAMPLE_MAPPING = FieldMapping(x=FIELD_X, y=FIELD_Y, color=FIELD_COLOR, image=FIELD_IMAGE)


@dataclass(frozen=True)
class RenderRequest:
    records: tuple[Record, ...]
    mapping: FieldMapping
    width: int = WIDTH
    height: int = HEIGHT
    margin: Margin = MARGIN

    @classmethod
    def build(cls, records: list[Record], mapping: FieldMapping, **layout: Any) -> "RenderRequest":
        return cls(records=tuple(records), mapping=mapping, **layout)


@dataclass(frozen=True)
class Mark:
    row: int
    cx: float
    cy: float
    fill: str
    color_value: Any
    tooltip: Optional[str] = None
    opacity: float = MARK_OPACITY
    radius: float = MARK_RADIUS


@dataclass(frozen=True)
class LegendEntry:
    value: Any
    label: str
    color: str


@dataclass(frozen=True)
class Legend:
    title: str
    entries: tuple[LegendEntry, ...] = ()
    swatch_radius: float = LEGEND_SWATCH_RADIUS


@dataclass
class Scene:
    request: RenderRequest
    x_scale: LinearScale
    y_scale: LinearScale
    color_scale: OrdinalScale
    legend: Legend
    marks: list[Mark] = field(default_factory=list)

    @property
    def mapping(self) -> FieldMapping:
        return self.request.mapping

    @property
    def mark_count(self) -> int:
        return len(self.marks)

    def mark_for_row(self, row: int) -> Optional[Mark]:
        for mark in self.marks:
            if mark.row == row:
                return mark
        return None


def _tooltip_value(record: Record, image_field: Optional[str]) -> Optional[str]:
    if not image_field:
        return None
    value = record.get(image_field)
    return None if is_empty(value) else str(value)


def render_scene(request: RenderRequest) -> Scene:
    """Build scales, legend and marks for one render."""
    mapping = request.mapping
    plottable: list[tuple[int, Record, float, float]] = []
    for row, record in enumerate(request.records):
        x_value = to_number(record.get(mapping.x))
        y_value = to_number(record.get(mapping.y))
        if x_value is None or y_value is None:
            continue
        plottable.append((row, record, x_value, y_value))

    xs = np.array([item[2] for item in plottable], dtype=float)
    ys = np.array([item[3] for item in plottable], dtype=float)
    x_scale = LinearScale.from_values(xs, (0, request.width))
    y_scale = LinearScale.from_values(ys, (0, request.height))

    categories = unique_values(list(request.records), mapping.color)
    color_scale = OrdinalScale(categories, TABLEAU10)
    legend = Legend(
        title=mapping.color,
        entries=tuple(
            LegendEntry(value=value, label=str(value), color=color_scale(value))
            for value in categories
        ),
    )

    cxs = x_scale(xs) if len(xs) else xs
    cys = y_scale(ys) if len(ys) else ys
    marks = []
    for (row, record, _, _), cx, cy in zip(plottable, cxs, cys):
        color_value = record.get(mapping.color)
        marks.append(
            Mark(
                row=row,
                cx=float(cx),
                cy=float(cy),
                fill=color_scale(color_value),
                color_value=color_value,
                tooltip=_tooltip_value(record, mapping.image),
            )
        )

    return Scene(
        request=request,
        x_scale=x_scale,
        y_scale=y_scale,
        color_scale=color_scale,
        legend=legend,
        marks=marks,
    )


def _style_figure(fig: go.Figure, scene: Scene) -> None:
    request = scene.request
    margin = request.margin
    fig.update_layout(
        template="plotly_white",
        width=request.width + margin.left + margin.right,
        height=request.height + margin.top + margin.bottom,
        margin=dict(l=margin.left, r=margin.right, t=margin.top, b=margin.bottom),
        paper_bgcolor="rgba(0, 0, 0, 0)",
        plot_bgcolor="rgba(0, 0, 0, 0)",
        hovermode="closest",
        clickmode="event",
        dragmode=False,
        legend=dict(
            title=dict(text=f"<b>{scene.legend.title}</b>", font=dict(size=12)),
            font=dict(size=12),
            itemclick=False,
            itemdoubleclick=False,
        ),
    )
    # Pixel space: x grows right, y grows down.
    fig.update_xaxes(range=[0, request.width], visible=False, fixedrange=True)
    fig.update_yaxes(range=[request.height, 0], visible=False, fixedrange=True)


def scene_to_figure(scene: Scene, bindings: Optional[dict[str, Any]] = None) -> go.Figure:
    """One scatter trace per legend category, in legend order.

    Marks whose color value is missing from the legend are drawn in a trailing
    unlabeled trace so every mark appears exactly once.
    """
    groups: dict[Any, list[Mark]] = {entry.value: [] for entry in scene.legend.entries}
    strays: list[Mark] = []
    for mark in scene.marks:
        bucket = groups.get(mark.color_value) if mark.color_value is not None else None
        (bucket if bucket is not None else strays).append(mark)

    fig = go.Figure()

    def add_marks(marks: list[Mark], name: str, color: Any, showlegend: bool = True) -> None:
        fig.add_trace(
            go.Scatter(
                x=[mark.cx for mark in marks],
                y=[mark.cy for mark in marks],
                mode="markers",
                name=name,
                legendgroup=name,
                showlegend=showlegend,
                marker=dict(
                    color=color,
                    size=[mark.radius * 2 for mark in marks],
                    opacity=MARK_OPACITY,
                    line=dict(width=0),
                ),
                customdata=[[mark.row, mark.tooltip] for mark in marks],
                hoverinfo="none",
                cliponaxis=True,
            )
        )

    for entry in scene.legend.entries:
        add_marks(groups[entry.value], entry.label, entry.color)
    if strays:
        add_marks(strays, "", [mark.fill for mark in strays], showlegend=False)

    _style_figure(fig, scene)
    if bindings is not None:
        fig.update_layout(meta=bindings)
    return fig
