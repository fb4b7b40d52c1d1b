import pytest

from scatter_explorer.interaction import (
    Highlight,
    SelectionFilterBackend,
    SelectionHistory,
    bind_interactions,
)
from scatter_explorer.render import FieldMapping, RenderRequest, render_scene
from scatter_explorer.scales import TABLEAU10


@pytest.fixture
def scene(records):
    return render_scene(RenderRequest.build(records, FieldMapping("x", "y", "label", "image")))


def test_click_highlights_marks_sharing_color_value(scene, records):
    backend = SelectionFilterBackend(scene)
    highlight = backend.on_click(records[1])
    assert highlight.field == "label"
    assert highlight.value == "b"
    assert highlight.rows == (1, 4)
    assert highlight.color == TABLEAU10[1]


def test_click_skips_rows_without_marks(scene, records):
    """Row 2 shares label "a" but has no x value, so it is not highlighted."""
    highlight = SelectionFilterBackend(scene).on_click(records[0])
    assert highlight.rows == (0,)


def test_pinned_filter_field(records):
    rows = [dict(row, group="g1" if i < 2 else "g2") for i, row in enumerate(records)]
    scene = render_scene(RenderRequest.build(rows, FieldMapping("x", "y", "label")))
    highlight = SelectionFilterBackend(scene, filter_field="group").on_click(rows[0])
    assert highlight.field == "group"
    assert highlight.rows == (0, 1)
    assert highlight.color == TABLEAU10[0]


def test_hover_returns_image_with_offset(scene, records):
    backend = SelectionFilterBackend(scene)
    tooltip = backend.on_hover(records[0])
    assert tooltip.image == "img-a"
    assert (tooltip.offset_x, tooltip.offset_y) == (-130, -130)
    assert backend.on_hover(records[1]) is None


def test_hover_without_image_field(records):
    scene = render_scene(RenderRequest.build(records, FieldMapping("x", "y", "label")))
    assert SelectionFilterBackend(scene).on_hover(records[0]) is None


def test_bindings_describe_wiring(scene):
    backend = SelectionFilterBackend(scene)
    bindings = bind_interactions(scene, backend, {"click": "/api/click"}).to_dict()
    assert bindings["hover"] == {"enabled": True, "field": "image", "offset": {"x": -130, "y": -130}}
    assert bindings["click"] == {"field": "label"}
    assert bindings["endpoints"] == {"click": "/api/click"}


def test_selection_history_undo_redo():
    first = Highlight(field="label", value="a", rows=(0,), color="#000")
    second = Highlight(field="label", value="b", rows=(1,), color="#111")
    history = SelectionHistory()
    assert history.current is None
    history.push(first)
    history.push(second)
    assert history.undo() == first
    assert history.undo() is None
    assert history.undo() is None
    assert history.redo() == first
    history.push(second)
    assert not history.can_redo()
    assert history.can_undo()
    history.clear()
    assert history.current is None
    assert not history.can_undo()
