import pytest

from scatter_explorer.render import (
    HEIGHT,
    WIDTH,
    FieldMapping,
    RenderRequest,
    render_scene,
    scene_to_figure,
)
from scatter_explorer.scales import TABLEAU10

MAPPING = FieldMapping(x="x", y="y", color="label", image="image")


def test_one_mark_per_plottable_row(records):
    """Rows with an empty or missing x/y value get no mark."""
    scene = render_scene(RenderRequest.build(records, MAPPING))
    assert [mark.row for mark in scene.marks] == [0, 1, 4]


def test_marks_positioned_by_niced_scales(records):
    scene = render_scene(RenderRequest.build(records, MAPPING))
    assert scene.x_scale.domain == (1.0, 9.0)
    assert scene.y_scale.domain == (2.0, 10.0)
    first, _, last = scene.marks
    assert (first.cx, first.cy) == (0.0, 0.0)
    assert (last.cx, last.cy) == (pytest.approx(WIDTH), pytest.approx(HEIGHT))


def test_legend_covers_all_categories(records):
    """Categories come from every row, even rows without a mark."""
    scene = render_scene(RenderRequest.build(records, MAPPING))
    assert scene.legend.title == "label"
    assert [entry.value for entry in scene.legend.entries] == ["a", "b", "c"]
    assert [entry.color for entry in scene.legend.entries] == list(TABLEAU10[:3])
    assert scene.marks[1].fill == TABLEAU10[1]


def test_tooltip_values(records):
    scene = render_scene(RenderRequest.build(records, MAPPING))
    assert [mark.tooltip for mark in scene.marks] == ["img-a", None, None]
    plain = render_scene(RenderRequest.build(records, FieldMapping("x", "y", "label")))
    assert all(mark.tooltip is None for mark in plain.marks)


def test_rerender_does_not_accumulate_marks(records):
    request = RenderRequest.build(records, MAPPING)
    first = render_scene(request)
    second = render_scene(request)
    assert first.mark_count == second.mark_count == 3
    assert [m.row for m in first.marks] == [m.row for m in second.marks]


def test_unknown_field_renders_nothing(records):
    scene = render_scene(RenderRequest.build(records, FieldMapping("nope", "y", "label")))
    assert scene.mark_count == 0


def test_field_mapping_updates():
    mapping = FieldMapping()
    assert not mapping.is_complete()
    mapping = mapping.with_field("x", "a").with_field("y", "b").with_field("color", "c")
    assert mapping.is_complete()
    assert mapping.with_field("image", "").image is None
    with pytest.raises(ValueError):
        mapping.with_field("size", "a")


def test_figure_has_trace_per_category(records):
    scene = render_scene(RenderRequest.build(records, MAPPING))
    fig = scene_to_figure(scene, {"click": {"field": "label"}})
    assert [trace.name for trace in fig.data] == ["a", "b", "c"]
    assert sum(len(trace.x or ()) for trace in fig.data) == scene.mark_count
    assert list(fig.layout.xaxis.range) == [0, WIDTH]
    assert list(fig.layout.yaxis.range) == [HEIGHT, 0]
    assert fig.layout.meta == {"click": {"field": "label"}}


def test_figure_keeps_marks_without_color_value():
    rows = [{"x": 1, "y": 1, "label": "a"}, {"x": 2, "y": 2}]
    scene = render_scene(RenderRequest.build(rows, MAPPING))
    fig = scene_to_figure(scene)
    assert len(fig.data) == 2
    assert fig.data[1].showlegend is False
    assert sum(len(trace.x or ()) for trace in fig.data) == 2
