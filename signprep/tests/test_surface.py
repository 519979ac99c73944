import pytest

from signprep.model.field import FieldType
from signprep.state.session import DocumentSession
from signprep.viewer.coordinates import PointPx
from signprep.viewer.surface import ExistingFieldDrag, NewFieldDrag, PageSurfaceAdapter

NO_DELTA = PointPx(0, 0)


@pytest.fixture
def session():
    return DocumentSession(page_count=3)


def _laid_out(session, page_number=1, width=200, height=400):
    adapter = PageSurfaceAdapter(session, page_number)
    ticket = adapter.request_render(width)
    assert adapter.complete_render(ticket, height)
    return adapter


def test_new_drop_creates_field_on_adapter_page(session):
    adapter = _laid_out(session, page_number=2)
    field_id = adapter.handle_drop(NewFieldDrag(FieldType.SIGNATURE), PointPx(50, 20), NO_DELTA)

    field = session.fields.get(field_id)
    assert field.page_number == 2
    assert (field.left, field.top) == (25.0, 5.0)


def test_move_drop_applies_delta(session):
    adapter = _laid_out(session)
    field_id = adapter.handle_drop(NewFieldDrag(FieldType.TEXT), PointPx(20, 40), NO_DELTA)
    field = session.fields.get(field_id)

    # Pointer lands far from the anchor; only the travel matters.
    adapter.handle_drop(
        ExistingFieldDrag(field_id, field.left, field.top),
        PointPx(190, 390),
        PointPx(20, -40),
    )
    moved = session.fields.get(field_id)
    assert (moved.left, moved.top) == (20.0, 0.0)


def test_move_drop_on_other_page_keeps_field_page(session):
    first = _laid_out(session, page_number=1)
    second = _laid_out(session, page_number=2)
    field_id = first.handle_drop(NewFieldDrag(FieldType.DATE), PointPx(10, 10), NO_DELTA)
    field = session.fields.get(field_id)

    second.handle_drop(ExistingFieldDrag(field_id, field.left, field.top), PointPx(0, 0), PointPx(20, 0))
    assert session.fields.get(field_id).page_number == 1


def test_stale_move_of_unknown_field_is_ignored(session):
    adapter = _laid_out(session)
    assert adapter.handle_drop(ExistingFieldDrag(42, 1.0, 1.0), PointPx(0, 0), PointPx(5, 5)) is None
    assert len(session.fields) == 0


def test_drop_before_layout_is_skipped(session):
    adapter = PageSurfaceAdapter(session, 1)
    assert adapter.handle_drop(NewFieldDrag(FieldType.TEXT), PointPx(5, 5), NO_DELTA) is None
    assert len(session.fields) == 0


def test_zero_height_raster_skips_mutation(session):
    adapter = _laid_out(session, height=0)
    field_id = session.add_field(FieldType.TEXT, 1, 50.0, 50.0)
    assert adapter.handle_drop(ExistingFieldDrag(field_id, 50.0, 50.0), PointPx(0, 0), PointPx(10, 10)) is None
    assert session.fields.get(field_id).left == 50.0


def test_render_requested_only_when_width_changes(session):
    adapter = PageSurfaceAdapter(session, 1)
    assert adapter.request_render(0) is None
    first = adapter.request_render(600)
    assert first is not None and first.width == 600
    assert adapter.request_render(600) is None
    assert adapter.request_render(800).width == 800


def test_superseded_render_is_dropped(session):
    adapter = PageSurfaceAdapter(session, 1)
    old = adapter.request_render(600)
    new = adapter.request_render(800)
    assert adapter.complete_render(old, 1000) is False
    assert adapter.complete_render(new, 1100) is True
    assert (adapter.box.width, adapter.box.height) == (800.0, 1100.0)


def test_render_for_other_page_is_dropped(session):
    first = PageSurfaceAdapter(session, 1)
    second = PageSurfaceAdapter(session, 2)
    ticket = first.request_render(500)
    second.request_render(500)
    assert second.complete_render(ticket, 700) is False
    assert second.box.height == 0


def test_render_after_document_reload_is_dropped(session):
    adapter = PageSurfaceAdapter(session, 1)
    ticket = adapter.request_render(500)
    session.close()
    assert adapter.complete_render(ticket, 700) is False
    assert not adapter.box.is_ready


def test_overlay_positions_follow_rerender(session):
    adapter = _laid_out(session, width=200, height=400)
    adapter.handle_drop(NewFieldDrag(FieldType.TEXT), PointPx(50, 100), NO_DELTA)
    adapter.set_offset(10, 0)
    ticket = adapter.request_render(400)
    adapter.complete_render(ticket, 800)

    [(field, point)] = adapter.overlay_positions()
    assert (field.left, field.top) == (25.0, 25.0)
    assert (point.x, point.y) == (110.0, 200.0)


def test_failed_render_can_be_requested_again(session):
    adapter = PageSurfaceAdapter(session, 1)
    ticket = adapter.request_render(600)
    adapter.abandon_render(ticket)

    retry = adapter.request_render(600)
    assert retry is not None and retry.sequence > ticket.sequence
    assert adapter.complete_render(retry, 800)


def test_abandoning_superseded_render_keeps_newer_request(session):
    adapter = PageSurfaceAdapter(session, 1)
    old = adapter.request_render(600)
    adapter.request_render(800)
    adapter.abandon_render(old)
    assert adapter.request_render(800) is None
