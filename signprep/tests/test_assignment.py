import json

import pytest

from signprep.model.field import Field, FieldType
from signprep.model.recipient import Recipient
from signprep.state.assignment import (
    RECIPIENT_COLORS,
    UNASSIGNED_COLOR,
    UNKNOWN_RECIPIENT_COLOR,
    AssignmentCoordinator,
    SendBlocker,
    build_payload,
    is_ready_to_send,
    readiness,
    recipient_color,
)
from signprep.state.errors import NotReadyToSend, UnresolvedReference
from signprep.state.fields import FieldStore
from signprep.state.recipients import RecipientStore

ALICE = Recipient(id="filler_1", email="alice@x.com")
BOB = Recipient(id="filler_2", email="bob@x.com")


def _field(field_id, assigned_to, page_number=1):
    return Field(
        id=field_id,
        page_number=page_number,
        left=10.0 * field_id,
        top=5.0,
        field_type=FieldType.SIGNATURE.value,
        assigned_to=assigned_to,
    )


@pytest.fixture
def stores():
    fields = FieldStore()
    recipients = RecipientStore()
    return fields, recipients, AssignmentCoordinator(fields, recipients)


def test_assign_to_unknown_recipient_never_reaches_store(stores):
    fields, _, coordinator = stores
    field_id = fields.add_field(FieldType.TEXT, 1, 0.0, 0.0)
    with pytest.raises(UnresolvedReference):
        coordinator.assign(field_id, "filler_999")
    assert fields.get(field_id).assigned_to is None


def test_empty_recipient_id_unassigns(stores):
    fields, recipients, coordinator = stores
    recipient = recipients.add_recipient("a@x.com")
    field_id = fields.add_field(FieldType.TEXT, 1, 0.0, 0.0)
    coordinator.assign(field_id, recipient.id)
    coordinator.assign(field_id, "")
    assert fields.get(field_id).assigned_to is None


def test_removing_recipient_cascades_to_exactly_its_fields(stores):
    fields, recipients, coordinator = stores
    alice = recipients.add_recipient("alice@x.com")
    bob = recipients.add_recipient("bob@x.com")
    ids = [fields.add_field(FieldType.TEXT, 1, 0.0, 0.0) for _ in range(5)]
    owners = [alice.id, bob.id, alice.id, None, alice.id]
    for field_id, owner in zip(ids, owners):
        coordinator.assign(field_id, owner)

    affected = coordinator.remove_recipient(alice.id)

    assert affected == [ids[0], ids[2], ids[4]]
    assert [field.assigned_to for field in fields.all_fields()] == [None, bob.id, None, None, None]
    assert not recipients.contains(alice.id)


def test_removing_unknown_recipient_changes_nothing(stores):
    fields, _, coordinator = stores
    fields.add_field(FieldType.TEXT, 1, 0.0, 0.0)
    assert coordinator.remove_recipient("filler_7") == []


@pytest.mark.parametrize(
    "fields, recipients, expected",
    [
        ([], [ALICE], [SendBlocker.NO_FIELDS]),
        ([_field(0, None)], [ALICE], [SendBlocker.UNASSIGNED_FIELDS]),
        ([_field(0, "filler_1")], [], [SendBlocker.NO_RECIPIENTS]),
        ([], [], [SendBlocker.NO_FIELDS, SendBlocker.NO_RECIPIENTS]),
        ([_field(0, "filler_1"), _field(1, None)], [ALICE], [SendBlocker.UNASSIGNED_FIELDS]),
        ([_field(0, "filler_1"), _field(1, "filler_2")], [ALICE, BOB], []),
    ],
)
def test_readiness(fields, recipients, expected):
    assert readiness(fields, recipients) == expected
    assert is_ready_to_send(fields, recipients) is (expected == [])


def test_build_payload_strips_ids_and_keeps_count():
    fields = [_field(0, "filler_1"), _field(1, "filler_2", page_number=2), _field(2, "filler_1")]
    payload = build_payload(fields, [ALICE, BOB]).to_dict()

    assert len(payload["fields"]) == len(fields)
    for entry in payload["fields"]:
        assert "id" not in entry
        assert set(entry) == {"pageNumber", "left", "top", "type", "assignedTo"}
    assert payload["fields"][1] == {
        "pageNumber": 2,
        "left": 10.0,
        "top": 5.0,
        "type": "Signature",
        "assignedTo": "filler_2",
    }
    assert payload["recipients"] == [
        {"id": "filler_1", "email": "alice@x.com"},
        {"id": "filler_2", "email": "bob@x.com"},
    ]


def test_payload_json_round_trips_to_same_dict():
    payload = build_payload([_field(0, "filler_1")], [ALICE])
    assert json.loads(payload.to_json()) == payload.to_dict()


def test_build_payload_rejects_with_all_causes():
    with pytest.raises(NotReadyToSend) as excinfo:
        build_payload([_field(0, None)], [])
    assert excinfo.value.blockers == [SendBlocker.UNASSIGNED_FIELDS, SendBlocker.NO_RECIPIENTS]
    assert len(excinfo.value.messages) == 2


def test_recipient_color_is_stable_and_cycles():
    recipients = [Recipient(id=f"filler_{n}", email=f"{n}@x.com") for n in range(6)]
    assert recipient_color(None, recipients) == UNASSIGNED_COLOR
    assert recipient_color("filler_0", recipients) == RECIPIENT_COLORS[0]
    assert recipient_color("filler_4", recipients) == RECIPIENT_COLORS[0]
    assert recipient_color("filler_5", recipients) == recipient_color("filler_5", recipients)
    assert recipient_color("filler_99", recipients) == UNKNOWN_RECIPIENT_COLOR
