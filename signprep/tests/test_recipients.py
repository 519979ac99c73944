import pytest

from signprep.state.errors import InvalidInput, InvalidRecipient, RecipientRejection
from signprep.state.recipients import RecipientStore, is_valid_email


@pytest.mark.parametrize(
    "email, expected",
    [
        ("a@x.com", True),
        ("first.last@sub.example.org", True),
        ("no-at-sign.com", False),
        ("a@nodot", False),
        ("", False),
    ],
)
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


def test_duplicate_email_rejected():
    store = RecipientStore()
    store.add_recipient("a@x.com")
    with pytest.raises(InvalidRecipient) as excinfo:
        store.add_recipient("a@x.com")
    assert excinfo.value.reason is RecipientRejection.DUPLICATE
    assert len(store) == 1


def test_uniqueness_is_case_sensitive():
    store = RecipientStore()
    store.add_recipient("a@x.com")
    store.add_recipient("A@x.com")
    assert len(store) == 2


@pytest.mark.parametrize(
    "email, reason",
    [("", RecipientRejection.EMPTY), ("   ", RecipientRejection.EMPTY), ("bogus", RecipientRejection.MALFORMED)],
)
def test_invalid_emails_rejected(email, reason):
    store = RecipientStore()
    with pytest.raises(InvalidInput) as excinfo:
        store.add_recipient(email)
    assert excinfo.value.reason is reason
    assert len(store) == 0


def test_ids_are_unique_and_order_is_insertion():
    store = RecipientStore()
    emails = ["c@x.com", "a@x.com", "b@x.com"]
    recipients = [store.add_recipient(email) for email in emails]
    assert len({recipient.id for recipient in recipients}) == 3
    assert [recipient.email for recipient in store.all()] == emails


def test_ids_are_not_reused_after_removal():
    store = RecipientStore()
    first = store.add_recipient("a@x.com")
    store.remove_recipient(first.id)
    second = store.add_recipient("a@x.com")
    assert second.id != first.id


def test_remove_unknown_recipient():
    store = RecipientStore()
    assert store.remove_recipient("filler_404") is False
