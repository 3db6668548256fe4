import pytest
from botocore.exceptions import ClientError

from tgspain.libs.email_service import EmailRequest, EmailService, EmailServiceError, deliver


class DummySESClient:
    def __init__(self, should_fail=False, fail_create=False, existing_lists=None):
        self.should_fail = should_fail
        self.fail_create = fail_create
        self.calls = []
        self.created_lists = []
        self.contact_lists = set(existing_lists or [])

    def send_email(self, **kwargs):
        if self.should_fail:
            raise ClientError({"Error": {"Code": "Boom", "Message": "boom"}}, "SendEmail")
        self.calls.append(kwargs)

    def create_contact_list(self, **kwargs):
        if self.fail_create:
            raise ClientError({"Error": {"Code": "RandomError", "Message": "boom"}},
                              "CreateContactList")
        self.created_lists.append(kwargs.get("ContactListName"))
        self.contact_lists.add(kwargs.get("ContactListName"))

    def get_contact_list(self, **kwargs):
        name = kwargs.get("ContactListName")
        if name not in self.contact_lists:
            raise ClientError({"Error": {"Code": "NotFoundException", "Message": "missing"}},
                              "GetContactList")


@pytest.fixture
def ses_settings(settings):
    settings.AWS_MAILMANAGER_ADDRESS_LIST = "tgs-contact-list"
    settings.AWS_SES_CONFIGURATION_SET = ""
    settings.DEFAULT_FROM_EMAIL = "TGS <no-reply@example.com>"
    settings.EMAIL_REPLY_TO = "hola@example.com"
    return settings


def announcement(to_address="mentor@example.com"):
    return EmailRequest(to_address=to_address, subject="Novedades",
                        text_body="Test", transactional=False)


def test_announcements_get_unsubscribe_links(ses_settings):
    client = DummySESClient()
    sent = EmailService(ses_client=client).send_bulk([announcement()])

    assert sent == 1
    assert client.created_lists == ["tgs-contact-list"]
    assert client.calls[0]["ListManagementOptions"] == {
        "ContactListName": "tgs-contact-list",
    }
    assert client.calls[0]["ReplyToAddresses"] == ["hola@example.com"]


def test_transactional_emails_skip_contact_list(ses_settings):
    client = DummySESClient()
    request = EmailRequest(to_address="participant@example.com", subject="Tu entrada",
                           text_body="Test", tags={"type": "registration_confirmation"})

    sent = EmailService(ses_client=client).send_bulk([request])

    assert sent == 1
    assert client.created_lists == []
    payload = client.calls[0]
    assert "ListManagementOptions" not in payload
    assert payload["EmailTags"] == [{"Name": "type", "Value": "registration_confirmation"}]
    assert payload["FromEmailAddress"] == "TGS <no-reply@example.com>"


def test_existing_contact_list_is_not_recreated(ses_settings):
    client = DummySESClient(existing_lists=["tgs-contact-list"])
    EmailService(ses_client=client).send_bulk([announcement(), announcement("b@example.com")])

    assert client.created_lists == []
    assert len(client.calls) == 2


def test_send_bulk_raises_on_failure(ses_settings):
    client = DummySESClient(should_fail=True)
    with pytest.raises(EmailServiceError):
        EmailService(ses_client=client).send_bulk([announcement()])


def test_contact_list_creation_failure_raises(ses_settings):
    client = DummySESClient(fail_create=True)
    with pytest.raises(EmailServiceError):
        EmailService(ses_client=client).send_bulk([announcement()])


def test_empty_recipients_are_skipped(ses_settings):
    client = DummySESClient()
    sent = EmailService(ses_client=client).send_bulk([
        EmailRequest(to_address="", subject="x", text_body="x"),
    ])
    assert sent == 0
    assert client.calls == []


def test_deliver_swallows_failures(ses_settings):
    service = EmailService(ses_client=DummySESClient(should_fail=True))
    assert deliver([announcement()], "test", service=service) == 0


def test_deliver_without_region_is_a_no_op(settings):
    settings.AWS_SES_REGION = ""
    assert deliver([announcement()], "test") == 0
