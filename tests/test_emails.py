import pytest
import requests
from zerolist import configs
from zerolist.core.emails import Mailer, is_email_configured
from zerolist.core.exceptions import EmailError, NotFoundError


@pytest.fixture
def waitlist(make_waitlist):
    return make_waitlist(name="Rocket", logo_url="https://cdn.example.com/logo.png",
                         notify_email="owner@example.com")

@pytest.fixture
def signup(waitlist, add_signup):
    return add_signup(waitlist, "a@example.com", status="pending",
                      confirmation_token="abc123", custom_data={"company": "<Acme>"})


def test_not_configured_by_default():
    assert is_email_configured() is False

def test_confirmation_requires_configuration(waitlist, signup):
    with pytest.raises(EmailError) as e:
        Mailer.send_confirmation(waitlist, signup, "https://app.test")
    assert "RESEND_API_KEY" in e.value.message

def test_welcome_and_notification_skip_without_configuration(waitlist, signup):
    assert Mailer.send_welcome(waitlist, signup) is None
    assert Mailer.send_admin_notification(waitlist, signup, "https://app.test") is None

def test_send_confirmation(waitlist, signup, email_configured):
    assert Mailer.send_confirmation(waitlist, signup, "https://app.test") == {"id": "email_123"}
    args, kwargs = email_configured.call_args
    assert args == (configs.RESEND_API_URL,)
    assert kwargs["headers"]["Authorization"] == "Bearer re_test"
    body = kwargs["json"]
    assert body["from"] == "Rocket <hello@example.com>"
    assert body["to"] == ["a@example.com"]
    assert body["subject"] == "Confirm your spot on the Rocket waitlist"
    assert "https://app.test/api/w/rocket/confirm/abc123" in body["html"]
    assert "https://cdn.example.com/logo.png" in body["html"]

def test_send_welcome(waitlist, signup, email_configured):
    Mailer.send_welcome(waitlist, signup)
    body = email_configured.call_args.kwargs["json"]
    assert body["subject"] == "You're #1 on the Rocket waitlist!"

def test_admin_notification(waitlist, signup, email_configured):
    Mailer.send_admin_notification(waitlist, signup, "https://app.test")
    body = email_configured.call_args.kwargs["json"]
    assert body["to"] == ["owner@example.com"]
    assert body["from"] == "zerolist <hello@example.com>"
    assert body["subject"] == "New signup #1: a@example.com"
    assert "&lt;Acme&gt;" in body["html"]
    assert f"https://app.test/admin/waitlists/{waitlist.id}/signups" in body["html"]

def test_admin_notification_can_be_disabled(waitlist, signup, email_configured):
    waitlist.update(notify_on_signup=False)
    assert Mailer.send_admin_notification(waitlist, signup, "https://app.test") is None
    email_configured.assert_not_called()

def test_resend_failure_is_an_email_error(waitlist, signup, email_configured):
    email_configured.return_value.raise_for_status.side_effect = requests.HTTPError("422")
    with pytest.raises(EmailError):
        Mailer.send_welcome(waitlist, signup)

def test_unknown_template():
    with pytest.raises(NotFoundError):
        Mailer.render("goodbye")

def test_preview_custom_data(waitlist):
    html = Mailer.preview("admin-notification", waitlist, "https://app.test",
                          custom_data={"role": "Engineer"}, referral_source="newsletter")
    assert "test@example.com" in html
    assert "#47" in html
    assert "Engineer" in html
    assert "newsletter" in html
