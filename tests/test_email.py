import smtplib
from unittest import mock

import pytest

from app.core.config import settings
from app.services import email


@pytest.fixture
def mail_settings(monkeypatch):
    monkeypatch.setattr(settings, "MAIL_SERVER", "smtp.test")
    monkeypatch.setattr(settings, "MAIL_FROM", "site@example.com")
    monkeypatch.setattr(settings, "CONTACT_INBOX", "inbox@example.com")
    monkeypatch.setattr(settings, "MAIL_USERNAME", "site")
    monkeypatch.setattr(settings, "MAIL_PASSWORD", "secret")
    monkeypatch.setattr(settings, "MAIL_SSL", True)


def test_unconfigured_mail_is_logged_only(monkeypatch):
    monkeypatch.setattr(settings, "MAIL_SERVER", "")
    with mock.patch("smtplib.SMTP_SSL") as smtp:
        assert email.send_contact_message("Ada", "ada@example.com", "Hello", "Hi there") is True
    smtp.assert_not_called()


def test_contact_message_goes_to_inbox(mail_settings):
    with mock.patch("smtplib.SMTP_SSL") as smtp:
        assert email.send_contact_message("Ada", "ada@example.com", "Hello", "Line one\nLine two") is True

    server = smtp.return_value.__enter__.return_value
    server.login.assert_called_once_with("site", "secret")
    sender, recipient, raw = server.sendmail.call_args[0]
    assert (sender, recipient) == ("site@example.com", "inbox@example.com")
    assert "Reply-To: ada@example.com" in raw
    assert "[Contact] Hello" in raw


def test_smtp_failure_returns_false(mail_settings):
    with mock.patch("smtplib.SMTP_SSL", side_effect=smtplib.SMTPConnectError(421, "busy")):
        assert email.send_contact_message("Ada", "ada@example.com", "Hello", "Hi there") is False


def test_connection_is_closed_when_login_fails(mail_settings):
    with mock.patch("smtplib.SMTP_SSL") as smtp:
        server = smtp.return_value.__enter__.return_value
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        assert email.send_contact_message("Ada", "ada@example.com", "Hello", "Hi there") is False

    smtp.return_value.__exit__.assert_called_once()
    server.sendmail.assert_not_called()


def test_plain_connection_upgrades_with_starttls(mail_settings, monkeypatch):
    monkeypatch.setattr(settings, "MAIL_SSL", False)
    with mock.patch("smtplib.SMTP") as smtp:
        assert email.send_contact_message("Ada", "ada@example.com", "Hello", "Hi there") is True

    server = smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    smtp.return_value.__exit__.assert_called_once()


def test_contact_message_is_escaped():
    body = email.format_contact_message("<b>Ada</b>", "ada@example.com", "Hi", "<script>x</script>\n\nbye")
    assert "<script>" not in body
    assert "&lt;b&gt;Ada&lt;/b&gt;" in body
    assert body.count("<p>") == 4
