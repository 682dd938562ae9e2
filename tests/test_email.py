import smtplib

import pytest

from journal_api.core.config import settings
from journal_api.utils import email as email_utils
from journal_api.utils.email import send_email


class FakeSMTP:
    """Records every connection and the messages sent through it."""

    connections = []

    def __init__(self, server, port, fail=False):
        self.server = server
        self.port = port
        self.fail = fail
        self.messages = []
        FakeSMTP.connections.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, msg):
        if self.fail:
            raise smtplib.SMTPServerDisconnected("connection lost")
        self.messages.append(msg)


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.connections = []
    monkeypatch.setattr(settings, "SMTP_SERVER", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_EMAIL", "noreply@example.com")
    monkeypatch.setattr(settings, "SMTP_PORT", 2525)
    monkeypatch.setattr(email_utils.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_html_and_plain_go_in_one_message(smtp):
    assert send_email(["bob@example.com"], "Hola", "<p>Hola</p>", "html", "Hola") is True

    assert len(smtp.connections) == 1
    connection = smtp.connections[0]
    assert (connection.server, connection.port) == ("smtp.example.com", 2525)

    msg = connection.messages[0]
    assert msg["To"] == "bob@example.com"
    assert msg.get_content_subtype() == "alternative"
    assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]


def test_plain_only_message(smtp):
    assert send_email(["bob@example.com"], "Hola", "Hola") is True

    parts = smtp.connections[0].messages[0].get_payload()
    assert [part.get_content_type() for part in parts] == ["text/plain"]


def test_smtp_error_opens_one_connection(monkeypatch, smtp):
    monkeypatch.setattr(email_utils.smtplib, "SMTP", lambda server, port: FakeSMTP(server, port, fail=True))

    assert send_email(["bob@example.com"], "Hola", "<p>Hola</p>", "html", "Hola") is False
    assert len(FakeSMTP.connections) == 1


def test_unconfigured_smtp_sends_nothing(monkeypatch, smtp):
    monkeypatch.setattr(settings, "SMTP_SERVER", None)

    assert send_email(["bob@example.com"], "Hola", "Hola") is False
    assert smtp.connections == []
