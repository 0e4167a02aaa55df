import logging

from icsfeed import notify
from icsfeed.notify import LoggingNotifier, SMTPNotifier, create_notifier


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def send_message(self, message):
        self.messages.append(message)


class TestNotifiers:
    def test_logging_notifier(self, caplog):
        with caplog.at_level(logging.INFO, logger="icsfeed.notify"):
            LoggingNotifier().send("ops@example.com", "Parsed 3 events")
        assert "Parsed 3 events" in caplog.text

    def test_smtp_notifier_sends_message(self, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(notify.smtplib, "SMTP", FakeSMTP)
        SMTPNotifier("mail.test", 2525, sender="feed@example.com").send(
            "ops@example.com", "Parsed 3 events"
        )
        smtp = FakeSMTP.instances[0]
        assert (smtp.host, smtp.port) == ("mail.test", 2525)
        message = smtp.messages[0]
        assert message["To"] == "ops@example.com"
        assert message["From"] == "feed@example.com"
        assert "Parsed 3 events" in message.get_content()

    def test_create_notifier(self):
        assert isinstance(create_notifier(None, 25, "a@b"), LoggingNotifier)
        assert isinstance(create_notifier("mail.test", 25, "a@b"), SMTPNotifier)
