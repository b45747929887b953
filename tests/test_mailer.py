import asyncio
import logging
import aiosmtplib
import config
import mailer


def test_verification_url(monkeypatch):
    monkeypatch.setattr(config, "APP_BASE_URL", "https://circle.example.edu/")
    assert mailer.build_verification_url("abc") == "https://circle.example.edu/verify-email?token=abc"


def test_verification_message_carries_link(monkeypatch):
    monkeypatch.setattr(config, "APP_BASE_URL", "http://localhost:3000")
    msg = mailer.build_verification_message("a@x.edu", "alice", "tok123")
    assert msg["To"] == "a@x.edu"
    plain, html = msg.get_payload()
    assert "http://localhost:3000/verify-email?token=tok123" in plain.get_payload(decode=True).decode()
    assert 'href="http://localhost:3000/verify-email?token=tok123"' in html.get_payload(decode=True).decode()


def test_without_smtp_host_link_is_logged(monkeypatch, caplog):
    monkeypatch.setattr(config, "SMTP_HOST", "")
    with caplog.at_level(logging.INFO, logger="mailer"):
        sent = asyncio.run(mailer.send_verification_email("a@x.edu", "alice", "tok123"))
    assert sent is False
    assert "verify-email?token=tok123" in caplog.text


def test_delivery_failure_is_logged(monkeypatch, caplog):
    async def broken_send(msg):
        raise aiosmtplib.SMTPConnectError("connection refused")

    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.edu")
    monkeypatch.setattr(mailer, "send_message", broken_send)
    with caplog.at_level(logging.ERROR, logger="mailer"):
        sent = asyncio.run(mailer.send_verification_email("a@x.edu", "alice", "tok123"))
    assert sent is False
    assert "Failed to send verification email to a@x.edu" in caplog.text


def test_delivery_success(monkeypatch):
    delivered = []

    async def fake_send(msg):
        delivered.append(msg)

    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.edu")
    monkeypatch.setattr(mailer, "send_message", fake_send)
    assert asyncio.run(mailer.send_verification_email("a@x.edu", "alice", "tok123")) is True
    assert delivered[0]["Subject"] == "Verify your CampusCircle account"
