"""
Tests for the password reset email.
"""
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from gev_api.common.email_service import EmailService


@pytest.mark.asyncio
async def test_reset_email_carries_the_token():
    service = EmailService()

    with patch("gev_api.common.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
        assert await service.send_password_reset_email("ana@example.com", "tok-123", 30, nome="Ana") is True

    message = send.await_args.args[0]
    assert message["To"] == "ana@example.com"
    html = message.get_payload()[0].get_payload(decode=True).decode("utf-8")
    assert "tok-123" in html
    assert "Ana" in html
    assert "30 minutos" in html


@pytest.mark.asyncio
async def test_smtp_failure_returns_false():
    service = EmailService()

    with patch("gev_api.common.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
        send.side_effect = aiosmtplib.SMTPException("refused")
        assert await service.send_password_reset_email("ana@example.com", "tok-123", 30) is False
