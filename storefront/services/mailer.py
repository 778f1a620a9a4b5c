from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    sender: str
    to: str
    subject: str
    html: str
    text: str | None = None


class Mailer(Protocol):
    async def send(self, email: OutgoingEmail) -> None: ...


def build_mime_message(email: OutgoingEmail) -> EmailMessage:
    message = EmailMessage()
    message["From"] = email.sender
    message["To"] = email.to
    message["Subject"] = email.subject
    message.set_content(email.text or "Abra este e-mail em um cliente com suporte a HTML.")
    message.add_alternative(email.html, subtype="html")
    return message


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = True,
        timeout: float = 15.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    async def send(self, email: OutgoingEmail) -> None:
        await aiosmtplib.send(
            build_mime_message(email),
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=self.port == 465,
            start_tls=self.starttls and self.port != 465,
            timeout=self.timeout,
        )
        logger.info("E-mail sent to=%s subject=%s", email.to, email.subject)
