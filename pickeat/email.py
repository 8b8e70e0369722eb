"""Sending of transactional e-mails through an HTTP e-mail API."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

import requests

__all__ = ["EmailError", "EmailSender"]

log = logging.getLogger(__name__)

SMTP_API_ROOT = "https://api.smtp2go.com/v3"
SENDER = "Pick Eat <noreply@example.com>"

_VALIDATION_SUBJECT = "Validation de votre compte pick-eat"
_VALIDATION_BODY = (
    "Bonjour,\n"
    "\n"
    "Bienvenue sur Pick Eat ! :)\n"
    "Cliquez sur le lien suivant pour valider la création de votre compte :\n"
    "{base_url}/account_validation?token={token}\n"
    "\n"
    "A très vite !"
)

_RESET_SUBJECT = "Mot de passe oublié"
_RESET_BODY = (
    "Bonjour,\n"
    "\n"
    "Suite à votre demande, voici un lien pour réinitialiser votre mot de passe :\n"
    "{base_url}/password_reset?token={token}\n"
    "\n"
    "Si vous n'êtes pas à l'origine de cette demande, vous pouvez ignorer cet email.\n"
    "                \n"
    "A très vite !"
)


class EmailError(Exception):
    """Raised when an e-mail could not be handed to the e-mail API."""


@dataclass
class _EmailRequest:
    api_key: str
    to: list[str]
    sender: str
    subject: str
    text_body: str

    def __repr__(self) -> str:
        return (
            f"EmailReq {{ api_key: <hidden>, to: {self.to!r}, sender: {self.sender}, "
            f"subject: {self.subject}, text_body: {self.text_body} }}"
        )


class EmailSender:
    """Sends account e-mails with the given API key."""

    def __init__(self, api_key: str, api_root: str = SMTP_API_ROOT) -> None:
        self._api_key = api_key
        self._endpoint = f"{api_root}/email/send"

    def __repr__(self) -> str:
        return f"EmailSender(endpoint={self._endpoint!r})"

    def _send(self, address: str, subject: str, text_body: str) -> None:
        body = _EmailRequest(
            api_key=self._api_key,
            to=[address],
            sender=SENDER,
            subject=subject,
            text_body=text_body,
        )
        log.debug("%r", body)
        try:
            requests.post(self._endpoint, json=asdict(body), timeout=30)
        except requests.RequestException as exc:
            raise EmailError(str(exc)) from exc

    def send_account_validation_email(self, address: str, token: str, base_url: str) -> None:
        """Send the link that validates a newly created account."""
        self._send(
            address,
            _VALIDATION_SUBJECT,
            _VALIDATION_BODY.format(base_url=base_url, token=token),
        )

    def send_password_reset_email(self, address: str, token: str, base_url: str) -> None:
        """Send the link that lets the user choose a new password."""
        self._send(
            address,
            _RESET_SUBJECT,
            _RESET_BODY.format(base_url=base_url, token=token),
        )