"""Telethon session setup: client factory and interactive login.

Delivery to Saved Messages needs an authorized user session. The session is
created once (QR code or phone code) and reused from the .session file.
"""

from __future__ import annotations

import logging
import os
from getpass import getpass
from typing import Optional

import qrcode
from telethon import TelegramClient, errors

QR_TIMEOUT_SECONDS = 120
DEFAULT_SESSION_NAME = "notigate"

LOGGER = logging.getLogger(__name__)


def build_client(session_dir: Optional[str] = None) -> TelegramClient:
    """Create a Telethon client from API_ID/API_HASH in the environment.

    A relative SESSION_NAME is placed in `session_dir`, so the .session file
    sits next to the database no matter where the CLI is started from.
    """

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    session = os.getenv("SESSION_NAME") or DEFAULT_SESSION_NAME
    if session_dir and not os.path.isabs(session):
        session = os.path.join(session_dir, session)

    LOGGER.info("Initializing Telegram client (session %s)", session)
    return TelegramClient(session, int(api_id), api_hash)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _two_factor_password() -> str:
    return os.getenv("2FA") or getpass("2FA password: ")


async def _login_with_qr(client: TelegramClient) -> None:
    qr_login = await client.qr_login()
    _print_qr(qr_login.url)
    await qr_login.wait(timeout=QR_TIMEOUT_SECONDS)


async def _login_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _choose_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in {"qr", "phone"}:
        return method
    choices = {"1": "qr", "2": "phone"}
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("notigate > ").strip()
        if choice == "3":
            raise SystemExit(0)
        if choice in choices:
            return choices[choice]
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    """Log the session in unless it is already authorized."""

    if await client.is_user_authorized():
        return

    try:
        if _choose_method() == "phone":
            await _login_with_phone(client)
        else:
            await _login_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_two_factor_password())
