"""Telethon session helpers: client construction and interactive login.

API_ID/API_HASH come from .env via python-dotenv so secrets stay out of
config.json. The session name defaults to "chatdigest", which creates a
local ``chatdigest.session`` file on first login.
"""

from __future__ import annotations

import logging
import os
from getpass import getpass

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

LOGGER = logging.getLogger(__name__)

LOGIN_METHODS = {"1": "qr", "2": "phone"}


def build_client() -> TelegramClient:
    """Create a Telethon client; fail fast when credentials are missing."""

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    LOGGER.info("Initializing Telegram client")
    return TelegramClient(os.getenv("SESSION_NAME", "chatdigest"), int(api_id), api_hash)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _pick_login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in LOGIN_METHODS.values():
        return method
    while True:
        print("")
        print("Login methods: [1] QR code  [2] Phone code  [3] Exit")
        choice = input("chatdigest > ").strip()
        if choice == "3":
            raise SystemExit(0)
        if choice in LOGIN_METHODS:
            return LOGIN_METHODS[choice]
        print("Invalid option. Please choose 1, 2, or 3.")


async def _login(client: TelegramClient, method: str) -> None:
    if method == "qr":
        qr = await client.qr_login()
        _print_qr(qr.url)
        await qr.wait(timeout=120)
        return
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    await client.sign_in(phone=phone, code=input("Login code: ").strip())


async def authorize(client: TelegramClient) -> None:
    """Log the session in unless it is already authorized."""

    if await client.is_user_authorized():
        return

    try:
        await _login(client, _pick_login_method())
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=os.getenv("2FA") or getpass("2FA password: "))

    me = await client.get_me()
    LOGGER.info("Logged in as: %s", getattr(me, "first_name", None) or getattr(me, "id", "?"))
