from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from .contact import ContactMessage

CONTACT_COLOR = 0x1E88E5  # blue


def _field(name: str, value: str, inline: bool = True) -> Dict[str, Any]:
    v = (value or "").strip()
    if not v:
        v = "-"
    if len(v) > 1024:
        v = v[:1021] + "..."
    return {"name": name, "value": v, "inline": inline}


class DiscordWebhookClient:
    def __init__(
        self,
        webhook_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._webhook_url = (webhook_url or "").strip()
        # Tight timeouts: the contact form should fail fast if Discord is unreachable.
        timeout = httpx.Timeout(12.0, connect=4.0)
        limits = httpx.Limits(max_keepalive_connections=5, max_connections=10)
        self._client = httpx.AsyncClient(timeout=timeout, limits=limits, transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self._webhook_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post_contact_message(
        self,
        msg: ContactMessage,
        *,
        site_name: str,
        host: str,
        client_ip: str,
        env: str,
    ) -> None:
        if not self._webhook_url:
            raise RuntimeError("Contact webhook not configured")

        fields = [
            _field("Name", msg.name, True),
            _field("Email", msg.email, True),
            _field("Subject", msg.subject_title, True),
            _field("Message", msg.message, False),
        ]
        payload: Dict[str, Any] = {
            "content": "",
            "embeds": [
                {
                    "title": msg.email_subject(site_name)[:256],
                    "color": CONTACT_COLOR,
                    "fields": fields,
                    "footer": {"text": f"{env} • {host or '-'} • {client_ip or '-'}"},
                }
            ],
            "allowed_mentions": {"parse": []},
        }

        last_exc: Exception | None = None
        for attempt in range(2):
            try:
                resp = await self._client.post(self._webhook_url, json=payload)
                resp.raise_for_status()
                return
            except httpx.RequestError as e:
                last_exc = e
                await asyncio.sleep(0.5 * (2**attempt))
            except httpx.HTTPStatusError as e:
                last_exc = e
                status = getattr(e.response, "status_code", None)
                if status and 500 <= int(status) < 600 and attempt == 0:
                    await asyncio.sleep(0.5)
                    continue
                break

        raise last_exc if last_exc else RuntimeError("Discord webhook post failed")
