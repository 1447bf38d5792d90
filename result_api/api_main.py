# api_main.py
# FastAPI service for the lottery result site
# - Result index (list / find / clear-cache) over the images directory
# - Contact form endpoint
# - Result images served as static files under /results/

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .contact import SUCCESS_MESSAGE, failure_message, validate_contact
from .discord_webhook import DiscordWebhookClient
from .drawlog.parser import normalize_slot, parse_date_fragment
from .drawlog.selftest import run_codec_selftest
from .index_store import ResultIndex
from .schema import ResultDescriptor

logger = logging.getLogger("resultweb")

SITE_NAME = "Lottery Results Contact Form"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def create_app(
    settings: Optional[Settings] = None,
    *,
    webhook: Optional[DiscordWebhookClient] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    index = ResultIndex(settings.images_dir, ttl_seconds=settings.index_cache_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
        run_codec_selftest()
        client = webhook or DiscordWebhookClient(settings.contact_webhook_url)
        app.state.webhook = client
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Lottery Result API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.index = index

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(settings.allowed_origins) or ["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- routes ----------
    @app.get("/")
    async def root():
        return {"service": "lottery-result-api", "env": settings.environment, "ok": True}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True, "env": settings.environment}

    @app.get("/api/get-images")
    @app.get("/api/get-images.php")
    async def get_images(action: str = "list", date: str = "", time: str = "") -> Dict[str, Any]:
        act = (action or "").strip().lower()

        if act == "list":
            results = index.list()
            return {
                "success": True,
                "count": len(results),
                "images": [ResultDescriptor.from_result(r).wire() for r in results],
            }

        if act == "find":
            d = parse_date_fragment(date)
            slot = normalize_slot(time)
            if d is None or slot is None:
                raise HTTPException(status_code=400, detail="Expected date=DD-MM-YYYY and time like 8pm")
            hit = index.find(d, slot)
            return {
                "success": True,
                "found": hit is not None,
                "image": ResultDescriptor.from_result(hit).wire() if hit else None,
            }

        if act == "clear-cache":
            index.clear()
            logger.info("Result index cache cleared")
            return {"success": True, "cleared": True}

        raise HTTPException(status_code=400, detail=f"Unknown action: {action!r}")

    @app.post("/send-email")
    @app.post("/send-email.php")
    async def send_email(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        subject: str = Form(""),
        message: str = Form(""),
    ) -> Dict[str, Any]:
        msg, errors = validate_contact(name, email, subject, message)
        if msg is None:
            return {"success": False, "errors": errors}

        client: DiscordWebhookClient = request.app.state.webhook
        try:
            await client.post_contact_message(
                msg,
                site_name=SITE_NAME,
                host=request.headers.get("host", ""),
                client_ip=request.client.host if request.client else "",
                env=settings.environment,
            )
        except Exception as e:
            logger.warning("Contact message not delivered: %s", e)
            return {"success": False, "message": failure_message(settings.contact_inbox)}

        return {"success": True, "message": SUCCESS_MESSAGE}

    app.mount(
        "/results",
        StaticFiles(directory=str(settings.images_dir), check_dir=False),
        name="results",
    )
    return app


app = create_app()


# ---------- uvicorn entry ----------
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("result_api.api_main:app", host="0.0.0.0", port=port, reload=False)
