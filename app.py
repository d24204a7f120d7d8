# app.py
"""
HTTP front end for the .tlp codec.

Mounts the import/export routes. Local environments accept any localhost
origin; elsewhere only CORS_ALLOW_ORIGINS is allowed.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tlpcore.config import get_settings
from routers.convert import router as convert_router
from routers.health import router as health_router

logger = logging.getLogger("tlpcodec")


def _is_dev(app_env: str) -> bool:
    v = (app_env or "").strip().lower()
    return v in {"dev", "development", "local"}


def _parse_origins(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    parts = [p.strip() for p in raw.split(",")]
    return [p for p in parts if p]


def create_app() -> FastAPI:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    s = get_settings()
    app = FastAPI(
        title="TLP Codec",
        version="0.1.0",
        description="TuneLab project (.tlp) <-> canonical project conversion API",
    )

    app.state.settings = s

    if _is_dev(s.app_env):
        allow_origins: list[str] = []
        allow_origin_regex = r"http://(?:localhost|127\.0\.0\.1)(?::\d+)?"
        allow_credentials = True
    else:
        allow_origins = _parse_origins(s.cors_allow_origins)
        allow_origin_regex = None
        allow_credentials = bool(allow_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(convert_router)

    @app.get("/", include_in_schema=False)
    def root():
        return {"service": "TLP Codec", "status": "ok", "docs_url": "/docs"}

    logger.info("App created (env=%s)", s.app_env)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    s = get_settings()
    uvicorn.run("app:app", host=s.host, port=s.port, reload=True)
