"""
健康检查路由
功能：用于部署平台 / 监控确认服务存活
"""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from tlpcore.config import get_settings
from tlpcore.models import Format

router = APIRouter(prefix="/api/v1", tags=["Health"])


@router.get("/health")
def health() -> Dict[str, Any]:
    """
    - always returns ok=True if API is alive
    - extra diagnostics: supported formats, import defaults, upload limit
    """
    s = get_settings()

    return {
        "ok": True,
        "env": s.app_env,
        "formats": [f.value for f in Format],
        "import": {
            "default_lyric": s.default_lyric,
            "skip_corrupt_fragments": s.skip_corrupt_fragments,
        },
        "limits": {
            "max_upload_size_mb": s.max_upload_size_mb,
        },
    }
