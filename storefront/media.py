from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_MEDIA_ROOT = "uploads"
DEFAULT_MEDIA_URL = "/uploads"
DEFAULT_PUBLIC_BASE_URL = "http://127.0.0.1:8000"


def media_root() -> Path:
    return Path(os.getenv("MEDIA_ROOT", DEFAULT_MEDIA_ROOT)).resolve()


def media_url() -> str:
    return os.getenv("MEDIA_URL", DEFAULT_MEDIA_URL).rstrip("/")


def public_base_url() -> str:
    return os.getenv("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/")


def local_url_for(key: str) -> str:
    return f"{public_base_url()}{media_url()}/{key.lstrip('/')}"


def local_path_for_url(url: str) -> Path | None:
    """Caminho em disco de uma url pública local; None se apontar para fora de MEDIA_ROOT."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    prefix = media_url() + "/"
    if not path.startswith(prefix):
        return None
    root = media_root()
    candidate = (root / path[len(prefix):]).resolve()
    if root in candidate.parents:
        return candidate
    return None
