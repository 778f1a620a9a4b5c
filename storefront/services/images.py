from __future__ import annotations

import uuid

from fastapi import UploadFile

from storefront.errors import InvalidPayload
from storefront.storage import StorageBackend, build_media_key

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_GALLERY_IMAGES = 10

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xFF\xD8\xFF"
RIFF_SIGNATURE = b"RIFF"
WEBP_SIGNATURE = b"WEBP"


def _expected_extension(file: UploadFile) -> str | None:
    ext = ALLOWED_IMAGE_TYPES.get(file.content_type or "")
    if ext:
        return ext
    name = (file.filename or "").lower()
    if name.endswith((".jpg", ".jpeg")):
        return "jpg"
    if name.endswith(".png"):
        return "png"
    if name.endswith(".webp"):
        return "webp"
    return None


def _detected_extension(contents: bytes) -> str | None:
    if contents.startswith(PNG_SIGNATURE):
        return "png"
    if contents.startswith(JPEG_SIGNATURE):
        return "jpg"
    if contents.startswith(RIFF_SIGNATURE) and contents[8:12] == WEBP_SIGNATURE:
        return "webp"
    return None


def read_image(file: UploadFile) -> tuple[bytes, str]:
    expected = _expected_extension(file)
    if not expected:
        raise InvalidPayload("Tipo de imagem não suportado")
    contents = file.file.read(MAX_IMAGE_BYTES + 1)
    if not contents:
        raise InvalidPayload("Nenhum arquivo enviado")
    if len(contents) > MAX_IMAGE_BYTES:
        raise InvalidPayload("Imagem muito grande (máx. 5MB)")
    if _detected_extension(contents) != expected:
        raise InvalidPayload("Arquivo de imagem inválido")
    return contents, expected


def save_product_image(storage: StorageBackend, file: UploadFile) -> str:
    contents, ext = read_image(file)
    key = build_media_key("products", f"prod-{uuid.uuid4().hex}.{ext}")
    return storage.save(key, contents, file.content_type)


def save_product_gallery(storage: StorageBackend, files: list[UploadFile]) -> list[str]:
    if len(files) > MAX_GALLERY_IMAGES:
        raise InvalidPayload(f"Máximo de {MAX_GALLERY_IMAGES} imagens por produto")
    # Valida tudo antes de gravar qualquer arquivo.
    prepared = [(read_image(file), file.content_type) for file in files]
    urls: list[str] = []
    for (contents, ext), content_type in prepared:
        key = build_media_key("products", f"prod-{uuid.uuid4().hex}.{ext}")
        urls.append(storage.save(key, contents, content_type))
    return urls
