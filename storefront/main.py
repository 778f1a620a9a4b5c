import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.errors import register_exception_handlers
from storefront.media import media_root, media_url
from storefront.observability import RequestLoggingMiddleware, configure_logging
from storefront.storage import is_local_storage
from storefront.routers import auth, catalog, checkout, coupons, orders, shipping, webhook

configure_logging(os.getenv("LOG_LEVEL", "INFO").upper())

app = FastAPI(title="Fatal Company API")

if is_local_storage():
    media_root_path = media_root()
    media_root_path.mkdir(parents=True, exist_ok=True)
    app.mount(media_url(), StaticFiles(directory=str(media_root_path)), name="uploads")

ALLOWED_ORIGINS = [
    # Dev
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5500",
    "http://127.0.0.1:5500",
    # Prod
    "https://fatalcompany.store",
    "https://www.fatalcompany.store",
]


def _parse_env_list(name: str) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_env_list("CORS_ALLOWED_ORIGINS") or ALLOWED_ORIGINS,
    allow_methods=["*"], allow_headers=["*"], allow_credentials=True,
)
app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)


@app.get("/health")
def health(): return {"ok": True}


app.include_router(catalog.router)
app.include_router(coupons.router)
app.include_router(shipping.router)
app.include_router(auth.router)
app.include_router(checkout.router)
app.include_router(webhook.router)
app.include_router(orders.router)
