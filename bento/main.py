import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from bento.config import settings
from bento.routers import chat, scan, preferences

API_VERSION = "0.1.0"

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Typed chat entries and scanned payment slips to transaction drafts",
    version=API_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router)
app.include_router(scan.router)
app.include_router(preferences.router)


@app.get("/")
async def root():
    """Service banner with the endpoints a client can call."""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": API_VERSION,
        "endpoints": ["/chat", "/scan", "/preferences/edits", "/preferences/{counterparty}"],
        "preference_backend": settings.PREFERENCE_BACKEND,
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
