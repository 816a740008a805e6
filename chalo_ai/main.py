"""
Chalo India Chatbot - FastAPI Application
LLM Provider:
- If OPENAI_API_KEY is set: use OpenAI
- If no OPENAI_API_KEY: use Ollama (llama3.2)
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from . import __version__
from .api import admin_router, chat_router, deals_router, system_router
from .api.dependencies import build_services
from .config import Settings, settings as default_settings


# ============================================
# Application Lifespan
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    settings: Settings = app.state.settings

    logger.info("=" * 50)
    logger.info("Starting Chalo India Chatbot")
    logger.info("=" * 50)
    logger.info(f"Environment: {settings.API_ENV}")

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    services = app.state.services

    components = {
        "deals": len(services.inventory) > 0,
        "documents": bool(services.document_qa.chunks),
        "redis_sessions": services.sessions.backend_name == "redis",
        "llm": services.document_qa.llm is not None,
    }
    ready = sum(1 for v in components.values() if v)
    logger.info(f"Components ready: {ready}/{len(components)}")
    for name, status in components.items():
        logger.info(f"  {'✓' if status else '✗'} {name}")

    yield

    logger.info("Chalo India Chatbot shutdown complete")


# ============================================
# FastAPI Application
# ============================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Chalo India Chatbot",
        description="Customer support and flight booking chatbot for India-Australia travel.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.services = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat_router)
    app.include_router(deals_router)
    app.include_router(admin_router)
    app.include_router(system_router)

    # Mounted last so it never shadows the API routes
    if os.path.isdir(settings.FRONTEND_DIR):
        app.mount("/", StaticFiles(directory=settings.FRONTEND_DIR, html=True), name="frontend")
    else:
        logger.warning(f"Frontend directory {settings.FRONTEND_DIR} not found, serving API only")

    return app


app = create_app()


# ============================================
# Main
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chalo_ai.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.API_ENV == "development"
    )
