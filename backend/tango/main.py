import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

from tango.config import get_app_settings
from tango.db import get_settings, verify_connection, close_client
from tango.repositories import get_study_repository
from tango.routers import words_router, study_router, settings_router, stats_router

app_settings = get_app_settings()
logging.basicConfig(
    level=app_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if app_settings.uses_cosmos:
        settings = get_settings()
        if settings.is_configured():
            if verify_connection():
                print("✓ Connected to Cosmos DB")
            else:
                print("✗ Failed to connect to Cosmos DB - check configuration")
        else:
            print("⚠ Cosmos DB not configured (COSMOS_ENDPOINT not set)")
    else:
        print("⚠ Using in-memory storage (STORAGE_BACKEND=memory) - data is lost on restart")

    get_study_repository()

    yield

    # Shutdown
    if app_settings.uses_cosmos:
        close_client()
        print("✓ Cosmos DB connection closed")


app = FastAPI(
    title="Tango SRS API",
    description="Spaced-repetition scheduling backend for a Japanese vocabulary app",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(words_router)
app.include_router(study_router)
app.include_router(settings_router)
app.include_router(stats_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Tango SRS API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "words": "/words",
            "study": "/study",
            "settings": "/settings/quiz",
            "stats": "/stats",
        },
    }


@app.get("/healthz")
async def healthz():
    """Health check endpoint."""
    return {"status": "healthy"}
