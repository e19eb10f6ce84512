"""
ShowPro Fees API - Main application entry point.

Booking fee split service for the ShowPro entertainment agency platform:
artist/agency split, VAT per side, and the default split preference.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.api import bookings, fees

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    print(f"🚀 Starting {settings.app_name}...")

    yield

    # Shutdown
    print(f"👋 Shutting down {settings.app_name}...")


app = FastAPI(
    title=settings.app_name,
    description="""
    ## ShowPro Fees API

    Booking fee split service for the ShowPro booking platform:

    - **Fee Split Engine**: Artist/agency split of a booking fee, VAT per side
    - **Back-solving**: Edit the artist or agency amount, the split ratio follows
    - **Default Split**: Save a split ratio as the default for new bookings
    - **Booking Fees**: Load and save the fee columns of booking records
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fees.router, prefix="/fees", tags=["Fee Split"])
app.include_router(bookings.router, prefix="/bookings", tags=["Booking Fees"])


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "configured" if settings.supabase_url else "not_configured",
        "preferences": str(settings.preference_store_path),
    }
