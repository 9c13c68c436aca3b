from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from app.config import get_settings
from app.api.routes import locations, location_records, potential_locations
from app.db.client import get_supabase_client

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Location Comparison API...")
    if get_settings().supabase_url:
        get_supabase_client()
    else:
        logger.warning("SUPABASE_URL not set, database calls will fail")
    yield
    # Shutdown
    logger.info("Shutting down Location Comparison API...")


app = FastAPI(
    title="Location Comparison API",
    description="Location scouting comparison and scoring for film production",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(locations.router, prefix="/api/locations", tags=["locations"])
app.include_router(potential_locations.router, prefix="/api/locations", tags=["potential-locations"])
app.include_router(location_records.router, prefix="/api/location-records", tags=["location-records"])


@app.get("/")
async def root():
    return {"message": "Location Comparison API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port, reload=True)
