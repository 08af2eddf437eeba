"""
Boundary Live - live cricket scoring and knockout tournament API
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import init_db
from app.engine.errors import ScoringError
from app.api.match import router as match_router
from app.api.innings import router as innings_router
from app.api.stats import router as stats_router
from app.api.tournament import router as tournament_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("boundary_live")

# Initialize FastAPI app
app = FastAPI(
    title="Boundary Live",
    description="Ball-by-ball scoring and knockout brackets for cricket tournaments",
    version="0.1.0",
)

# CORS origins - configurable via environment variable
default_origins = [
    "http://localhost:5173",
    "http://localhost:8081",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8081",
]
default_origins.extend(settings.cors_origins)

# CORS middleware for the organizer app
app.add_middleware(
    CORSMiddleware,
    allow_origins=default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ScoringError)
def scoring_error_handler(request: Request, exc: ScoringError):
    """Map engine errors to JSON responses"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": type(exc).__name__, "message": exc.message},
    )


# Include routers
app.include_router(match_router, prefix="/api")
app.include_router(innings_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(tournament_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    init_db()


@app.get("/")
def root():
    """Health check endpoint"""
    return {
        "name": "Boundary Live API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/health")
def health_check():
    """API health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
