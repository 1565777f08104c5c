"""Main FastAPI application for the Aura Quality dashboard backend."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api_routes import router, settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="Aura Quality API",
    description="Air quality readings, health advice and assistant chat",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Aura Quality API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("auraquality.main:app", host="0.0.0.0", port=8000, reload=True)
