"""
FastAPI application for Gemini image and Veo video generation.

Features:
- Batched image generation with reference/context images and resolution tiers
- 4K upscaling of previously generated images
- Video generation driven to completion through job polling
- Credential gating for metered model tiers
"""
import time

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from common.error_messages import ErrorCode, get_error_response
from image.routes import router as image_router
from videos.routes import router as videos_router
from utils.logger import get_logger, mask_api_keys

# Initialize logger
logger = get_logger("main")

# Validate configuration on startup
try:
    Config.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.warning(f"Configuration error: {e}")
    logger.warning("Metered requests will trigger credential selection until GEMINI_API_KEY is set")

# Create FastAPI app
app = FastAPI(
    title="Gemini Studio Generation API",
    description="Image and video generation with Gemini and Veo.",
    version="1.0.0"
)

# CORS middleware - added first so it runs on all responses
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions globally."""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    message, status_code = get_error_response(ErrorCode.UNKNOWN_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"detail": message}
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()
    full_url = mask_api_keys(str(request.url))
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"→ {request.method} {full_url} - Client: {client_host}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {full_url} - Error: {str(e)} - Time: {process_time:.2f}ms")
        raise

    process_time = (time.time() - start_time) * 1000
    logger.info(f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms")
    return response


app.include_router(image_router)
logger.info("Image router included")

app.include_router(videos_router)
logger.info("Videos router included")


@app.get("/healthz")
def health():
    """Health check endpoint."""
    return {"status": "ok"}


# Run server directly
if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
