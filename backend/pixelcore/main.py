# backend/pixelcore/main.py

import logging
from typing import Optional

from dotenv import load_dotenv

# Load environment variables before config is read
load_dotenv()

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pixelcore.config import CORS_ORIGINS, LOG_LEVEL, MAX_OBJECTS, THRESHOLD
from pixelcore.pipeline.analyze import analyze_image, decode_image
from pixelcore.pipeline.reference import reference_report

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="pixelcore API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _read_image(file: UploadFile):
    image_bytes = await file.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Empty file upload")
    try:
        return decode_image(image_bytes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/analyze")
async def analyze(
    file: UploadFile = File(...),
    threshold: int = Query(THRESHOLD, ge=0, le=255),
    channel: Optional[str] = Query(None, pattern="^(red|green|blue)$"),
):
    """
    Blob analysis endpoint.

    - Accepts: multipart/form-data with 'file'
    - Returns: JSON report with label counts and one entry per object
    """
    try:
        bgr = await _read_image(file)
        report = analyze_image(bgr, threshold=threshold, channel=channel, max_objects=MAX_OBJECTS)
        return JSONResponse(report.to_dict())
    except HTTPException:
        # Re-raise FastAPI HTTPExceptions so status codes are preserved
        raise
    except Exception as e:
        logger.error(f"analysis error: {e}")
        raise HTTPException(status_code=500, detail=f"analysis failed: {e}")


@app.post("/validate")
async def validate(
    file: UploadFile = File(...),
    kernel: str = Query("sobel_x", pattern="^(sharpen|sobel_x|sobel_y)$"),
    threshold: int = Query(THRESHOLD, ge=0, le=255),
):
    """
    Runs the core next to OpenCV on the upload and reports how far apart they are.
    """
    try:
        bgr = await _read_image(file)
        report = reference_report(bgr, kernel=kernel, threshold=threshold)
        return JSONResponse(report.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"validation error: {e}")
        raise HTTPException(status_code=500, detail=f"analysis failed: {e}")


# For local dev (from the backend directory):
#   uvicorn pixelcore.main:app --reload --host 0.0.0.0 --port 8000
