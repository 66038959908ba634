"""Reverse Image Source Service

A FastAPI service around ReverseImageClient.
Supports:
1. SauceNAO search (JSON API, needs SAUCENAO_API_KEY)
2. IQDB search (HTML scraping, no key)
3. Imgur upload/delete to get a public URL for a local image (needs IMGUR_CLIENT_ID)
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, HttpUrl

from client import ReverseImageClient
from errors import (
    InvalidCredentialError,
    InvalidInputKindError,
    MissingCredentialError,
    ReverseSearchError,
    UpstreamError,
)
from models import IqdbMatch, SauceNaoMatch, SearchOptions, UploadResult

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Reverse Image Source API",
    description="Find the original source of an image with SauceNAO and IQDB",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class SauceNaoRequest(BaseModel):
    """Request model for a SauceNAO search by URL"""
    image_url: HttpUrl
    options: Optional[SearchOptions] = None


class IqdbRequest(BaseModel):
    """Request model for an IQDB search by URL"""
    image_url: HttpUrl


class ImgurUploadRequest(BaseModel):
    """Base64 encoded image to host"""
    image: str


def get_client() -> ReverseImageClient:
    return ReverseImageClient()


def _to_http_error(e: ReverseSearchError) -> HTTPException:
    if isinstance(e, InvalidInputKindError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, MissingCredentialError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, (InvalidCredentialError, UpstreamError)):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File too large (max 10MB)")
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")
    return content


@app.get("/")
async def root():
    """Service description"""
    return {
        "status": "healthy",
        "service": "reverse-image-source",
        "version": "1.0.0",
        "endpoints": {
            "/saucenao": "SauceNAO search by image URL",
            "/saucenao/upload": "SauceNAO search by uploaded file",
            "/iqdb": "IQDB search by image URL",
            "/iqdb/upload": "IQDB search by uploaded file",
            "/imgur/upload": "Host a base64 image on imgur",
            "/imgur/{deletehash}": "Delete a hosted image",
        }
    }


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.post("/saucenao", response_model=list[SauceNaoMatch])
async def saucenao_search(request: SauceNaoRequest, client: ReverseImageClient = Depends(get_client)):
    """Search SauceNAO for the image at ``image_url``."""
    image_url = str(request.image_url)
    logger.info(f"SauceNAO search for: {image_url}")

    try:
        return await client.saucenao(image_url, request.options)
    except ReverseSearchError as e:
        logger.error(f"SauceNAO search failed for {image_url}: {e}")
        raise _to_http_error(e)


@app.post("/saucenao/upload", response_model=list[SauceNaoMatch])
async def saucenao_search_upload(
    file: UploadFile = File(...),
    min_similarity: Optional[float] = Form(None),
    numres: Optional[int] = Form(None),
    db: Optional[int] = Form(None),
    client: ReverseImageClient = Depends(get_client),
):
    """
    Search SauceNAO with an uploaded image file.

    Only the most common options are accepted as form fields.
    """
    content = await _read_upload(file)
    overrides = {
        name: value
        for name, value in {"min_similarity": min_similarity, "numres": numres, "db": db}.items()
        if value is not None
    }

    try:
        return await client.saucenao(content, overrides)
    except ReverseSearchError as e:
        logger.error(f"SauceNAO upload search failed for {file.filename}: {e}")
        raise _to_http_error(e)


@app.post("/iqdb", response_model=list[IqdbMatch])
async def iqdb_search(request: IqdbRequest, client: ReverseImageClient = Depends(get_client)):
    """Search IQDB for the image at ``image_url``."""
    image_url = str(request.image_url)
    logger.info(f"IQDB search for: {image_url}")

    try:
        return await client.iqdb(image_url)
    except ReverseSearchError as e:
        logger.error(f"IQDB search failed for {image_url}: {e}")
        raise _to_http_error(e)


@app.post("/iqdb/upload", response_model=list[IqdbMatch])
async def iqdb_search_upload(
    file: UploadFile = File(...),
    client: ReverseImageClient = Depends(get_client),
):
    content = await _read_upload(file)

    try:
        return await client.iqdb(content)
    except ReverseSearchError as e:
        logger.error(f"IQDB upload search failed for {file.filename}: {e}")
        raise _to_http_error(e)


@app.post("/imgur/upload")
async def imgur_upload(request: ImgurUploadRequest, client: ReverseImageClient = Depends(get_client)):
    """
    Host a base64 image on imgur.

    Returns the upload record, or imgur's own error payload for failures
    other than 401/403.
    """
    try:
        result = await client.upload(request.image)
    except ReverseSearchError as e:
        logger.error(f"Imgur upload failed: {e}")
        raise _to_http_error(e)

    if isinstance(result, UploadResult):
        if result.success:
            return result.model_dump(include={"id", "link", "deletehash", "status"})
        return result.model_dump(include={"status", "success"})
    return result


@app.delete("/imgur/{deletehash}")
async def imgur_delete(deletehash: str, client: ReverseImageClient = Depends(get_client)):
    try:
        return await client.delete(deletehash)
    except ReverseSearchError as e:
        logger.error(f"Imgur delete failed for {deletehash}: {e}")
        raise _to_http_error(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
