from typing import Dict, Optional

from fastapi import APIRouter, Request

import config
from models.common_models import UploadResult
from services.file_upload_service import store_multipart

router = APIRouter(prefix="/upload", tags=["upload"])


async def _handle_upload(request: Request, accept: Dict[str, Optional[int]]) -> UploadResult:
    async with request.form() as form:
        return store_multipart(form, accept, config.UPLOAD_DIR, config.UPLOAD_MAX_BYTES)


@router.post("", response_model=UploadResult)
async def upload_single(request: Request):
    # One file under "image"
    return await _handle_upload(request, {"image": 1})


@router.post("/many", response_model=UploadResult)
async def upload_many(request: Request):
    return await _handle_upload(request, {"many": None})


@router.post("/fields", response_model=UploadResult)
async def upload_fields(request: Request):
    return await _handle_upload(request, {"image1": None, "image2": None})


@router.post("/none", response_model=UploadResult)
async def upload_none(request: Request):
    # Text fields only; any file is rejected
    return await _handle_upload(request, {})
