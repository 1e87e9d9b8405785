from functools import lru_cache

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool

from backend.core.config import settings
from backend.models.scans import GenerateRequest, DecodeResponse
from qrcam.qr.errors import CodecError, InputError
from qrcam.qr.qr_generator import generate, to_png_bytes
from qrcam.qr.qr_reader import QRReader

router = APIRouter()


@lru_cache(maxsize=1)
def get_reader() -> QRReader:
    return QRReader()


@router.post("/qr/generate", response_class=Response,
             responses={200: {"content": {"image/png": {}}}, 400: {"description": "Bad text or level"}})
def generate_qr(req: GenerateRequest):
    try:
        img = generate(
            req.text,
            level=req.level or settings.default_level,
            scale=req.scale or settings.default_scale,
            border=req.border,
        )
    except (InputError, CodecError) as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    return Response(content=to_png_bytes(img), media_type="image/png")


@router.post("/qr/decode", response_model=DecodeResponse)
async def decode_qr(request: Request):
    """
    Body is the raw image (PNG/JPEG). No code found -> empty list, not an error.
    """
    body = await request.body()
    try:
        strings = await run_in_threadpool(get_reader().decode_image, body)
    except CodecError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    return DecodeResponse(strings=strings)
