import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from app.services.pdf_service import image_to_paginated_pdf

logger = logging.getLogger(__name__)

router = APIRouter(tags=["PDF"])


@router.post("/convert-to-cmyk-pdf")
async def convert_to_pdf(image: UploadFile = File(...)):
    """Paginate an uploaded image onto A4 pages and return the PDF."""
    data = await image.read()
    pdf_bytes = await run_in_threadpool(image_to_paginated_pdf, data)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="resume.pdf"'},
    )
