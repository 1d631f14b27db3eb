"""
Image to paginated PDF conversion.

A tall image (typically a rendered resume) is converted to CMYK, scaled down
to the A4 page width and cut into page-height bands, one band per page.
reportlab embeds CMYK bands as DeviceCMYK image XObjects.
"""
import io
import logging
import os
import tempfile

from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4


def image_to_paginated_pdf(image_bytes: bytes, page_size=A4) -> bytes:
    """
    Render an image onto as many pages as its scaled height needs.

    Args:
        image_bytes: Raw uploaded image
        page_size: (width, height) in points

    Returns:
        PDF bytes

    Raises:
        ValidationError: Empty, unreadable or oversized image
    """
    if not image_bytes:
        raise ValidationError("No image file uploaded")

    page_width, page_height = page_size
    fd, temp_path = tempfile.mkstemp(suffix=".img")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(image_bytes)

        try:
            with Image.open(temp_path) as source:
                if source.mode == "CMYK":
                    image = source.copy()
                else:
                    image = source.convert("RGB").convert("CMYK")
        except (UnidentifiedImageError, DecompressionBombError, OSError) as e:
            logger.warning(f"Unreadable image upload: {e}")
            raise ValidationError("Invalid image file") from e

        width, height = image.size
        scale = min(page_width / width, 1)
        scaled_width = width * scale
        # band height in source pixels
        band = max(int(page_height / scale), 1)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=page_size)
        pages = 0
        for top in range(0, height, band):
            bottom = min(top + band, height)
            slice_ = image.crop((0, top, width, bottom))
            slice_height = (bottom - top) * scale
            pdf.drawImage(
                ImageReader(slice_),
                (page_width - scaled_width) / 2,
                page_height - slice_height,
                width=scaled_width,
                height=slice_height,
            )
            pdf.showPage()
            pages += 1
        pdf.save()

        logger.info(f"Converted {width}x{height} image to {pages} page PDF (scale={scale:.3f})")
        return buffer.getvalue()
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)
