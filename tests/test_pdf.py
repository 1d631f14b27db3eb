"""
Tests for the image to paginated PDF conversion.
"""
import io
import os
import re
from unittest.mock import patch

import pytest
from PIL import Image

from app.core.errors import ValidationError
from app.services.pdf_service import image_to_paginated_pdf


def _png(width, height, color=(30, 90, 160)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def _page_count(pdf_bytes):
    return len(re.findall(rb"/Type\s*/Page\b", pdf_bytes))


def test_short_image_is_one_page():
    pdf = image_to_paginated_pdf(_png(400, 300))

    assert pdf.startswith(b"%PDF")
    assert _page_count(pdf) == 1


def test_tall_image_is_sliced_into_pages():
    # native width fits A4, so bands are ~841 source pixels tall
    pdf = image_to_paginated_pdf(_png(595, 2000))

    assert _page_count(pdf) == 3


def test_wide_image_is_scaled_down_before_slicing():
    # scale is about 0.5, so each band covers about 1684 source pixels
    pdf = image_to_paginated_pdf(_png(1191, 3000))

    assert _page_count(pdf) == 2


def test_output_uses_cmyk_colour_space():
    pdf = image_to_paginated_pdf(_png(400, 300))

    assert b"/DeviceCMYK" in pdf
    assert b"/DeviceRGB" not in pdf


def test_cmyk_source_is_accepted():
    buffer = io.BytesIO()
    Image.new("CMYK", (200, 200), (0, 80, 80, 10)).save(buffer, format="JPEG")

    pdf = image_to_paginated_pdf(buffer.getvalue())

    assert b"/DeviceCMYK" in pdf
    assert _page_count(pdf) == 1


def test_temp_file_removed_on_success():
    with patch("app.services.pdf_service.os.remove", wraps=os.remove) as remove:
        image_to_paginated_pdf(_png(100, 100))

    temp_path = remove.call_args.args[0]
    assert not os.path.exists(temp_path)


def test_temp_file_removed_on_failure():
    with patch("app.services.pdf_service.os.remove", wraps=os.remove) as remove:
        with pytest.raises(ValidationError):
            image_to_paginated_pdf(b"definitely not an image")

    remove.assert_called_once()
    assert not os.path.exists(remove.call_args.args[0])


def test_oversized_image_is_rejected():
    # Pillow refuses images above twice MAX_IMAGE_PIXELS outright
    with patch("PIL.Image.MAX_IMAGE_PIXELS", 1000):
        with pytest.raises(ValidationError):
            image_to_paginated_pdf(_png(100, 100))


def test_empty_upload_is_rejected():
    with pytest.raises(ValidationError):
        image_to_paginated_pdf(b"")


def test_convert_endpoint_returns_pdf(client):
    response = client.post(
        "/api/convert-to-cmyk-pdf",
        files={"image": ("resume.png", _png(595, 1700), "image/png")},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "attachment" in response.headers["content-disposition"]
    assert _page_count(response.content) == 3


def test_convert_endpoint_rejects_garbage(client):
    response = client.post(
        "/api/convert-to-cmyk-pdf",
        files={"image": ("resume.png", b"garbage", "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_convert_endpoint_rejects_oversized_image(client):
    with patch("PIL.Image.MAX_IMAGE_PIXELS", 1000):
        response = client.post(
            "/api/convert-to-cmyk-pdf",
            files={"image": ("resume.png", _png(100, 100), "image/png")},
        )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid image file"}
