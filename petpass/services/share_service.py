# petpass/services/share_service.py
import io
import logging
import qrcode
from flask import Flask

from petpass.services.image_service import encode_data_url


class ShareService:
    """반려동물 공유 링크와 QR 코드를 생성하는 서비스."""

    def __init__(self, base_url: str = 'http://localhost:3000'):
        self.base_url = base_url.rstrip('/')

    def init_app(self, app: Flask):
        self.base_url = app.config.get('PUBLIC_BASE_URL', self.base_url).rstrip('/')
        logging.info(f"ShareService initialized with base URL {self.base_url}")

    def share_url(self, pet_id: str) -> str:
        """정규 공유 URL: {origin}/pets/{petId}"""
        return f"{self.base_url}/pets/{pet_id}"

    def qr_png(self, pet_id: str, box_size: int = 10, border: int = 4) -> bytes:
        """공유 URL을 담은 QR 코드 PNG 바이트를 생성합니다."""
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border
        )
        qr.add_data(self.share_url(pet_id))
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def qr_data_url(self, pet_id: str) -> str:
        """화면 표시/복사용 QR 코드 data URL."""
        return encode_data_url(self.qr_png(pet_id), 'image/png')
