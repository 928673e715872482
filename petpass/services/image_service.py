# petpass/services/image_service.py
import io
import base64
import logging
from typing import List, Optional, Tuple
from flask import Flask
from PIL import Image, ImageOps, UnidentifiedImageError

from petpass.core.exceptions import ImageProcessingError, PhotoLimitExceededError

INLINE_PREFIX = 'data:'


def is_inline(image_ref: Optional[str]) -> bool:
    """이미지 참조가 아직 업로드되지 않은 인라인 페이로드(data URL)인지 확인합니다."""
    return bool(image_ref) and image_ref.startswith(INLINE_PREFIX)


def encode_data_url(payload: bytes, mime_type: str = 'image/jpeg') -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    'data:<mime>;base64,<payload>' 형식의 문자열을 (mime, bytes)로 분해합니다.

    :raises ImageProcessingError: data URL 형식이 아니거나 base64 디코딩에 실패한 경우
    """
    if not is_inline(data_url) or ',' not in data_url:
        raise ImageProcessingError("data URL 형식의 이미지가 아닙니다.")
    header, payload = data_url.split(',', 1)
    mime_type = header[len(INLINE_PREFIX):].split(';')[0] or 'application/octet-stream'
    try:
        if ';base64' in header:
            return mime_type, base64.b64decode(payload, validate=True)
        return mime_type, payload.encode('utf-8')
    except (ValueError, TypeError) as e:
        logging.error(f"data URL 디코딩 실패: {e}")
        raise ImageProcessingError("이미지 데이터를 해석할 수 없습니다.")


class ImageService:
    """
    업로드된 원본 이미지를 저장 가능한 형태로 가공하는 서비스.
    - 최대 너비로 비율을 유지하며 축소
    - 고정 품질의 JPEG로 재인코딩
    - 전송 가능한 data URL 문자열로 반환
    """

    def __init__(self, max_width: int = 800, quality: int = 70, max_photos: int = 3):
        self.max_width = max_width
        self.quality = quality
        self.max_photos = max_photos

    def init_app(self, app: Flask):
        """앱 설정에서 이미지 처리 파라미터를 읽어옵니다."""
        self.max_width = app.config.get('IMAGE_MAX_WIDTH', self.max_width)
        self.quality = app.config.get('IMAGE_JPEG_QUALITY', self.quality)
        self.max_photos = app.config.get('MAX_PET_PHOTOS', self.max_photos)
        logging.info(f"ImageService initialized (max_width={self.max_width}, quality={self.quality}).")

    def downscale_and_encode(self, raw_image: bytes, max_width: Optional[int] = None) -> str:
        """
        원본 이미지 바이트를 디코딩하고, 너비가 max_width를 넘으면 같은 비율로 축소한 뒤
        JPEG로 재인코딩하여 data URL 문자열을 반환합니다.

        :param raw_image: 업로드된 원본 이미지 바이트
        :param max_width: 최대 너비 (기본값: 설정의 IMAGE_MAX_WIDTH)
        :return: 'data:image/jpeg;base64,...' 문자열
        :raises ImageProcessingError: 이미지로 해석할 수 없거나 픽셀 수가 지나치게 큰 경우
        """
        max_width = max_width or self.max_width
        try:
            with Image.open(io.BytesIO(raw_image)) as opened:
                image = ImageOps.exif_transpose(opened)
                # JPEG는 알파 채널을 지원하지 않으므로 RGB로 통일
                if image.mode != "RGB":
                    image = image.convert("RGB")

                width, height = image.size
                if width > max_width:
                    height = max(1, round(height * max_width / width))
                    width = max_width
                    image = image.resize((width, height), Image.LANCZOS)

                buffer = io.BytesIO()
                image.save(buffer, format='JPEG', quality=self.quality, optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logging.error(f"이미지 디코딩/인코딩 실패: {e}", exc_info=True)
            raise ImageProcessingError()

        return encode_data_url(buffer.getvalue(), 'image/jpeg')

    def append_photo(self, photos: Optional[List[str]], image_ref: str) -> List[str]:
        """
        대표 사진 목록에 사진 한 장을 추가한 새 리스트를 반환합니다.
        이미 max_photos장이 있으면 원본 리스트를 건드리지 않고 예외를 발생시킵니다.
        """
        photos = list(photos or [])
        if len(photos) >= self.max_photos:
            raise PhotoLimitExceededError(f"반려동물 사진은 최대 {self.max_photos}장까지 등록할 수 있습니다.")
        photos.append(image_ref)
        return photos
