# petpass/services/test_image_service.py
"""이미지 축소/재인코딩 및 사진 개수 제한 테스트"""

import io
import pytest
from PIL import Image

from petpass.core.exceptions import ImageProcessingError, PhotoLimitExceededError, ValidationFailureError
from petpass.services.image_service import ImageService, decode_data_url, encode_data_url, is_inline


def _decode_image(data_url: str) -> Image.Image:
    mime_type, payload = decode_data_url(data_url)
    assert mime_type == 'image/jpeg'
    return Image.open(io.BytesIO(payload))


@pytest.mark.parametrize("width,height", [(1600, 1200), (3000, 1000), (801, 333), (640, 480)])
def test_downscale_keeps_width_within_limit_and_aspect_ratio(image_bytes, width, height):
    encoded = ImageService().downscale_and_encode(image_bytes(width, height))
    assert encoded.startswith('data:image/jpeg;base64,')

    image = _decode_image(encoded)
    assert image.format == 'JPEG'
    assert image.width <= 800
    assert image.width == min(width, 800)
    # 반올림 오차(1px) 이내로 비율 유지
    assert abs(image.height - height * image.width / width) <= 1


def test_downscale_converts_transparent_png(image_bytes):
    buffer = io.BytesIO()
    Image.new('RGBA', (100, 50), (255, 0, 0, 128)).save(buffer, format='PNG')
    image = _decode_image(ImageService().downscale_and_encode(buffer.getvalue()))
    assert image.mode == 'RGB'
    assert image.size == (100, 50)


def test_downscale_respects_configured_width(image_bytes):
    image = _decode_image(ImageService(max_width=200).downscale_and_encode(image_bytes(1000, 500)))
    assert image.size == (200, 100)


def test_undecodable_bytes_raise_image_processing_error():
    with pytest.raises(ImageProcessingError) as exc_info:
        ImageService().downscale_and_encode(b'this is not an image')
    assert isinstance(exc_info.value, ValidationFailureError)


def test_append_photo_limit():
    service = ImageService()
    photos = []
    for ref in ('a', 'b', 'c'):
        photos = service.append_photo(photos, ref)
    assert photos == ['a', 'b', 'c']

    with pytest.raises(PhotoLimitExceededError):
        service.append_photo(photos, 'd')
    assert photos == ['a', 'b', 'c']


def test_append_photo_returns_new_list():
    original = ['a']
    result = ImageService().append_photo(original, 'b')
    assert result == ['a', 'b']
    assert original == ['a']


def test_data_url_helpers():
    data_url = encode_data_url(b'\x89PNG', 'image/png')
    assert is_inline(data_url)
    assert not is_inline('https://storage.googleapis.com/x.jpg')
    assert not is_inline(None)
    assert decode_data_url(data_url) == ('image/png', b'\x89PNG')

    with pytest.raises(ImageProcessingError):
        decode_data_url('https://example.com/a.jpg')
    with pytest.raises(ImageProcessingError):
        decode_data_url('data:image/jpeg;base64,@@@not-base64@@@')


def test_oversized_pixel_count_raises_image_processing_error(monkeypatch, image_bytes):
    # 작은 파일이라도 픽셀 수가 한도의 두 배를 넘으면 Pillow가 디코딩을 거부함
    monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 1000)
    with pytest.raises(ImageProcessingError):
        ImageService().downscale_and_encode(image_bytes(100, 100))
