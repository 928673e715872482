# petpass/services/storage_service.py
import logging
from flask import Flask
from firebase_admin import storage

from petpass.core.exceptions import StorageFailureError
from petpass.services.image_service import decode_data_url


class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 서비스 클래스입니다.
    인라인 이미지(data URL)를 Storage에 업로드하고 공개 URL로 바꾸는 '승격(promotion)'과
    반려동물 삭제 시 관련 파일 정리를 담당합니다.
    """

    def __init__(self, bucket=None):
        """
        실제 버킷 객체는 init_app 메서드를 통해 주입됩니다.
        테스트에서는 버킷 객체를 직접 전달할 수 있습니다.
        """
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    def upload_data_url(self, data_url: str, file_path: str) -> str:
        """
        data URL 이미지를 지정된 경로에 업로드하고 공개 URL을 반환합니다.
        같은 내용을 다시 올려도 중복 제거하지 않으며, 호출마다 새 경로를 쓰는 것은 호출자의 몫입니다.

        :param data_url: 'data:image/jpeg;base64,...' 형식의 인라인 이미지
        :param file_path: 버킷 내 저장 경로 (예: 'pets/{petId}/profile.jpg')
        :return: 공개적으로 접근 가능한 URL
        :raises StorageFailureError: 업로드 실패 시
        """
        self._require_bucket()
        content_type, payload = decode_data_url(data_url)

        try:
            blob = self.bucket.blob(file_path)
            blob.upload_from_string(payload, content_type=content_type)
            blob.make_public()
            logging.info(f"Image uploaded to storage: {file_path} ({len(payload)} bytes)")
            return blob.public_url
        except Exception as e:
            logging.error(f"이미지 업로드 실패 (path: {file_path}): {e}", exc_info=True)
            raise StorageFailureError("이미지 업로드 중 오류가 발생했습니다. 다시 시도해 주세요.")

    def delete_prefix(self, prefix: str) -> int:
        """
        지정된 경로 아래의 모든 파일을 삭제하고 삭제한 개수를 반환합니다.
        개별 파일 삭제 실패는 기록만 하고 나머지 파일 정리를 계속합니다.
        """
        self._require_bucket()
        deleted = 0
        for blob in self.bucket.list_blobs(prefix=prefix):
            try:
                blob.delete()
                deleted += 1
            except Exception as e:
                logging.error(f"Storage 파일 삭제 실패 (path: {blob.name}): {e}")
        logging.info(f"Deleted {deleted} blobs under '{prefix}'")
        return deleted
