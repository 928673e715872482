# petpass/core/config.py

import os


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. 토큰의 위변조를 방지합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 저장소 백엔드 선택: 'local'(데모, 파일 기반 key/value) 또는 'firestore'
    PETPASS_BACKEND = os.getenv('PETPASS_BACKEND', 'local')

    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 로컬 백엔드가 사용하는 JSON 파일 경로와 용량 한도 (브라우저 localStorage와 같은 5MB)
    LOCAL_STORAGE_PATH = os.getenv('LOCAL_STORAGE_PATH', 'instance/petpass_local.json')
    LOCAL_STORAGE_QUOTA_BYTES = int(os.getenv('LOCAL_STORAGE_QUOTA_BYTES', 5 * 1024 * 1024))

    # 이미지 처리 설정
    IMAGE_MAX_WIDTH = int(os.getenv('IMAGE_MAX_WIDTH', 800))
    IMAGE_JPEG_QUALITY = int(os.getenv('IMAGE_JPEG_QUALITY', 70))
    MAX_PET_PHOTOS = 3

    # 공유 링크의 origin (예: https://petpass.xyz)
    PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', 'http://localhost:3000')
    PUBLIC_BIO_PREVIEW_LENGTH = 150

    MAX_CONTENT_LENGTH = 16 * 1024 * 1024


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    PETPASS_BACKEND = 'local'
    JWT_SECRET_KEY = 'petpass-testing-secret-key-0123456789'


class ProductionConfig(Config):
    """운영 환경 설정. 운영에서는 Firestore 백엔드를 기본으로 사용합니다."""
    DEBUG = False
    PETPASS_BACKEND = os.getenv('PETPASS_BACKEND', 'firestore')


# FLASK_ENV 값에 따라 create_app에서 적절한 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
