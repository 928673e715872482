# petpass/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional, Dict, Any
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 및 공용 예외
from petpass.core.config import config_by_name
from petpass.core.exceptions import PetPassError

# - API 블루프린트
from petpass.api.auth.routes import auth_bp
from petpass.api.pets.routes import pets_bp

# - 서비스 / 저장소 모듈
from petpass.services.image_service import ImageService
from petpass.services.share_service import ShareService
from petpass.services.storage_service import StorageService
from petpass.services.identity_service import LocalIdentityProvider, FirebaseIdentityProvider
from petpass.stores.kv_store import LocalKeyValueStore
from petpass.stores.local_store import LocalPetStore
from petpass.stores.firestore_store import FirestorePetStore
from petpass.stores.token_blocklist import LocalTokenBlocklist, FirestoreTokenBlocklist
from petpass.api.auth.services import AuthService
from petpass.api.pets.services import PetService


def _init_firebase(app: Flask):
    if not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred, {
            'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
        })


def create_app(config_name: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param overrides: 설정 클래스 위에 덮어쓸 값 (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if overrides:
        app.config.update(overrides)
    app.json.ensure_ascii = False

    if not app.config.get('JWT_SECRET_KEY'):
        raise ValueError("필수 환경 변수가 설정되지 않았습니다: JWT_SECRET_KEY")

    # =====================================================================================
    # 4. 확장 기능 및 저장소 백엔드 초기화
    # =====================================================================================
    jwt = JWTManager(app)

    app.services = {}

    image_instance = ImageService()
    image_instance.init_app(app)
    app.services['images'] = image_instance

    share_instance = ShareService()
    share_instance.init_app(app)
    app.services['share'] = share_instance

    backend = app.config['PETPASS_BACKEND']
    if backend == 'firestore':
        try:
            _init_firebase(app)
            storage_instance = StorageService()
            storage_instance.init_app(app)
            app.services['storage'] = storage_instance
            app.services['pet_store'] = FirestorePetStore(storage_service=storage_instance)
            identity_provider = FirebaseIdentityProvider()
            token_blocklist = FirestoreTokenBlocklist()
            logging.info("Firestore backend initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize Firestore backend: {e}")
            raise
    elif backend == 'local':
        kv_store = LocalKeyValueStore(
            path=app.config['LOCAL_STORAGE_PATH'],
            quota_bytes=app.config['LOCAL_STORAGE_QUOTA_BYTES']
        )
        app.services['kv'] = kv_store
        app.services['pet_store'] = LocalPetStore(kv_store)
        identity_provider = LocalIdentityProvider(kv_store, remember_user=False)
        token_blocklist = LocalTokenBlocklist(kv_store)
        logging.info(f"Local backend initialized ({app.config['LOCAL_STORAGE_PATH']})")
    else:
        raise ValueError(f"알 수 없는 저장소 백엔드입니다: {backend}")

    # =====================================================================================
    # 5. 도메인 서비스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services['identity'] = identity_provider
    app.services['auth'] = AuthService(provider=identity_provider, blocklist=token_blocklist)
    app.services['pets'] = PetService(
        pet_store=app.services['pet_store'],
        image_service=app.services['images'],
        share_service=app.services['share'],
        bio_preview_length=app.config['PUBLIC_BIO_PREVIEW_LENGTH']
    )

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(pets_bp, url_prefix='/api/pets')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(PetPassError)
    def handle_petpass_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(PermissionError)
    def handle_permission_error(err):
        return jsonify({"error_code": "FORBIDDEN", "message": str(err)}), 403

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # HTTP 예외(404 라우트 없음, 405 등)는 그대로 돌려줌
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
