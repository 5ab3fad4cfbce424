# construction_dashboard/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import json
import logging
import re
import secrets
import sys

from construction_dashboard.config import Settings, load_settings
from construction_dashboard.logging_config import configure_logging
from construction_dashboard.database.database import Base, make_engine, make_session_factory
from construction_dashboard.database.db_init import initialize_db
from construction_dashboard.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from construction_dashboard.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from construction_dashboard.repositories.sqlalchemy.sqlalchemy_work_repository import SqlalchemyWorkRepository
from construction_dashboard.services.identity_service import IdentityService, INVALID_CREDENTIALS_MESSAGE
from construction_dashboard.services.collection_store import ProjectStore, WorkStore, ALL_STATUSES
from construction_dashboard.services.dashboard_service import DashboardService
from construction_dashboard.services.exceptions import *
from construction_dashboard.utils.color_bands import display_progress, progress_color_band, quality_color_band
from construction_dashboard.utils.passwords import hash_password

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise MalformedRequestError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise MalformedRequestError("JSON body must be an object.")
    return data

def get_query_params(environ):
    params = parse_qs(environ.get("QUERY_STRING", ""))
    return {
        "text": params.get("q", [""])[0],
        "status": params.get("status", [ALL_STATUSES])[0],
    }

def get_bearer_token(environ):
    auth_header = environ.get("HTTP_AUTHORIZATION", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()
    return environ.get("HTTP_X_AUTH_TOKEN")

def authorize_and_get_claims(environ):
    token = get_bearer_token(environ)
    if not token:
        raise InvalidSessionError("Missing session token.")
    return environ['services']['identity'].validate_token(token)

def project_payload(project):
    payload = project.to_dict()
    payload["display_progress"] = display_progress(project.progress, project.status)
    payload["progress_band"] = progress_color_band(project.progress, project.status)
    return payload

def work_payload(work):
    payload = work.to_dict()
    payload["display_progress"] = display_progress(work.progress, work.status)
    payload["progress_band"] = progress_color_band(work.progress, work.status)
    payload["quality_band"] = quality_color_band(work.quality_score)
    return payload

def handle_exception(e):
    error_map = {
        MalformedRequestError: "400 Bad Request",
        InvalidCredentialsError: "401 Unauthorized",
        InvalidSessionError: "401 Unauthorized",
        ExpiredSessionError: "401 Unauthorized",
        ValidationError: "422 Unprocessable Entity",
        PersistenceError: "503 Service Unavailable",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request.")
        return "500 Internal Server Error", json.dumps({"error": "Internal server error."})

    body = {"error": str(e)}
    if isinstance(e, InvalidCredentialsError):
        body["error"] = INVALID_CREDENTIALS_MESSAGE
    elif isinstance(e, ValidationError):
        body["fields"] = e.errors
    return status, json.dumps(body)

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def create_app(settings: Settings = None, session_factory=None):
    """
    WSGI 애플리케이션을 생성합니다.
    서명 키가 없으면 ConfigurationError를 발생시켜 서버 기동을 중단합니다.

    Args:
        settings: 애플리케이션 설정. 생략하면 환경 변수에서 읽습니다.
        session_factory: DB 세션 팩토리. 생략하면 settings.database_url로 생성하며,
            settings.seed_demo_data가 참이면 비어 있는 DB에 데모 데이터를 삽입합니다.
    """
    settings = settings if settings is not None else load_settings()
    secret_key = settings.require_secret_key()
    dummy_hash = hash_password(secrets.token_hex(16), rounds=settings.bcrypt_rounds)

    if session_factory is None:
        engine = make_engine(settings.database_url)
        session_factory = make_session_factory(engine)
        if settings.seed_demo_data:
            initialize_db(bcrypt_rounds=settings.bcrypt_rounds, bind=engine, session_factory=session_factory)
        else:
            Base.metadata.create_all(bind=engine)

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)
            project_repo = SqlalchemyProjectRepository(db_session)
            work_repo = SqlalchemyWorkRepository(db_session)

            environ['repositories'] = {'project': project_repo, 'work': work_repo}
            environ['services'] = {
                'identity': IdentityService(
                    user_repo, secret_key,
                    token_ttl=settings.token_ttl_seconds,
                    dummy_hash=dummy_hash,
                ),
                'dashboard': DashboardService(project_repo, work_repo),
            }

            # 2. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler = None
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and re.match(pattern, path):
                    handler = route_handler
                    break

            if handler:
                status, response_body = handler(environ)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        logger.debug("%s %s -> %s", environ.get("REQUEST_METHOD"), environ.get("PATH_INFO"), status)
        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def auth_tokens_handler(environ):
    data = get_request_data(environ)
    token = environ['services']['identity'].authenticate(data.get('email'), data.get('password'))
    return '201 Created', json.dumps(token)

def refresh_token_handler(environ):
    token = get_bearer_token(environ)
    if not token:
        raise InvalidSessionError("Missing session token.")
    refreshed = environ['services']['identity'].refresh_token(token)
    return '201 Created', json.dumps(refreshed)

def logout_handler(environ):
    # 세션 저장소가 없으므로 토큰 폐기는 클라이언트의 몫입니다. 토큰이 유효한지만 확인합니다.
    authorize_and_get_claims(environ)
    return '204 No Content', ''

def session_handler(environ):
    claims = authorize_and_get_claims(environ)
    return '200 OK', json.dumps(claims)

def _project_store(environ, claims):
    return ProjectStore(environ['repositories']['project'], claims['tenant_id'])

def _work_store(environ, claims):
    repos = environ['repositories']
    return WorkStore(repos['work'], repos['project'], claims['tenant_id'])

def list_projects_handler(environ):
    claims = authorize_and_get_claims(environ)
    projects = _project_store(environ, claims).list(**get_query_params(environ))
    return '200 OK', json.dumps({"projects": [project_payload(p) for p in projects]})

def create_project_handler(environ):
    claims = authorize_and_get_claims(environ)
    project = _project_store(environ, claims).create(get_request_data(environ))
    return '201 Created', json.dumps(project_payload(project))

def list_works_handler(environ):
    claims = authorize_and_get_claims(environ)
    works = _work_store(environ, claims).list(**get_query_params(environ))
    return '200 OK', json.dumps({"works": [work_payload(w) for w in works]})

def create_work_handler(environ):
    claims = authorize_and_get_claims(environ)
    work = _work_store(environ, claims).create(get_request_data(environ))
    return '201 Created', json.dumps(work_payload(work))

def works_board_handler(environ):
    claims = authorize_and_get_claims(environ)
    board = _work_store(environ, claims).board(**get_query_params(environ))
    return '200 OK', json.dumps({"board": {status: [work_payload(w) for w in works] for status, works in board.items()}})

def dashboard_summary_handler(environ):
    claims = authorize_and_get_claims(environ)
    summary = environ['services']['dashboard'].summary(claims['tenant_id'])
    return '200 OK', json.dumps(summary)

ROUTES = [
    ('POST', r'^/v1/auth/tokens$', auth_tokens_handler),
    ('POST', r'^/v1/auth/tokens/refresh$', refresh_token_handler),
    ('DELETE', r'^/v1/auth/tokens$', logout_handler),
    ('GET', r'^/v1/auth/session$', session_handler),
    ('GET', r'^/v1/projects$', list_projects_handler),
    ('POST', r'^/v1/projects$', create_project_handler),
    ('GET', r'^/v1/works$', list_works_handler),
    ('POST', r'^/v1/works$', create_work_handler),
    ('GET', r'^/v1/works/board$', works_board_handler),
    ('GET', r'^/v1/dashboard/summary$', dashboard_summary_handler),
]

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical("%s", e)
        return 1

    with make_server(settings.host, settings.port, app) as httpd:
        logger.info("Serving construction dashboard API on port %s...", settings.port)
        httpd.serve_forever()
    return 0

if __name__ == "__main__":
    sys.exit(main())
