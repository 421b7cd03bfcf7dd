"""
작품 분석 HTTP API (FastAPI).

POST /api/analyze-artwork 는 multipart/form-data의 image 필드를 받아
ArtworkAnalysisResult JSON을 반환합니다.
"""
import logging
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from artlens.app.core.config import Config, ensure_valid_config, load_config
from artlens.app.core.error_handler import InputError, UpstreamTransportError, get_error_handler, ErrorContext
from artlens.app.core.logger import get_logger
from artlens.domains.analysis.services.artwork_analysis_service import (
    ArtworkAnalysisService,
    build_analysis_service,
)
from artlens.domains.analysis.types import ImageFile

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to analyze artwork"

api_router = APIRouter(prefix="/api")


def get_analysis_service(request: Request) -> ArtworkAnalysisService:
    return request.app.state.analysis_service


async def read_image_field(request: Request) -> Optional[ImageFile]:
    """multipart 폼에서 image 파일 필드를 읽습니다. 없거나 비어 있으면 None."""
    form = await request.form()
    upload = form.get("image")
    if not isinstance(upload, UploadFile):
        return None

    data = await upload.read()
    await upload.close()
    if not data:
        return None

    return ImageFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type,
        data=data,
    )


@api_router.post("/analyze-artwork")
async def analyze_artwork(request: Request):
    """업로드된 작품 이미지를 분석합니다."""
    try:
        image = await read_image_field(request)
        if image is None:
            raise InputError()

        allowed = request.app.state.config.allowed_mime_types
        if image.content_type not in allowed:
            logger.warning(f"Unexpected upload content type: {image.content_type}")

        service = get_analysis_service(request)
        result = await run_in_threadpool(service.analyze, image)
        return JSONResponse(result.to_dict())

    except InputError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    except UpstreamTransportError as e:
        get_error_handler().handle_error(e, ErrorContext(function_name="analyze_artwork"))
        return JSONResponse(
            {"error": f"{ANALYSIS_FAILED_MESSAGE}: {e}"},
            status_code=500
        )

    except Exception as e:
        get_error_handler().handle_error(e, ErrorContext(function_name="analyze_artwork"))
        return JSONResponse({"error": ANALYSIS_FAILED_MESSAGE}, status_code=500)


@api_router.get("/health")
async def health(request: Request):
    """분석 서비스 헬스체크"""
    service = get_analysis_service(request)
    result = service.health_check()
    info = service.get_service_info()

    body = result.to_dict()
    body['service'] = {'name': info.name, 'version': info.version, 'status': info.status.value}
    return JSONResponse(body, status_code=200 if result.is_healthy else 503)


def create_app(config: Optional[Config] = None,
               analysis_service: Optional[ArtworkAnalysisService] = None) -> FastAPI:
    """
    FastAPI 애플리케이션을 생성합니다.

    Args:
        config: 애플리케이션 설정 (없으면 환경 변수에서 로드)
        analysis_service: 주입할 분석 서비스 (테스트용). 없으면 설정으로 한 번 생성합니다.
    """
    config = ensure_valid_config(config or load_config())
    get_logger().configure(config.log_dir, config.log_to_file, config.log_level)

    app = FastAPI(title="ArtLens - Artwork Analysis API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.analysis_service = analysis_service or build_analysis_service(config)
    app.include_router(api_router)

    logger.info("Artwork analysis API created")
    return app


def main():
    config = load_config()
    uvicorn.run(create_app(config), host=config.api_host, port=config.api_port)


if __name__ == "__main__":
    main()
