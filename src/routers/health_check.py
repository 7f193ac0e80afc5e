from fastapi import status
from fastapi.routing import APIRouter
from fastapi.responses import JSONResponse

from src.app import logger_instance
from src.utils.config import settings


router = APIRouter()
logger = logger_instance.get_logger(__name__)


@router.get('/ping', responses={200: {
            'description': 'Healthcheck Service',
            'content': {
                'application/json': {
                    'example': {'REVISION': '1.0.0'}
                }
            }
        }})
async def health_check() -> JSONResponse:
    logger.info('event=health-check-success message="Successful health check. "')
    content = {'REVISION': settings.API_VERSION}
    return JSONResponse(content=content, status_code=status.HTTP_200_OK)
