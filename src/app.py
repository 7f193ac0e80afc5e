class LoggerInstance(object):
    def __new__(cls):
        from src.utils.logger.custom_logging import LogHandler
        return LogHandler()

class IncludeAPIRouter(object):
    def __new__(cls):
        from fastapi.routing import APIRouter

        # =============================================================================
        # IMPORT ALL ROUTERS
        # =============================================================================

        # Core system routers
        from src.routers.health_check import router as router_health_check

        # News routers
        from src.routers.news import router as router_news

        # =============================================================================
        # CONFIGURE MAIN ROUTER AND INCLUDE ALL SUB-ROUTERS
        # =============================================================================

        router_v1 = APIRouter(prefix='/api/v1')
        router_v1.include_router(router_health_check, tags=['Health Check'])
        router_v1.include_router(router_news, tags=['News Aggregator'])

        return router_v1


# Instance creation
logger_instance = LoggerInstance()
