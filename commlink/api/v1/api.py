from fastapi import APIRouter

from commlink.api.v1.endpoints import environments, jamming, link, public_config

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(public_config.router, prefix="/config", tags=["config"])  # /api/v1/config/public
api_router.include_router(environments.router, prefix="/environments", tags=["environments"])
api_router.include_router(link.router, prefix="/link", tags=["link"])  # /api/v1/link/status
api_router.include_router(jamming.router, prefix="/jamming", tags=["jamming"])  # /api/v1/jamming/analysis
