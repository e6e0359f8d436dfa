from fastapi import APIRouter
from umrah_feedback.api.v2 import (
    trends,
    surveys,
    umrah_ids,
)

api_router = APIRouter()

# Include all v2 routers
api_router.include_router(trends.router, tags=["trends"])
api_router.include_router(surveys.router, prefix="/surveys", tags=["surveys"])
api_router.include_router(umrah_ids.router, prefix="/umrah-ids", tags=["umrah-ids"])
