# payout_service/api/v1/api.py

from fastapi import APIRouter
from payout_service.api.v1.endpoints import health, organizers, payouts

# Main router for the v1 API.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(payouts.router)
api_router.include_router(organizers.router)
