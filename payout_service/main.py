# payout_service/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payout_service.api.v1.api import api_router
from payout_service.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Payout service starting up...")
    yield
    logger.info("Payout service shutting down...")


app = FastAPI(
    title="Organizer Payout Service",
    version="1.0.0",
    description="""
        **Organizer Payout Service**

        Reconciles completed ticket sales into organizer payouts.

        ## Features

        * **Payout Requests**: Organizers request everything earned since their last paid period
        * **Admin Review**: Approve or reject requests, one at a time or in bulk
        * **Bank Verification**: Payout accounts are verified before they can be used
        * **Revenue Analytics**: Pending balance, lifetime earnings and recent sales

        ## Authentication

        All endpoints except `/health` require JWT authentication via the
        `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

origins = [
    settings.FRONTEND_URL,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Payout Service is running"}
