from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import ai as ai_router
from app.api.v1 import attachments as attachments_router
from app.api.v1 import metrics as metrics_router
from app.api.v1 import preferences as preferences_router
from app.api.v1 import responses as responses_router
from app.api.v1 import teams as teams_router
from app.api.v1 import tickets as tickets_router
from app.api.v1 import users as users_router
from app.config.db import check_db_connection
from app.config.redis import check_redis_connection, close_redis
from app.config.supabase import check_supabase_connection
from app.utils.logging_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    await check_db_connection()
    await check_redis_connection()
    await check_supabase_connection()
    logger.info("SUPPORT DESK API IS READY")

    yield

    try:
        await close_redis()
    except Exception as e:
        logger.warning(f"Error closing Redis connection: {e}")


app = FastAPI(
    lifespan=lifespan,
    title="AutoCRM Support Desk",
    description="An API for managing customer support tickets",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tickets_router.router, prefix="/api/v1/tickets", tags=["Tickets"])
app.include_router(responses_router.router, prefix="/api/v1/tickets", tags=["Responses"])
app.include_router(attachments_router.router, prefix="/api/v1", tags=["Attachments"])
app.include_router(ai_router.router, prefix="/api/v1", tags=["AI"])
app.include_router(metrics_router.router, prefix="/api/v1/metrics", tags=["Metrics"])
app.include_router(users_router.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(teams_router.router, prefix="/api/v1/teams", tags=["Teams"])
app.include_router(
    preferences_router.router, prefix="/api/v1/preferences", tags=["Preferences"]
)


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": "Hello from AutoCRM Support Desk API!"}
