# live_sessions/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from live_sessions.api.error_handlers import register_error_handlers
from live_sessions.api.v1.api import api_router
from live_sessions.core.config import settings
from live_sessions.core.kafka_producer import close_kafka_producer
from live_sessions.core.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Live session service starting up (env={settings.ENV})")
    yield
    logger.info("Live session service shutting down...")
    close_kafka_producer()


app = FastAPI(
    title="Live Session Engine",
    version="1.0.0",
    description="""
        **Live Session Engine**

        Scheduling, registration, attendance and feedback for instructor-led
        live sessions.

        ## Features

        * **Scheduling**: Instructors schedule, edit and cancel sessions
        * **Registration**: First come, first served seats with a hard capacity
        * **Lifecycle**: scheduled -> live -> completed, with attendance settled on end
        * **Feedback**: One rating per attendee, averaged per session
        * **Analytics**: Per-session breakdowns and an admin dashboard

        ## Authentication

        All endpoints except `/health` require JWT authentication via the
        `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

origins = [
    "http://localhost:3000",
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
    return {"status": "Live Session Engine is running"}
