import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from social_posts.config import settings
from social_posts.middleware import RequestLogMiddleware
from social_posts.notifications import notifier
from social_posts.routers import posts, users

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.NOTIFY_ON_ENGAGEMENT:
        await notifier.connect()
    logger.info("Social posts API started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await notifier.disconnect()


app = FastAPI(
    title="Social Posts API",
    description="Posts, likes and comments",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(posts.router)
app.include_router(users.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
