from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv
import os
import logging
from routers import smartify
from services.database import close_engine

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = ["OPENAI_API_KEY", "DATABASE_URL"]


def validate_environment():
    """Log missing required environment variables.

    Requests that need a missing variable fail with a 500; the app itself
    still starts so health checks and tests can run.
    """
    missing = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing:
        logger.warning(f"Missing required environment variables: {missing}")
        return False
    logger.info("Environment validation passed")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_environment()
    logger.info(f"Smartify service starting: model={os.getenv('OPENAI_MODEL', 'gpt-4o')}")
    yield
    await close_engine()


app = FastAPI(title="Smartify Extraction Service", lifespan=lifespan)

app.include_router(smartify.router)


@app.get("/health")
def health():
    return {"status": "ok"}
