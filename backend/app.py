import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(dotenv_path=env_path)

from backend.field_order_module import init_field_order_module, router as field_order_router  # noqa: E402
from backend.field_order_module.config import settings  # noqa: E402

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Initializing field ordering tables...")
        init_field_order_module()
        logger.info("Field ordering tables initialized.")
    except Exception as e:
        logger.error(f"Startup field ordering module error: {e}")
        raise
    yield
    logger.info("Shutting down...")


app = FastAPI(title="School Field Ordering API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(field_order_router)


@app.get("/api/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    try:
        uvicorn.run(app, host=settings.backend_host, port=settings.backend_port, reload=settings.backend_reload)
    except OSError as e:
        if "address already in use" in str(e).lower():
            logger.error(f"Port {settings.backend_port} is already in use. Set BACKEND_PORT to another port.")
        raise
