import argparse
import asyncio
import sys
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager
from loguru import logger

from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from config import load_config, CONFIG_DIR
from db.database import init_db, get_store
from routes import actions
from utils.samples import preload_sample_text


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: config, store and the sample text
    config = load_config()  # Ensures config exists
    configure_logging(config["logging"]["level"])
    await init_db()
    if config["samples"]["preload"]:
        await preload_sample_text(actions.get_api())
    yield
    await get_store().close()


app = FastAPI(title="Recite", description="Local-first line-by-line memorization", lifespan=lifespan)

# Include routers
app.include_router(actions.router, prefix="/api", tags=["api"])


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recite App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    configure_logging(config["logging"]["level"])
    if args.init:
        async def _init():
            store = await init_db()
            await store.close()
        asyncio.run(_init())
        print(f"DB initialized and config copied to {CONFIG_DIR}/")
        sys.exit(0)
    # Run server
    uvicorn.run(
        "main:app",
        host=config["server"]["host"],
        port=config["server"]["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
