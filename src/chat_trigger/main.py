import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .api.routes import router
from .config import CHAT_CONFIG_FILE, HOST, LOG_LEVEL, PORT, ROOT_PATH
from .trigger.credentials import StaticCredentialProvider
from .trigger.dispatcher import RequestDispatcher
from .trigger.settings import resolve_configuration

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def load_parameters(path: str) -> dict:
    """Read the trigger parameter mapping; an empty path means built-in defaults."""
    if not path:
        return {}
    parameters = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(parameters, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return parameters


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Loading trigger parameters...")
    app.state.parameters = load_parameters(CHAT_CONFIG_FILE)
    app.state.dispatcher = RequestDispatcher(StaticCredentialProvider())

    config = resolve_configuration(app.state.parameters)
    logger.info(
        "Chat trigger ready on /%s (mode=%s, auth=%s, output=%s)",
        config.webhook_path,
        config.mode.value,
        config.authentication.value,
        config.output_format.value,
    )
    yield

    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(title="Chat Trigger", root_path=ROOT_PATH, lifespan=lifespan)
app.include_router(router)


def run() -> None:
    uvicorn.run("chat_trigger.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    run()
