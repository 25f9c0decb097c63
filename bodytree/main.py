from __future__ import annotations

import logging
import sys
from pathlib import Path

from fastapi import FastAPI

from bodytree.api.rest import router as rest_router
from bodytree.services.runtime import build_runtime

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def setup_logging(level: int = logging.INFO) -> None:
    root_logger = logging.getLogger()
    # Leave an already configured root logger alone (uvicorn, pytest).
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(handler)
    logging.getLogger("bodytree").setLevel(level)


def create_app(config_path: Path = DEFAULT_CONFIG_PATH) -> FastAPI:
    setup_logging()
    app = FastAPI(title="Body Joint Tree", version="0.1.0")
    app.state.runtime = build_runtime(Path(config_path))
    app.include_router(rest_router)
    return app


app = create_app()