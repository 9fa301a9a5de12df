import json
import logging
import os
from pathlib import Path
from fastapi import FastAPI
import uvicorn

from .api.routes import router as api_router

DEFAULT_CONFIG = {
    "server": {"host": "0.0.0.0", "port": 8000},
    "parser": {"max_config_bytes": 5242880},
    "log_level": "INFO",
}


def load_config() -> dict:
    """Load application configuration, merged over the defaults."""
    config_file = Path(os.environ.get(
        "NETCONFIG_ANALYZER_CONFIG",
        Path(__file__).parent.parent / "config.json"
    ))
    config = {key: (dict(value) if isinstance(value, dict) else value)
              for key, value in DEFAULT_CONFIG.items()}
    if config_file.exists():
        with open(config_file, 'r') as f:
            loaded = json.load(f)
        for key, value in loaded.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
    return config


def create_app(config: dict = None) -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="NetConfig Analyzer",
        description="Multi-vendor network configuration parser and auditor",
        version="1.0.0"
    )
    app.state.config = config if config is not None else load_config()
    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {"message": "NetConfig Analyzer API", "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    config = app.state.config
    server_config = config.get("server", {})

    logging.basicConfig(
        level=getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    host = server_config.get("host", "0.0.0.0")
    port = server_config.get("port", 8000)

    logging.getLogger(__name__).info("Starting NetConfig Analyzer on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level=str(config.get("log_level", "info")).lower())
