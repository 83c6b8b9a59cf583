# ===== Part 1: Imports & Logging ============================================
import argparse
import logging

from fastapi import FastAPI

from modules import formfill
from utils.settings import load_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# ===== Part 2: Application Factory ==========================================
def create_app() -> FastAPI:
    """Build the FastAPI app with every form filling route registered."""
    app = FastAPI(title="Form Fill Service", version="1.0.0")
    formfill.register_api(app)
    return app


# ===== Part 3: Application Entrypoint =======================================
if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser(description="Serve the form filling API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("Templates: %s, data: %s", settings.template_dir, settings.data_dir)
    uvicorn.run(create_app(), host=args.host, port=args.port)
