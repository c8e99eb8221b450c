"""FastAPI server for the Repository Watcher page."""

import html
import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

logger = logging.getLogger(__name__)

WEBAPP_DIR = Path(__file__).parent.parent / "webapp"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    snapshot_available: bool


def create_app(
    data_path: str | Path = "./data/repos.json",
    title: str = "Repository Watcher",
    source_url: str = "https://github.com/sinedied/github-repository-watcher",
    webapp_dir: Path = WEBAPP_DIR,
) -> FastAPI:
    """Create the app serving the page shell and the latest snapshot."""
    data_path = Path(data_path)

    app = FastAPI(
        title=title,
        description="GitHub repository metadata dashboard",
        version="0.1.0",
    )

    index_html = (webapp_dir / "index.html").read_text(encoding="utf-8")
    index_html = index_html.replace("{{ title }}", html.escape(title)).replace(
        "{{ source_url }}", html.escape(source_url, quote=True)
    )

    app.mount("/static", StaticFiles(directory=str(webapp_dir / "static")), name="static")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""
        return HealthResponse(status="ok", snapshot_available=data_path.exists())

    @app.get("/data/repos.json")
    async def snapshot() -> FileResponse:
        """Serve the snapshot written by the last refresh."""
        if not data_path.exists():
            raise HTTPException(status_code=404, detail="No snapshot yet, run repo-watcher first")
        return FileResponse(str(data_path), media_type="application/json")

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return index_html

    return app


def main():
    """Run the web server."""
    import argparse

    import uvicorn

    from ..main import DEFAULT_CONFIG_PATH, load_config, setup_logging

    parser = argparse.ArgumentParser(description="Repository Watcher web server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind")
    parser.add_argument("--port", "-p", type=int, default=8000, help="Port to bind")
    parser.add_argument("--config", "-c", help=f"Config file path (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--data", help="Snapshot path (overrides config)")

    args = parser.parse_args()

    setup_logging()

    config = load_config(
        Path(args.config or DEFAULT_CONFIG_PATH),
        required=args.config is not None,
    )
    server_config = config.get("server", {})
    data_path = args.data or config["repos"]["output_path"]

    app = create_app(
        data_path=data_path,
        title=server_config.get("title", "Repository Watcher"),
        source_url=server_config.get("source_url", ""),
    )

    logger.info("Serving %s on http://%s:%d", data_path, args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
