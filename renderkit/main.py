"""Demo application entry point."""

from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends

from renderkit.config import Options, get_settings
from renderkit.core.app_factory import create_app
from renderkit.dependencies import get_renderer
from renderkit.logging_config import setup_logging
from renderkit.renderer import Renderer

BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(BASE_DIR / ".env")

settings = get_settings()

# Configure structured logging (console, plus JSON file when RENDER_LOG_DIR is set)
setup_logging(settings.log_level, settings.log_dir)

# Create application
app = create_app(Options(directory=str(BASE_DIR / "templates"), layout="layout"), settings)


@app.get("/")
def root(render: Renderer = Depends(get_renderer)):
    """Root endpoint."""
    return render.json(200, {"message": "renderkit demo", "docs": "/docs"})


@app.get("/hello/{name}")
def hello(name: str, render: Renderer = Depends(get_renderer)):
    """Greeting page rendered inside the layout."""
    return render.html(200, "hello", {"name": name})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "renderkit.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.is_development,
    )
