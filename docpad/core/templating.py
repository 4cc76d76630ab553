from pathlib import Path

from fastapi.templating import Jinja2Templates

from docpad.core.rendering import render_markdown

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["markdown"] = render_markdown
