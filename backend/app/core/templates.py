"""
Template rendering utilities
"""
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.core.config import PROJECT_ROOT
from app.core.vite import page_tags, vite_tags

TEMPLATES_DIR = PROJECT_ROOT / "frontend" / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["vite_tags"] = vite_tags
templates.env.globals["page_tags"] = page_tags


def render_template(request: Request, template_name: str, context: dict, status_code: int = 200,
                    headers: Optional[dict] = None):
    """Render template with context"""
    return templates.TemplateResponse(
        request,
        template_name,
        context,
        status_code=status_code,
        headers=headers,
    )
