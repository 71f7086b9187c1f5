from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

router = APIRouter(tags=["frontend"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# path -> template; the frontend holds no state beyond which page is shown
PAGES = {
    "/": "landing.html",
    "/login": "login.html",
}


def _page_route(template_name: str):
    async def show_page(request: Request):
        return templates.TemplateResponse(
            request,
            template_name,
            {"site_name": "SkillSwap", "login_endpoint": "/auth/login"},
        )
    show_page.__name__ = f"show_{Path(template_name).stem}"
    return show_page


for path, template_name in PAGES.items():
    router.add_api_route(path, _page_route(template_name), methods=["GET"], response_class=HTMLResponse)
