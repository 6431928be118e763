from pathlib import Path
from fastapi import Depends, Request
from localify.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_projects_root(settings: Settings = Depends(get_app_settings)) -> Path:
    return Path(settings.PROJECTS_DIR)
