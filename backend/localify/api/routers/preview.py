import logging
from pathlib import Path
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from localify.api.deps import get_app_settings, get_projects_root
from localify.api.middleware import text_response
from localify.core.config import Settings
from localify.models.enums import FileType
from localify.services.fs import atomic_write_text
from localify.services.templates import default_template

router = APIRouter(tags=["preview"])
log = logging.getLogger("localify.server")

CONTENT_TYPES = {
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "xml": "application/xml",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "default-src 'self'",
}


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(Path(file_name).suffix.lower().lstrip("."), DEFAULT_CONTENT_TYPE)


def _file_response(path: Path, max_size: int) -> Response:
    if path.stat().st_size > max_size:
        return text_response(413, "Request entity too large")
    data = path.read_bytes()
    # Content-Type goes in the headers so starlette doesn't append a charset
    headers = {"Content-Type": content_type_for(path.name), **SECURITY_HEADERS}
    return Response(content=data, status_code=200, headers=headers)


@router.get("/")
async def greeting():
    return HTMLResponse("Hello from Localify!")


@router.get("/projects/{project_id}/{file_name}")
def serve_project_file(
    project_id: str,
    file_name: str,
    root: Path = Depends(get_projects_root),
    settings: Settings = Depends(get_app_settings),
):
    if not project_id.strip() or not file_name.strip():
        return text_response(400, "Missing project ID or file name")
    if project_id in (".", "..") or file_name in (".", ".."):
        return text_response(400, "Invalid project ID or file name")

    project_dir = root / project_id
    path = project_dir / file_name
    try:
        return _file_response(path, settings.MAX_FILE_SIZE)
    except (FileNotFoundError, IsADirectoryError):
        pass
    except PermissionError:
        return text_response(403, "Forbidden")
    except OSError:
        log.exception("failed to read %s/%s", project_id, file_name)
        return text_response(500, "Internal server error")

    file_type = FileType.from_extension(path.suffix)
    if file_type is None or not project_dir.is_dir() or path.is_dir():
        return text_response(404, "Not found")

    try:
        atomic_write_text(path, default_template(file_type))
        log.info("synthesized default %s for project %s", file_name, project_id)
        return _file_response(path, settings.MAX_FILE_SIZE)
    except PermissionError:
        return text_response(403, "Forbidden")
    except OSError:
        log.exception("failed to synthesize %s/%s", project_id, file_name)
        return text_response(500, "Internal server error")


@router.get("/projects/{rest:path}")
async def incomplete_project_path(rest: str):
    return text_response(400, "Missing project ID or file name")
