from pathlib import Path
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from workshop.core.config import settings

def ensure_dirs():
    Path(settings.EXPORT_DIR).mkdir(parents=True, exist_ok=True)

def send_and_remove(path: Path, media_type: str) -> FileResponse:
    # exports are one-shot; the file is gone once the response is sent
    return FileResponse(
        str(path),
        media_type=media_type,
        filename=path.name,
        background=BackgroundTask(path.unlink, missing_ok=True),
    )
