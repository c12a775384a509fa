from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .log import get_logger
from .state import ViewState

log = get_logger(__name__)


class ExportBookmark(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    url: str
    parent_id: Optional[str] = Field(None, alias="parentId")
    date_added: int = Field(..., alias="dateAdded", description="Epoch milliseconds.")
    folder_path: str = Field(..., alias="folderPath")


class ExportFolder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    path: str
    parent_id: Optional[str] = Field(None, alias="parentId")


class ExportArtifact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    export_date: str = Field(..., alias="exportDate", description="ISO-8601 UTC timestamp.")
    total_bookmarks: int = Field(..., alias="totalBookmarks")
    bookmarks: List[ExportBookmark] = Field(default_factory=list)
    folders: List[ExportFolder] = Field(default_factory=list)


def build_export(state: ViewState, now: Optional[datetime] = None) -> ExportArtifact:
    ts = now or datetime.now(timezone.utc)
    return ExportArtifact(
        export_date=ts.isoformat(),
        total_bookmarks=len(state.bookmarks),
        bookmarks=[
            ExportBookmark(
                id=b.id,
                title=b.title,
                url=b.url,
                parent_id=b.parent_id,
                date_added=b.date_added,
                folder_path=b.folder_path,
            )
            for b in state.bookmarks
        ],
        folders=[
            ExportFolder(id=f.id, title=f.title, path=f.path, parent_id=f.parent_id)
            for f in state.folders.values()
        ],
    )


def export_filename(now: datetime) -> str:
    return f"bookmarks-export-{now.date().isoformat()}.json"


def write_export(state: ViewState, out_dir: Path, now: Optional[datetime] = None) -> Path:
    ts = now or datetime.now(timezone.utc)
    artifact = build_export(state, ts)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / export_filename(ts)
    out_path.write_text(artifact.model_dump_json(by_alias=True, indent=2) + "\n", encoding="utf-8")
    log.info("Exported %d bookmarks to %s", artifact.total_bookmarks, out_path)
    return out_path
