import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from core.database import DatabaseConnection, DatabaseConnectionError
from features.export_reports import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    ExportConfig,
    ReportBuilder,
    load_export_config,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_db():
    """Open one connection per export and always release it."""
    db = DatabaseConnection()
    try:
        conn = db.get_connection()
    except (DatabaseConnectionError, FileNotFoundError) as e:
        logger.error("Export aborted: %s", e)
        raise HTTPException(status_code=500, detail="DB connection failed")
    try:
        yield conn
    finally:
        db.close_connection()


def get_export_config() -> ExportConfig:
    try:
        return load_export_config()
    except FileNotFoundError:
        return ExportConfig()


def _attachment(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export")
def export_workbook(
    month: str | None = Query(None, description="Optional YYYY-MM filter; anything else exports all months"),
    conn=Depends(get_db),
    config: ExportConfig = Depends(get_export_config),
):
    """Download the four-sheet expenses workbook."""
    content = ReportBuilder(conn, month_filter=month, config=config).to_bytes()
    return _attachment(content, config.filename, XLSX_MEDIA_TYPE)


@router.get("/export/csv")
def export_csv(
    month: str | None = Query(None),
    conn=Depends(get_db),
    config: ExportConfig = Depends(get_export_config),
):
    """Download every fetched record as one flat CSV."""
    content = ReportBuilder(conn, month_filter=month, config=config).to_csv()
    return _attachment(content, config.csv_filename, CSV_MEDIA_TYPE)
