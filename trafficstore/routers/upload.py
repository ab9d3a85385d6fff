"""CSV upload endpoint for back-filling traffic history.

Accepts a CSV file of traffic deltas, validates its format, headers and
values, then records every row through the traffic aggregator.
"""

import io
import logging
import os
import tempfile

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from trafficstore.database import get_db
from trafficstore.exceptions import PersistenceError
from trafficstore.services.ingestion import (
    REQUIRED_COLUMNS,
    import_traffic,
    prepare_dataframe,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/traffic", tags=["Upload"])

# Allowed file extensions and MIME types
ALLOWED_EXTENSIONS = {".csv"}
ALLOWED_MIME_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "text/plain",
    "application/octet-stream",
}
MAX_FILE_SIZE_MB = 50
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024


def _validate_file_metadata(file: UploadFile) -> None:
    """Validate file extension and MIME type.

    Raises:
        HTTPException: If the file has an invalid extension or MIME type.
    """
    if not file.filename:
        raise HTTPException(
            status_code=400,
            detail="No filename provided. Please upload a file with a .csv extension.",
        )

    filename_lower = file.filename.lower()
    if not any(filename_lower.endswith(ext) for ext in ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail=(
                f"Invalid file type: '{file.filename}'. "
                "Only .csv files are accepted."
            ),
        )

    if file.content_type and file.content_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Invalid MIME type: '{file.content_type}'. "
                "Expected a CSV file (text/csv)."
            ),
        )


def _validate_csv_content(contents: bytes) -> pd.DataFrame:
    """Parse and validate the uploaded CSV before anything is recorded.

    Checks size, encoding, CSV syntax, required columns, presence of data
    rows, and the values themselves (see ingestion.prepare_dataframe).

    Raises:
        HTTPException: If any validation check fails.
    """
    if len(contents) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {MAX_FILE_SIZE_MB} MB.",
        )

    if len(contents) == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")

    try:
        text = contents.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400,
            detail="File is not valid UTF-8 text. Please upload a UTF-8 encoded CSV.",
        )

    try:
        df = pd.read_csv(io.StringIO(text))
    except pd.errors.EmptyDataError:
        raise HTTPException(
            status_code=400,
            detail="CSV file contains no data. Please upload a file with headers and data rows.",
        )
    except pd.errors.ParserError as e:
        raise HTTPException(
            status_code=400,
            detail=f"CSV parsing error: {e}. Please check the file format.",
        )

    df.columns = df.columns.str.strip()
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Missing required columns: {sorted(missing)}. "
                f"Expected columns: {sorted(REQUIRED_COLUMNS)}."
            ),
        )

    if df.empty:
        raise HTTPException(
            status_code=400,
            detail="CSV file has headers but no data rows.",
        )

    try:
        return prepare_dataframe(df)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/upload",
    summary="Upload a CSV of traffic deltas",
    description=(
        "Upload a CSV file with interface, timestamp, rx and tx columns. "
        "The file is validated before any row is recorded; rows are then "
        "applied in file order, each in its own transaction."
    ),
    responses={
        400: {"description": "Validation error (bad file format, missing columns, etc.)"},
    },
)
async def upload_csv(
    file: UploadFile = File(..., description="CSV file to upload"),
    db: Session = Depends(get_db),
):
    """Upload and record a CSV file of traffic deltas."""
    _validate_file_metadata(file)
    contents = await file.read()
    _validate_csv_content(contents)

    tmp_file = None
    try:
        tmp_file = tempfile.NamedTemporaryFile(mode="wb", suffix=".csv", delete=False)
        tmp_file.write(contents)
        tmp_file.close()

        count = import_traffic(csv_path=tmp_file.name, session=db)
        logger.info("CSV upload recorded %d rows", count)

        return {
            "status": "success",
            "message": f"Successfully recorded {count:,} rows.",
            "rows_recorded": count,
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Data error: {e}")
    except PersistenceError as e:
        logger.error("Upload import failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Import failed: {e}")
    finally:
        if tmp_file and os.path.exists(tmp_file.name):
            os.unlink(tmp_file.name)
