"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, Header, HTTPException, Path, UploadFile, status

from intake.domains import Domain

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_domain(domain: str = Path(..., description="Record domain, e.g. vaccination")) -> Domain:
    """
    Resolve the ``{domain}`` path segment; unknown domains are a 404.
    """

    try:
        return Domain.from_value(domain)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported domain '{domain}'. Supported: {[item.value for item in Domain]}.",
        ) from exc


def get_creator_id(x_creator_id: str | None = Header(default=None)) -> str | None:
    """
    Optional importing user id from the ``X-Creator-Id`` header.
    """

    if x_creator_id is None:
        return None
    stripped = x_creator_id.strip()
    return stripped or None
