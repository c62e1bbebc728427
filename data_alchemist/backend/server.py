"""
HTTP API for the Data Alchemist application.

This module defines the FastAPI application that backs the Streamlit
UI.  Every handler is stateless: the client sends the rows it holds
with each request and receives new rows, issues or AI proposals in the
response.  The server can be run directly via uvicorn or
programmatically by calling the ``run`` function defined below.

Endpoints (all under ``/api``):

* **GET /health** – Basic liveness and configuration status.

* **POST /upload** – Multipart CSV upload (field ``file``).  Returns
  the parsed rows as ``{"data": [...]}``.

* **POST /search** – Case-insensitive substring search across every
  field of the supplied rows.

* **POST /export-csv** – Turn rows back into a CSV file download.

* **POST /validate** – Run the dataset validators and return the
  issues plus a quality report.

* **POST /get-suggestion** – Ask the AI for a corrected value for one
  invalid cell.

* **POST /propose-modification** – Ask the AI to turn a natural
  language command into a list of cell edits.

* **POST /apply-modifications** – Apply a list of cell edits to rows.

* **POST /recommend-rules** – Ask the AI for validation rules that fit
  the data.

* **POST /export-rules** – Download the rules and priority weights as
  ``rules.json``.

Errors are always returned as ``{"error": "..."}``: 400 for problems
with the request itself and 500 for parse or AI failures.  CORS is
open so the UI can call the API from a different port.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import ai_assistant, operations, parsers, rules, validators
from .errors import AIServiceError, CSVParseError

logger = logging.getLogger(__name__)

HOST: str = os.getenv('HOST', '0.0.0.0')
PORT: int = int(os.getenv('PORT', '3001'))


class SearchRequest(BaseModel):
    data_type: Optional[str] = Field(None, alias='dataType')
    search_query: Optional[str] = Field(None, alias='searchQuery')
    data: Optional[List[Dict[str, Any]]] = None


class ExportRequest(BaseModel):
    data: Optional[List[Dict[str, Any]]] = None


class ValidateRequest(BaseModel):
    data_type: Optional[str] = Field(None, alias='dataType')
    data: Optional[List[Dict[str, Any]]] = None


class SuggestionRequest(BaseModel):
    column: Optional[str] = None
    error: Optional[str] = None
    current_value: Optional[Any] = Field(None, alias='currentValue')


class ModificationRequest(BaseModel):
    command: Optional[str] = None
    data: Optional[List[Dict[str, Any]]] = None
    data_type: Optional[str] = Field(None, alias='dataType')


class ApplyRequest(BaseModel):
    data: Optional[List[Dict[str, Any]]] = None
    modifications: Optional[List[Dict[str, Any]]] = None


class RecommendRequest(BaseModel):
    data: Optional[List[Dict[str, Any]]] = None
    data_type: Optional[str] = Field(None, alias='dataType')


class Weights(BaseModel):
    accuracy: int = Field(rules.DEFAULT_WEIGHTS['accuracy'], ge=0, le=100)
    completeness: int = Field(rules.DEFAULT_WEIGHTS['completeness'], ge=0, le=100)
    consistency: int = Field(rules.DEFAULT_WEIGHTS['consistency'], ge=0, le=100)


class RulesExportRequest(BaseModel):
    rules: Optional[List[str]] = None
    weights: Weights = Field(default_factory=Weights)


# Create the FastAPI application
app = FastAPI(title="Data Alchemist API", version="1.0.0")

# Configure CORS so that the Streamlit frontend can access the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as a plain 400 error."""
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request payload."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


def _require_data_type(data_type: Optional[str]) -> str:
    if data_type not in validators.DATA_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown dataType. Expected one of: {', '.join(validators.DATA_TYPES)}.",
        )
    return data_type


@app.get("/api/health", response_model=Dict[str, Any])
async def health_check() -> Dict[str, Any]:
    """Return a basic health status.

    ``ai_configured`` reports whether an API key is present; AI
    endpoints will fail with a 500 until one is set.
    """
    return {
        "status": "healthy",
        "server": "DataAlchemist",
        "model": ai_assistant.MODEL,
        "ai_configured": bool(os.getenv('GROQ_API_KEY') or os.getenv('OPENAI_API_KEY')),
    }


@app.post("/api/upload", response_model=Dict[str, Any])
async def upload(
    file: Optional[UploadFile] = File(None),
    data_type: Optional[str] = Form(None, alias='dataType'),
) -> Dict[str, Any]:
    """Parse an uploaded CSV file into rows.

    Args:
        file: The uploaded file.  Accepted when its MIME type is
            ``text/csv`` or its name ends with ``.csv``.
        data_type: Optional dataset type, used only for logging.

    Returns:
        A dictionary with a ``data`` key holding the parsed rows.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")
    if not parsers.is_csv_upload(file.filename, file.content_type):
        raise HTTPException(status_code=400, detail="Unsupported file type. Please upload a CSV.")
    content = await file.read()
    if not content.strip():
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    try:
        data = parsers.parse_upload(content)
    except CSVParseError as e:
        logger.error(f"Error processing file upload {file.filename}: {e}")
        raise HTTPException(status_code=500, detail="Error processing file upload.")
    logger.info(f"Uploaded {file.filename} ({data_type or 'unknown type'}): {len(data)} rows")
    return {"data": data}


@app.post("/api/search", response_model=Dict[str, Any])
async def search(body: SearchRequest) -> Dict[str, Any]:
    """Return the rows where any field contains the query, ignoring case."""
    if not body.data_type or not body.search_query or body.data is None:
        raise HTTPException(status_code=400, detail="Missing required search parameters.")
    return {"data": operations.search_rows(body.data, body.search_query)}


@app.post("/api/export-csv")
async def export_csv(body: ExportRequest) -> Response:
    """Return the rows as a ``text/csv`` attachment named ``exported_data.csv``."""
    if not body.data:
        raise HTTPException(status_code=400, detail="No data provided for export.")
    try:
        csv_text = parsers.rows_to_csv(body.data)
    except Exception as e:
        logger.error(f"Failed to generate CSV: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate CSV.")
    logger.info(f"Exported {len(body.data)} rows to CSV")
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=exported_data.csv"},
    )


@app.post("/api/validate", response_model=Dict[str, Any])
async def validate(body: ValidateRequest) -> Dict[str, Any]:
    """Validate rows as the given dataset type.

    Returns:
        A dictionary with ``errors`` (one entry per issue) and
        ``report`` (summary statistics and recommendations).
    """
    data_type = _require_data_type(body.data_type)
    if body.data is None:
        raise HTTPException(status_code=400, detail="Missing data to validate.")
    issues, report = validators.validate_dataset(data_type, body.data)
    return {"errors": [issue.to_dict() for issue in issues], "report": report}


@app.post("/api/get-suggestion", response_model=Dict[str, Any])
def get_suggestion(body: SuggestionRequest) -> Dict[str, Any]:
    if not body.column or not body.error or body.current_value is None:
        raise HTTPException(status_code=400, detail="Missing parameters for AI suggestion.")
    try:
        suggestion = ai_assistant.get_suggestion(body.column, body.error, body.current_value)
    except AIServiceError as e:
        logger.error(f"Error calling AI service for suggestion: {e}")
        raise HTTPException(status_code=500, detail="Failed to contact AI service.")
    return {"suggestion": suggestion}


@app.post("/api/propose-modification", response_model=Dict[str, Any])
def propose_modification(body: ModificationRequest) -> Dict[str, Any]:
    """Ask the AI to map a natural-language command onto cell edits.

    The rows are not changed here; the client confirms the proposal
    and then calls ``/api/apply-modifications``.
    """
    if not body.command or body.data is None or not body.data_type:
        raise HTTPException(status_code=400, detail="Missing command, data, or dataType.")
    data_type = _require_data_type(body.data_type)
    try:
        return ai_assistant.propose_modification(body.command, body.data, data_type)
    except AIServiceError as e:
        logger.error(f"Error calling AI service for modification: {e}")
        raise HTTPException(status_code=500, detail="Failed to get AI modification proposal.")


@app.post("/api/apply-modifications", response_model=Dict[str, Any])
async def apply_modifications(body: ApplyRequest) -> Dict[str, Any]:
    if body.data is None or body.modifications is None:
        raise HTTPException(status_code=400, detail="Missing data or modifications.")
    data, applied = operations.apply_modifications(body.data, body.modifications)
    logger.info(f"Applied {applied} of {len(body.modifications)} modifications")
    return {"data": data, "applied": applied}


@app.post("/api/recommend-rules", response_model=Dict[str, Any])
def recommend_rules(body: RecommendRequest) -> Dict[str, Any]:
    if body.data is None or not body.data_type:
        raise HTTPException(status_code=400, detail="Missing data or dataType for recommendations.")
    data_type = _require_data_type(body.data_type)
    try:
        return ai_assistant.recommend_rules(body.data, data_type)
    except AIServiceError as e:
        logger.error(f"Error calling AI service for rule recommendations: {e}")
        raise HTTPException(status_code=500, detail="Failed to get AI recommendations.")


@app.post("/api/export-rules")
async def export_rules(body: RulesExportRequest) -> JSONResponse:
    """Return the rules and weights as a ``rules.json`` attachment."""
    if body.rules is None:
        raise HTTPException(status_code=400, detail="Missing rules to export.")
    config = rules.build_rules_config(body.rules, body.weights.model_dump())
    return JSONResponse(
        content=config,
        headers={"Content-Disposition": "attachment; filename=rules.json"},
    )


def run(host: str = HOST, port: int = PORT) -> None:
    """Run the API server using uvicorn.

    This helper wraps uvicorn to start the application.  It is
    intended for CLI use; in production you may prefer to run uvicorn
    directly or under a process manager.
    """
    import uvicorn  # type: ignore

    logger.info(f"Starting Data Alchemist API on {host}:{port}")
    uvicorn.run(
        "data_alchemist.backend.server:app",
        host=host,
        port=port,
        log_level="info",
        reload=False,
    )
