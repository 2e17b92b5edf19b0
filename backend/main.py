"""
PurePlate Backend - FastAPI Application
Main entry point for the food-safety analysis API
"""

import logging

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional

from config import ALLERGY_OPTIONS, CORS_ORIGINS, GEMINI_MODEL, LOG_LEVEL
from pureplate.credentials import CredentialPool
from pureplate.errors import EmptyQuery
from pureplate.models import UserContext
from pureplate.orchestrator import AnalysisOrchestrator

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title="PurePlate API",
    description="Food safety & nutrition analysis - Powered by Gemini",
    version=VERSION
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One orchestrator (and so one history) per process
orchestrator = AnalysisOrchestrator(CredentialPool.from_config())


def get_orchestrator() -> AnalysisOrchestrator:
    return orchestrator


# Request/Response Models
class BMIPayload(BaseModel):
    value: float
    category: str


class AnalyzeRequest(BaseModel):
    query: str
    allergies: list[str] = []
    bmi: Optional[BMIPayload] = None


class HealthResponse(BaseModel):
    status: str
    credentials: int
    history_size: int
    model: str


# API Endpoints
@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "PurePlate API is running", "version": VERSION}


@app.get("/health", response_model=HealthResponse)
async def health_check(orch: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Health check endpoint - no outbound call"""
    credentials = orch.pool.size
    return HealthResponse(
        status="healthy" if credentials else "no_credentials",
        credentials=credentials,
        history_size=len(orch.history),
        model=GEMINI_MODEL
    )


@app.get("/allergies")
async def allergy_options():
    """Allergies a user can declare"""
    return ALLERGY_OPTIONS


@app.post("/analyze")
async def analyze(
    request: AnalyzeRequest,
    orch: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """
    Analyze a food or ingredient.
    Always answers with an analysis; failures come back as a result with an "error" field.
    """
    try:
        context = UserContext.from_dict(request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        result = await orch.analyze(request.query, context)
    except EmptyQuery as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result.to_dict()


@app.get("/history")
async def get_history(orch: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Past analyses, newest first"""
    return [result.to_dict() for result in orch.get_history()]


@app.delete("/history", status_code=204)
async def clear_history(orch: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Purge all stored analyses"""
    orch.clear_history()
    return Response(status_code=204)


@app.get("/history/{result_id}")
async def get_history_item(
    result_id: int,
    orch: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """Reopen a stored analysis without calling Gemini"""
    try:
        return orch.select_from_history(result_id).to_dict()
    except KeyError:
        raise HTTPException(status_code=404, detail="Analysis not found")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info(
        "PurePlate Backend v%s started - %d Gemini key(s) configured",
        VERSION, orchestrator.pool.size
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
