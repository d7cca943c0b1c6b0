"""
FastAPI Server for the Case Analysis Engine
Provides REST API endpoints for incident report analysis and investigation planning
"""

import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from analysis.analyzer import CaseAnalyzer
from analysis.planner import InvestigationPlanner
from casework.models import PriorityLevel
from casework.rules import load_rules

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Case Analysis API",
    description="Rule-based incident report analysis for case intake",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rule tables are loaded once, before the first request
rules = load_rules(os.getenv("CASE_RULES_PATH"))
analyzer = CaseAnalyzer(rules)
planner: Optional[InvestigationPlanner] = InvestigationPlanner(rules) if rules.plan is not None else None


# Request/Response Models
class IncidentReportRequest(BaseModel):
    """Request model for incident report analysis"""
    incident_description: str = Field(
        ...,
        description="Free-form incident report, typed or transcribed",
        max_length=20000
    )

    class Config:
        json_schema_extra = {
            "example": {
                "incident_description": "Someone broke into my house through the back window and stole my laptop and TV"
            }
        }


class CaseAnalysisResponse(BaseModel):
    """Response model for analysis results"""
    case_type: str = Field(..., description="Case type from the rule table")
    priority: PriorityLevel = Field(..., description="low, medium, high or critical")
    risk_factors: list[str] = Field(..., description="Detected escalation signals")
    next_steps: list[str] = Field(..., description="Recommended actions, most urgent first")
    questions: list[str] = Field(..., description="Follow-up questions")
    digital_trails: list[str] = Field(..., description="Digital-evidence leads")
    suspects: list[str] = Field(..., description="Best-effort suspect mentions")
    evidence: list[str] = Field(..., description="Best-effort evidence mentions")
    rules_version: str = Field(..., description="Rule table version used")

    class Config:
        json_schema_extra = {
            "example": {
                "case_type": "theft",
                "priority": "medium",
                "risk_factors": [],
                "next_steps": ["Secure the crime scene and preserve evidence"],
                "questions": ["What was the exact time of the incident?"],
                "digital_trails": [],
                "suspects": [],
                "evidence": [],
                "rules_version": "2024.06.1"
            }
        }


class PlanRequest(BaseModel):
    """Request model for an investigation plan"""
    case_type: str = Field(..., description="Case type from the rule table")
    priority: str = Field(..., description="low, medium, high or critical")


class InvestigationPlanResponse(BaseModel):
    """Response model for an investigation plan"""
    timeline: str
    resources: list[str]
    special_units: list[str]
    legal_considerations: list[str]


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    rules_loaded: bool
    rules_version: str
    message: str


# API Endpoints
@app.get("/", tags=["General"])
async def root():
    """Root endpoint"""
    return {
        "message": "Case Analysis API",
        "version": "1.0.0",
        "endpoints": {
            "analyze": "/analyze",
            "plan": "/plan",
            "health": "/health",
            "rules_info": "/rules/info",
            "docs": "/docs"
        }
    }


@app.get("/health", response_model=HealthResponse, tags=["General"])
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        rules_loaded=True,
        rules_version=analyzer.rules.version,
        message="API is operational" + ("" if planner else " (investigation planning disabled)")
    )


@app.post("/analyze", response_model=CaseAnalysisResponse, tags=["Analysis"])
async def analyze_incident(request: IncidentReportRequest):
    """
    Analyze an incident report

    This endpoint analyzes the incident description and returns:
    - Case type classification and priority
    - Risk factors
    - Next steps, follow-up questions and digital-evidence leads
    - Tentative suspect and evidence mentions
    """
    try:
        analysis_result = analyzer.analyze(request.incident_description)
        return CaseAnalysisResponse(**analysis_result.to_dict())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(status_code=500, detail=f"Analysis error: {str(e)}")


@app.post("/plan", response_model=InvestigationPlanResponse, tags=["Analysis"])
async def plan_investigation(request: PlanRequest):
    """Build an investigation plan for a classified case"""
    if planner is None:
        raise HTTPException(status_code=503, detail="Rule table has no plan section")
    try:
        plan = planner.plan_investigation(request.case_type, request.priority)
        return InvestigationPlanResponse(**plan.model_dump(mode="json"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/rules/info", tags=["Rules"])
async def rules_info():
    """Get information about the loaded rule table"""
    return {
        "version": analyzer.rules.version,
        "case_types": list(analyzer.rules.case_type_names),
        "risk_factors": [rule.label for rule in analyzer.rules.risk_rules],
        "planning_enabled": planner is not None,
    }


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Run the API server
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "analysis.api:app",
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
