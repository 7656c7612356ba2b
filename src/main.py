"""
FastAPI application serving the HR Buddy assistant.
Provides REST API endpoints for chat and monitoring.
"""

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.agent import get_agent
from src.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_ERROR = "Something went wrong with the HR Buddy service."
CLIENT_ERROR = "Missing message or sessionId"


# Pydantic models for API
class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "message": "Apply sick leave for 5 Feb",
                "sessionId": "session_123",
            }
        },
    )

    message: str = Field(..., min_length=1, description="User's message")
    session_id: str = Field(
        ..., min_length=1, alias="sessionId", description="Session identifier for conversation tracking"
    )


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"response": "✅ Your sick leave for 5 Feb has been noted."}}
    )

    response: str = Field(..., description="Assistant's reply")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    environment: str
    generation_circuit_breaker: dict


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting HR Buddy API")
    logger.info(f"Environment: {settings.environment}")

    # Loads reference data and creates the leave file if absent
    try:
        get_agent()
        logger.info("Agent initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize agent: {e}")

    yield

    logger.info("Shutting down HR Buddy API")


# Create FastAPI app
app = FastAPI(
    title="HR Buddy API",
    description="Conversational HR assistant for leave requests and policy questions",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def client_input_error_handler(request: Request, exc: RequestValidationError):
    """Missing or empty message/sessionId is a client error; nothing is touched."""
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": CLIENT_ERROR})


# API Endpoints


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {"message": "HR Buddy API", "version": "1.0.0", "docs": "/docs"}


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Returns service status and generation circuit breaker state.
    """
    return HealthResponse(
        status="healthy",
        environment=settings.environment,
        generation_circuit_breaker=get_agent().gateway.get_circuit_breaker_state(),
    )


@app.post("/chat", response_model=ChatResponse, tags=["Chat"])
async def chat(request: ChatRequest):
    """
    Chat with HR Buddy.

    Session memory (pending leave date, last topic, last answer) is kept
    per sessionId for the lifetime of the process.

    Example conversation:

    Request 1:
    ```json
    {"message": "Apply leave", "sessionId": "s2"}
    ```

    Response 1:
    ```json
    {"response": "Please specify the date you want to take the leave. ..."}
    ```

    Request 2 (same session):
    ```json
    {"message": "Feb 10", "sessionId": "s2"}
    ```

    Response 2:
    ```json
    {"response": "✅ Noted! Your leave for Feb 10 has been applied."}
    ```
    """
    try:
        logger.info(f"Chat request: session={request.session_id}")

        agent = get_agent()
        response_text = await agent.chat(message=request.message, session_id=request.session_id)

        return ChatResponse(response=response_text)

    except Exception as e:
        # Generation transport and leave-store failures end up here too
        logger.error(f"Error in /chat endpoint: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": SERVICE_ERROR}
        )


@app.get("/ready")
def ready():
    return {"status": "ready"}


@app.get("/metrics", tags=["Monitoring"])
async def metrics():
    """
    Monitoring snapshot.

    Returns:
    - Generation circuit breaker state
    - Active sessions
    - Stored leave records
    """
    agent = get_agent()

    return {
        "circuit_breaker": agent.gateway.get_circuit_breaker_state(),
        "active_sessions": len(agent.sessions),
        "leave_records": agent.leave_store.count(),
        "environment": settings.environment,
    }


if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
