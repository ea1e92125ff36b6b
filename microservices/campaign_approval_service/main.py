"""
Campaign Approval Service Main Application

FastAPI application for campaign review and multi-platform launch.
Port: 8252
"""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Depends, Request, status
from fastapi.responses import JSONResponse

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import LoggingConfig
from core.config_manager import ConfigManager

from .models import (
    Actor,
    ApprovalHistory,
    ApprovalResult,
    ApprovalStatistics,
    ApproveRequest,
    BulkApproveRequest,
    BulkOperationRequest,
    BulkOperationResult,
    Campaign,
    CampaignUpdateRequest,
    CancelRequest,
    HealthResponse,
    LifecycleResult,
    LivenessResponse,
    QueueOrdering,
    ReadinessResponse,
    RejectRequest,
    ReviewQueuePage,
    ReviewResult,
    SubmissionResult,
    UserRole,
)
from .factory import CampaignApprovalServiceFactory
from .routes_registry import SERVICE_METADATA, get_route_summary
from .protocols import (
    CampaignNotFoundError,
    ConflictError,
    ForbiddenError,
    InvalidCampaignStateError,
    PartialFailureError,
    PlatformAdapterError,
    ValidationFailedError,
)

# Configure logging
LoggingConfig.from_env().configure()
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = "campaign_approval_service"
SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8252"))
SERVICE_VERSION = "1.0.0"

# Track startup time for uptime calculation
startup_time = time.time()

# Global factory instance
factory: Optional[CampaignApprovalServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    # Initialize factory
    config = ConfigManager(SERVICE_NAME)
    factory = CampaignApprovalServiceFactory(config)
    await factory.initialize()

    yield

    # Cleanup
    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()


# Create FastAPI application
app = FastAPI(
    title="Campaign Approval Service",
    description="Campaign review queue, approval workflow and synchronized launch on Meta and Google Ads",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


@app.exception_handler(CampaignNotFoundError)
async def campaign_not_found_handler(request: Request, exc: CampaignNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(ValidationFailedError)
async def validation_failed_handler(request: Request, exc: ValidationFailedError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "errors": exc.errors, "warnings": exc.warnings},
    )


@app.exception_handler(InvalidCampaignStateError)
async def invalid_state_handler(request: Request, exc: InvalidCampaignStateError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "current_status": exc.current_status.value if exc.current_status else None,
        },
    )


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


@app.exception_handler(PartialFailureError)
async def partial_failure_handler(request: Request, exc: PartialFailureError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": str(exc),
            "platform_results": {
                platform.value: outcome.model_dump(mode="json")
                for platform, outcome in exc.outcomes.items()
            },
            "campaign": exc.campaign.model_dump(mode="json") if exc.campaign else None,
        },
    )


@app.exception_handler(PlatformAdapterError)
async def platform_error_handler(request: Request, exc: PlatformAdapterError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "error_type": exc.error_type},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "type": type(exc).__name__},
    )


# ====================
# Dependencies
# ====================


def _require_factory() -> CampaignApprovalServiceFactory:
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory


def get_orchestrator():
    """Get approval orchestrator from factory"""
    return _require_factory().orchestrator


def get_review_queue():
    """Get review queue service from factory"""
    return _require_factory().review_queue


def get_bulk_coordinator():
    """Get bulk operation coordinator from factory"""
    return _require_factory().bulk_coordinator


def get_actor(request: Request) -> Actor:
    """Extract the caller from gateway headers"""
    user_id = request.headers.get("X-User-ID")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )

    role_header = (request.headers.get("X-User-Role") or UserRole.CLIENT.value).lower()
    try:
        role = UserRole(role_header)
    except ValueError:
        role = UserRole.CLIENT

    return Actor(
        user_id=user_id,
        role=role,
        organization_id=request.headers.get("X-Organization-ID"),
    )


# ====================
# Health Endpoints
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"
        except Exception:
            dependencies["postgres"] = "unhealthy"

        if factory.nats_client:
            dependencies["nats"] = "healthy" if factory.nats_client.is_connected else "unhealthy"
        else:
            dependencies["nats"] = "not_configured"

        for adapter in factory.adapters:
            configured = adapter.config.is_configured
            dependencies[f"{adapter.platform.value}_ads"] = "configured" if configured else "not_configured"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", response_model=ReadinessResponse, tags=["Health"])
async def readiness_check():
    """Readiness check endpoint"""
    checks = {}
    details = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            checks["database"] = db_healthy
            details["database"] = "Connected" if db_healthy else "Connection failed"
        except Exception as e:
            checks["database"] = False
            details["database"] = str(e)

        if factory.nats_client:
            checks["nats"] = factory.nats_client.is_connected
            details["nats"] = "Connected" if factory.nats_client.is_connected else "Disconnected"
        else:
            checks["nats"] = True  # Optional
            details["nats"] = "Not configured (optional)"
    else:
        checks["factory"] = False
        details["factory"] = "Factory not initialized"

    ready = all(checks.get(k, False) for k in ["database"])

    return ReadinessResponse(
        ready=ready,
        checks=checks,
        details=details,
    )


@app.get("/health/live", response_model=LivenessResponse, tags=["Health"])
async def liveness_check():
    """Liveness check endpoint"""
    return LivenessResponse(
        alive=True,
        uptime_seconds=time.time() - startup_time,
    )


@app.get("/info", tags=["Health"])
async def service_info():
    """Service metadata and exposed routes"""
    return {**SERVICE_METADATA, **get_route_summary()}


# ====================
# Campaign Endpoints
# ====================


@app.get(
    "/api/v1/campaigns/{campaign_id}",
    response_model=Campaign,
    tags=["Campaigns"],
)
async def get_campaign(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Get campaign by ID"""
    return await orchestrator.get_campaign(campaign_id, actor)


@app.patch(
    "/api/v1/campaigns/{campaign_id}",
    response_model=Campaign,
    tags=["Campaigns"],
)
async def update_campaign(
    campaign_id: str,
    request: CampaignUpdateRequest,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """
    Edit a campaign.

    Budget, platform, audience, objectives and creatives are locked while
    the campaign is pending review or live.
    """
    return await orchestrator.update_campaign(campaign_id, actor, request.changes())


@app.get(
    "/api/v1/campaigns/{campaign_id}/approvals",
    response_model=ApprovalHistory,
    tags=["Campaigns"],
)
async def get_approval_history(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Approval records for a campaign, newest first"""
    return await orchestrator.get_approval_history(campaign_id, actor)


# ====================
# Review Workflow Endpoints
# ====================


@app.post(
    "/api/v1/campaigns/{campaign_id}/submit",
    response_model=SubmissionResult,
    tags=["Review"],
)
async def submit_campaign(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Submit a campaign for human review"""
    return await orchestrator.submit(campaign_id, actor.user_id)


@app.post(
    "/api/v1/campaigns/{campaign_id}/approve",
    response_model=ApprovalResult,
    tags=["Review"],
)
async def approve_campaign(
    campaign_id: str,
    request: Optional[ApproveRequest] = None,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """
    Approve a pending campaign and launch it on its platforms.

    Returns 502 with per-platform results when any platform fails; the
    campaign is then back in draft.
    """
    data = request.approval_data if request else None
    return await orchestrator.approve(campaign_id, actor, data)


@app.post(
    "/api/v1/campaigns/{campaign_id}/reject",
    response_model=ReviewResult,
    tags=["Review"],
)
async def reject_campaign(
    campaign_id: str,
    request: RejectRequest,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Reject a pending campaign or send it back for changes"""
    return await orchestrator.reject(
        campaign_id,
        actor,
        feedback=request.feedback,
        reasons=request.reasons,
        needs_changes=request.needs_changes,
    )


# ====================
# Lifecycle Endpoints
# ====================


@app.post(
    "/api/v1/campaigns/{campaign_id}/pause",
    response_model=LifecycleResult,
    tags=["Lifecycle"],
)
async def pause_campaign(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Pause a live campaign; platform failures come back as warnings"""
    return await orchestrator.pause(campaign_id, actor)


@app.post(
    "/api/v1/campaigns/{campaign_id}/activate",
    response_model=LifecycleResult,
    tags=["Lifecycle"],
)
async def activate_campaign(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Re-enable a paused campaign on every platform"""
    return await orchestrator.activate(campaign_id, actor)


@app.post(
    "/api/v1/campaigns/{campaign_id}/complete",
    response_model=LifecycleResult,
    tags=["Lifecycle"],
)
async def complete_campaign(
    campaign_id: str,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Complete a live campaign"""
    return await orchestrator.complete(campaign_id, actor)


@app.post(
    "/api/v1/campaigns/{campaign_id}/cancel",
    response_model=LifecycleResult,
    tags=["Lifecycle"],
)
async def cancel_campaign(
    campaign_id: str,
    request: Optional[CancelRequest] = None,
    orchestrator=Depends(get_orchestrator),
    actor: Actor = Depends(get_actor),
):
    """Cancel a live campaign"""
    reason = request.reason if request else None
    return await orchestrator.cancel(campaign_id, actor, reason)


@app.post(
    "/api/v1/campaigns/bulk",
    response_model=BulkOperationResult,
    tags=["Bulk"],
)
async def bulk_operation(
    request: BulkOperationRequest,
    coordinator=Depends(get_bulk_coordinator),
    actor: Actor = Depends(get_actor),
):
    """Pause, activate, complete or cancel up to 100 campaigns"""
    return await coordinator.run(request.operation, actor, request.campaign_ids, request.reason)


# ====================
# Review Queue Endpoints
# ====================


@app.get(
    "/api/v1/approvals/pending",
    response_model=ReviewQueuePage,
    tags=["Review Queue"],
)
async def get_pending_reviews(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    ordering: QueueOrdering = Query(QueueOrdering.URGENCY, description="urgency, high_budget or oldest"),
    review_queue=Depends(get_review_queue),
    actor: Actor = Depends(get_actor),
):
    """Pending campaigns ordered by urgency score"""
    return await review_queue.get_pending_reviews(actor, page=page, limit=limit, ordering=ordering)


@app.get(
    "/api/v1/approvals/stats",
    response_model=ApprovalStatistics,
    tags=["Review Queue"],
)
async def get_approval_statistics(
    timeframe_days: int = Query(30, ge=1, le=365, description="Look-back window in days"),
    review_queue=Depends(get_review_queue),
    actor: Actor = Depends(get_actor),
):
    """Approval throughput over the timeframe"""
    return await review_queue.get_approval_statistics(actor, timeframe_days=timeframe_days)


@app.post(
    "/api/v1/approvals/bulk-approve",
    response_model=BulkOperationResult,
    tags=["Bulk"],
)
async def bulk_approve(
    request: BulkApproveRequest,
    coordinator=Depends(get_bulk_coordinator),
    actor: Actor = Depends(get_actor),
):
    """Approve up to 10 campaigns; each item succeeds or fails on its own"""
    return await coordinator.bulk_approve(actor, request.campaign_ids, request.approval_data)


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.campaign_approval_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=os.getenv("ENV", "development") == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
