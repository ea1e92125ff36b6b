"""
Campaign Approval Service Routes Registry

Defines service metadata and the routes this service exposes.
"""

SERVICE_METADATA = {
    "service_name": "campaign_approval_service",
    "version": "1.0.0",
    "tags": ['campaign', 'approval', 'ads', 'v1'],
    "capabilities": ['campaign_review', 'platform_launch', 'bulk_operations'],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/health/ready", "methods": ["GET"], "description": "Readiness check"},
    {"path": "/health/live", "methods": ["GET"], "description": "Liveness check"},
    {"path": "/info", "methods": ["GET"], "description": "Service metadata and routes"},
    {"path": "/api/v1/campaigns/{campaign_id}", "methods": ["GET", "PATCH"], "description": "Read or edit a campaign"},
    {"path": "/api/v1/campaigns/{campaign_id}/submit", "methods": ["POST"], "description": "Submit for review"},
    {"path": "/api/v1/campaigns/{campaign_id}/approve", "methods": ["POST"], "description": "Approve and launch"},
    {"path": "/api/v1/campaigns/{campaign_id}/reject", "methods": ["POST"], "description": "Reject or request changes"},
    {"path": "/api/v1/campaigns/{campaign_id}/pause", "methods": ["POST"], "description": "Pause on all platforms"},
    {"path": "/api/v1/campaigns/{campaign_id}/activate", "methods": ["POST"], "description": "Re-enable on all platforms"},
    {"path": "/api/v1/campaigns/{campaign_id}/complete", "methods": ["POST"], "description": "Complete a live campaign"},
    {"path": "/api/v1/campaigns/{campaign_id}/cancel", "methods": ["POST"], "description": "Cancel a live campaign"},
    {"path": "/api/v1/campaigns/{campaign_id}/approvals", "methods": ["GET"], "description": "Approval history"},
    {"path": "/api/v1/campaigns/bulk", "methods": ["POST"], "description": "Bulk lifecycle operation"},
    {"path": "/api/v1/approvals/pending", "methods": ["GET"], "description": "Review queue"},
    {"path": "/api/v1/approvals/stats", "methods": ["GET"], "description": "Approval statistics"},
    {"path": "/api/v1/approvals/bulk-approve", "methods": ["POST"], "description": "Bulk approve"},
]


def get_route_summary():
    """Route metadata published on the service info endpoint"""
    return {
        "route_count": len(ROUTES),
        "routes": [r["path"] for r in ROUTES],
        "api_version": "v1",
        "base_path": "/api/v1",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
