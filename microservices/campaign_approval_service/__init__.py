"""
Campaign Approval Service

Campaign lifecycle and multi-platform approval microservice providing:
- Submission to human review with validation and compliance checks
- Approve / reject / request changes with an append-only approval trail
- Synchronized launch, pause and activation on Meta and Google Ads
- Review queue with urgency scoring and approval statistics
- Bulk approve and bulk lifecycle operations

Port: 8252
"""

__version__ = "1.0.0"
__service__ = "campaign_approval_service"
