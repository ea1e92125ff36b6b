"""
Campaign Validator

Pure checks run before submission and on every owner edit. No I/O; the
same snapshot always yields the same result.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from .models import (
    AdPlatform,
    Campaign,
    CampaignStatus,
    TERMINAL_STATUSES,
    ValidationResult,
)

MIN_NAME_LENGTH = 3
MIN_TARGET_AUDIENCE_LENGTH = 10
MIN_HEADLINE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 10

MIN_BUDGET = Decimal("100")
MAX_BUDGET = Decimal("1000000")
HIGH_BUDGET_WARNING = Decimal("50000")

PROHIBITED_TERMS = (
    "guaranteed cure",
    "miracle treatment",
    "instant results",
    "diagnose",
    "prescription",
    "medical advice",
    "cheapest",
    "best therapist",
    "only solution",
)

# Frozen while live; every field is frozen while pending review
LOCKED_FIELDS = ("budget", "platform", "target_audience", "objectives", "creatives")
LOCKED_STATUSES = frozenset({
    CampaignStatus.PENDING_REVIEW,
    CampaignStatus.ACTIVE,
    CampaignStatus.PAUSED,
})


def _budget_errors(budget: Decimal) -> List[str]:
    if budget < MIN_BUDGET:
        return [f"Minimum budget is {MIN_BUDGET}"]
    if budget > MAX_BUDGET:
        return [f"Maximum budget is {MAX_BUDGET}"]
    return []


def _campaign_text(campaign: Campaign) -> Iterable[str]:
    yield campaign.name
    yield campaign.target_audience
    yield from campaign.objectives
    for creative in campaign.creatives:
        yield creative.headline
        yield creative.description
        yield creative.call_to_action or ""


def find_prohibited_terms(campaign: Campaign) -> List[str]:
    """Prohibited advertising terms present anywhere in the campaign copy"""
    text = " ".join(_campaign_text(campaign)).lower()
    return [term for term in PROHIBITED_TERMS if term in text]


def validate_campaign(campaign: Campaign) -> ValidationResult:
    """Check a campaign is complete enough to go to human review"""
    errors: List[str] = []
    warnings: List[str] = []

    if len(campaign.name.strip()) < MIN_NAME_LENGTH:
        errors.append(f"Campaign name must be at least {MIN_NAME_LENGTH} characters long")

    if len(campaign.target_audience.strip()) < MIN_TARGET_AUDIENCE_LENGTH:
        errors.append(
            f"Target audience description must be at least {MIN_TARGET_AUDIENCE_LENGTH} characters"
        )

    if not [o for o in campaign.objectives if o.strip()]:
        errors.append("At least one campaign objective is required")

    errors.extend(_budget_errors(campaign.budget))
    if campaign.budget > HIGH_BUDGET_WARNING and campaign.budget <= MAX_BUDGET:
        warnings.append("High budget campaigns require additional review time")

    if not campaign.creatives:
        # Paid search cannot serve without ad copy
        if campaign.platform.includes(AdPlatform.GOOGLE):
            errors.append("Google campaigns require at least one creative with a headline and description")
        else:
            warnings.append("No creatives found - campaign will use default text only")

    for index, creative in enumerate(campaign.creatives, start=1):
        if len(creative.headline.strip()) < MIN_HEADLINE_LENGTH:
            errors.append(f"Creative {index}: Headline must be at least {MIN_HEADLINE_LENGTH} characters")
        if len(creative.description.strip()) < MIN_DESCRIPTION_LENGTH:
            errors.append(
                f"Creative {index}: Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
            )

    prohibited = find_prohibited_terms(campaign)
    if prohibited:
        errors.append(f"Campaign contains prohibited advertising content: {', '.join(prohibited)}")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_update(campaign: Campaign, changes: Dict[str, Any]) -> ValidationResult:
    """Check an owner edit against the campaign's current status"""
    errors: List[str] = []

    if campaign.status in TERMINAL_STATUSES:
        return ValidationResult(
            valid=False,
            errors=[f"Campaign is {campaign.status.value} and can no longer be edited"],
        )

    if campaign.status == CampaignStatus.PENDING_REVIEW:
        locked = list(changes)
    elif campaign.status in LOCKED_STATUSES:
        locked = [field for field in LOCKED_FIELDS if field in changes]
    else:
        locked = []
    for field in locked:
        errors.append(f"Field '{field}' cannot be changed while campaign is {campaign.status.value}")

    if "name" in changes and len(str(changes["name"]).strip()) < MIN_NAME_LENGTH:
        errors.append(f"Campaign name must be at least {MIN_NAME_LENGTH} characters long")

    if "budget" in changes and changes["budget"] is not None:
        errors.extend(_budget_errors(Decimal(str(changes["budget"]))))

    return ValidationResult(valid=not errors, errors=errors)


__all__ = [
    "validate_campaign",
    "validate_update",
    "find_prohibited_terms",
    "LOCKED_FIELDS",
    "LOCKED_STATUSES",
    "MIN_BUDGET",
    "MAX_BUDGET",
    "PROHIBITED_TERMS",
]
