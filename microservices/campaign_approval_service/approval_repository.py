"""
Campaign Approval Data Repository

Data access layer - PostgreSQL (asyncpg)

Every status write is conditional on the prior status (and, when given, the
version read by the caller). A write that matches no row means another
request got there first.
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

import asyncpg
from pydantic import BaseModel

from core.config_manager import ConfigManager
from core.postgres_client import PostgresClientWrapper, TransactionConnection

from .models import (
    ApprovalRecord,
    ApprovalStatus,
    Campaign,
    CampaignStatus,
    Creative,
    PlatformOutcome,
    PlatformSelection,
)
from .protocols import ConflictError

logger = logging.getLogger(__name__)


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, datetime, enum and pydantic types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal, datetime and model support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


def _json_value(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


class CampaignApprovalRepository:
    """Campaign approval data repository - PostgreSQL (asyncpg)"""

    # Columns a conditional update may touch
    UPDATABLE_COLUMNS = frozenset({
        "name",
        "budget",
        "platform",
        "target_audience",
        "objectives",
        "creatives",
        "landing_page_slug",
        "meta_campaign_id",
        "google_campaign_id",
    })
    JSON_COLUMNS = frozenset({"objectives", "creatives"})

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[PostgresClientWrapper] = None):
        if config is None:
            config = ConfigManager("campaign_approval_service")

        self.db = db or PostgresClientWrapper(service_name=config.service_name)
        self.schema = "campaign_approval"

        # Table names
        self.campaigns_table = "campaigns"
        self.approvals_table = "approval_records"

    async def initialize(self):
        """Initialize database connection"""
        await self.db.connect()
        logger.info("Campaign approval repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Campaign approval repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        try:
            return await self.db.health_check()
        except Exception as e:
            logger.error(f"Repository health check failed: {e}")
            return False

    # ====================
    # Campaign Operations
    # ====================

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.campaigns_table}
                WHERE campaign_id = $1
            '''
            row = await self.db.query_row(query, [campaign_id])
            return self._row_to_campaign(row) if row else None

        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise

    async def list_campaigns_by_status(self, status: CampaignStatus) -> List[Campaign]:
        """List every campaign in a status"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.campaigns_table}
                WHERE status = $1
                ORDER BY created_at ASC
            '''
            rows = await self.db.query(query, [status.value])
            return [self._row_to_campaign(row) for row in rows]

        except Exception as e:
            logger.error(f"Error listing {status.value} campaigns: {e}")
            raise

    async def compare_and_set_status(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Optional[Campaign]:
        """Conditionally move a campaign to a new status"""
        try:
            return await self._compare_and_set(
                self.db, campaign_id, expected_status, new_status, expected_version, updates
            )
        except Exception as e:
            logger.error(f"Error updating campaign {campaign_id} status: {e}")
            raise

    async def _compare_and_set(
        self,
        conn,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int],
        updates: Optional[Dict[str, Any]],
    ) -> Optional[Campaign]:
        set_clauses = ["status = $1", "version = version + 1", "updated_at = $2"]
        params: List[Any] = [new_status.value, datetime.now(timezone.utc)]

        for key, value in (updates or {}).items():
            if key not in self.UPDATABLE_COLUMNS:
                raise ValueError(f"Column not updatable: {key}")
            params.append(self._to_db_value(key, value))
            cast = "::jsonb" if key in self.JSON_COLUMNS else ""
            set_clauses.append(f"{key} = ${len(params)}{cast}")

        params.append(campaign_id)
        where = [f"campaign_id = ${len(params)}"]
        params.append(expected_status.value)
        where.append(f"status = ${len(params)}")
        if expected_version is not None:
            params.append(expected_version)
            where.append(f"version = ${len(params)}")

        query = f'''
            UPDATE {self.schema}.{self.campaigns_table}
            SET {", ".join(set_clauses)}
            WHERE {" AND ".join(where)}
            RETURNING *
        '''
        row = await conn.query_row(query, params)
        return self._row_to_campaign(row) if row else None

    # ====================
    # Approval Record Operations
    # ====================

    async def create_submission(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        expected_version: int,
    ) -> Campaign:
        """Open an approval record and move the campaign to PENDING_REVIEW atomically"""
        try:
            async with self.db.transaction() as tx:
                campaign = await self._compare_and_set(
                    tx,
                    record.campaign_id,
                    expected_status,
                    CampaignStatus.PENDING_REVIEW,
                    expected_version,
                    None,
                )
                if campaign is None:
                    raise ConflictError(f"Campaign {record.campaign_id} changed during submission")

                await self._insert_approval(tx, record)

            return campaign

        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Campaign {record.campaign_id} already has an open approval request")
        except ConflictError:
            raise
        except Exception as e:
            logger.error(f"Error creating submission for {record.campaign_id}: {e}", exc_info=True)
            raise

    async def close_review(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Campaign:
        """Close an open approval record and transition its campaign atomically"""
        try:
            async with self.db.transaction() as tx:
                closed = await tx.query_row(
                    f'''
                        UPDATE {self.schema}.{self.approvals_table}
                        SET status = $1, reviewed_at = $2, reviewer_id = $3,
                            feedback = $4, reason_codes = $5::jsonb,
                            platform_results = $6::jsonb
                        WHERE approval_id = $7 AND reviewed_at IS NULL
                        RETURNING approval_id
                    ''',
                    [
                        record.status.value,
                        record.reviewed_at or datetime.now(timezone.utc),
                        record.reviewer_id,
                        record.feedback,
                        json_dumps(record.reason_codes),
                        json_dumps(record.platform_results),
                        record.approval_id,
                    ],
                )
                if closed is None:
                    raise ConflictError(f"Approval {record.approval_id} was already reviewed")

                campaign = await self._compare_and_set(
                    tx,
                    record.campaign_id,
                    expected_status,
                    new_status,
                    expected_version,
                    updates,
                )
                if campaign is None:
                    raise ConflictError(f"Campaign {record.campaign_id} changed during review")

            return campaign

        except ConflictError:
            raise
        except Exception as e:
            logger.error(f"Error closing approval {record.approval_id}: {e}", exc_info=True)
            raise

    async def _insert_approval(self, conn: TransactionConnection, record: ApprovalRecord) -> None:
        query = f'''
            INSERT INTO {self.schema}.{self.approvals_table} (
                approval_id, campaign_id, owner_id, submitted_at, reviewed_at,
                status, reviewer_id, feedback, reason_codes, review_snapshot,
                platform_results
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb, $10::jsonb, $11::jsonb
            )
        '''
        await conn.execute(query, [
            record.approval_id,
            record.campaign_id,
            record.owner_id,
            record.submitted_at,
            record.reviewed_at,
            record.status.value,
            record.reviewer_id,
            record.feedback,
            json_dumps(record.reason_codes),
            json_dumps(record.review_snapshot),
            json_dumps(record.platform_results),
        ])

    async def get_open_approval(self, campaign_id: str) -> Optional[ApprovalRecord]:
        """Get the approval record awaiting review, if any"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.approvals_table}
                WHERE campaign_id = $1 AND reviewed_at IS NULL
            '''
            row = await self.db.query_row(query, [campaign_id])
            return self._row_to_approval(row) if row else None

        except Exception as e:
            logger.error(f"Error getting open approval for {campaign_id}: {e}")
            raise

    async def get_latest_approval(
        self,
        campaign_id: str,
        status: Optional[ApprovalStatus] = None,
    ) -> Optional[ApprovalRecord]:
        """Get the most recent approval record, optionally filtered by status"""
        try:
            params: List[Any] = [campaign_id]
            status_clause = ""
            if status is not None:
                params.append(status.value)
                status_clause = "AND status = $2"

            query = f'''
                SELECT * FROM {self.schema}.{self.approvals_table}
                WHERE campaign_id = $1 {status_clause}
                ORDER BY submitted_at DESC
                LIMIT 1
            '''
            row = await self.db.query_row(query, params)
            return self._row_to_approval(row) if row else None

        except Exception as e:
            logger.error(f"Error getting latest approval for {campaign_id}: {e}")
            raise

    async def list_approvals(self, campaign_id: str) -> List[ApprovalRecord]:
        """List approval records for a campaign, newest first"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.approvals_table}
                WHERE campaign_id = $1
                ORDER BY submitted_at DESC
            '''
            rows = await self.db.query(query, [campaign_id])
            return [self._row_to_approval(row) for row in rows]

        except Exception as e:
            logger.error(f"Error listing approvals for {campaign_id}: {e}")
            raise

    async def list_open_approvals(self) -> List[ApprovalRecord]:
        """List all approval records awaiting review"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.approvals_table}
                WHERE reviewed_at IS NULL
                ORDER BY submitted_at ASC
            '''
            rows = await self.db.query(query)
            return [self._row_to_approval(row) for row in rows]

        except Exception as e:
            logger.error(f"Error listing open approvals: {e}")
            raise

    async def list_approvals_since(self, since: datetime) -> List[ApprovalRecord]:
        """List approval records submitted at or after ``since``"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.approvals_table}
                WHERE submitted_at >= $1
                ORDER BY submitted_at DESC
            '''
            rows = await self.db.query(query, [since])
            return [self._row_to_approval(row) for row in rows]

        except Exception as e:
            logger.error(f"Error listing approvals since {since.isoformat()}: {e}")
            raise

    # ====================
    # Row Mapping
    # ====================

    def _to_db_value(self, key: str, value: Any) -> Any:
        if key in self.JSON_COLUMNS:
            return json_dumps(value)
        if isinstance(value, Enum):
            return value.value
        if key == "budget":
            return Decimal(str(value))
        return value

    def _row_to_campaign(self, row: Dict[str, Any]) -> Campaign:
        """Convert database row to Campaign model"""
        creatives = _json_value(row.get("creatives"), [])
        objectives = _json_value(row.get("objectives"), [])

        return Campaign(
            campaign_id=row["campaign_id"],
            owner_id=row["owner_id"],
            organization_id=row.get("organization_id"),
            name=row["name"],
            platform=PlatformSelection(row["platform"]),
            budget=Decimal(str(row["budget"])),
            target_audience=row.get("target_audience") or "",
            objectives=objectives,
            creatives=[Creative(**c) for c in creatives],
            landing_page_slug=row.get("landing_page_slug"),
            status=CampaignStatus(row["status"]),
            meta_campaign_id=row.get("meta_campaign_id"),
            google_campaign_id=row.get("google_campaign_id"),
            version=row.get("version") or 1,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_approval(self, row: Dict[str, Any]) -> ApprovalRecord:
        """Convert database row to ApprovalRecord model"""
        platform_results = _json_value(row.get("platform_results"), {})

        return ApprovalRecord(
            approval_id=row["approval_id"],
            campaign_id=row["campaign_id"],
            owner_id=row["owner_id"],
            submitted_at=row["submitted_at"],
            reviewed_at=row.get("reviewed_at"),
            status=ApprovalStatus(row["status"]),
            reviewer_id=row.get("reviewer_id"),
            feedback=row.get("feedback"),
            reason_codes=_json_value(row.get("reason_codes"), []),
            review_snapshot=_json_value(row.get("review_snapshot"), {}),
            platform_results={
                key: PlatformOutcome(**value) for key, value in platform_results.items()
            },
        )


__all__ = ["CampaignApprovalRepository", "json_dumps"]
