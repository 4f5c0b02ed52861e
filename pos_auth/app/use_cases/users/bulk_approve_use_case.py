"""
Bulk Approve Use Case

Applies one approval decision to several accounts. Each account goes through
ApproveUserUseCase on its own, so one refusal does not block the rest.
"""

import logging
from typing import List, Optional
from uuid import UUID

from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Result, Return
from .approve_user_use_case import ApproveUserUseCase
from .dtos import BulkApprovalFailure, BulkApprovalResponse

logger = logging.getLogger(__name__)


class BulkApproveUseCase:
    def __init__(self, approve_user: ApproveUserUseCase):
        self.approve_user = approve_user

    async def execute(
        self,
        user_ids: List[UUID],
        approve: bool,
        actor_id: str,
        actor_role: str,
        reason: Optional[str] = None,
    ) -> Result[BulkApprovalResponse]:
        succeeded: List[str] = []
        failed: List[BulkApprovalFailure] = []

        # Duplicates would be decided twice
        for user_id in dict.fromkeys(user_ids):
            result = await self.approve_user.execute(
                user_id, approve, actor_id, actor_role, reason
            )
            if result.is_ok():
                succeeded.append(str(user_id))
            else:
                failed.append(
                    BulkApprovalFailure(
                        user_id=str(user_id),
                        code=ErrorCode(result.error.code).value,
                        message=result.error.message,
                    )
                )

        logger.info(
            f"Bulk {'approval' if approve else 'rejection'} by {actor_role} {actor_id}: "
            f"{len(succeeded)} succeeded, {len(failed)} failed"
        )
        return Return.ok(
            BulkApprovalResponse(approved=approve, succeeded=succeeded, failed=failed)
        )
