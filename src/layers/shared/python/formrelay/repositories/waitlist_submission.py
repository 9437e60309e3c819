"""Waitlist submission repository for DynamoDB operations."""

from datetime import datetime

import structlog

from formrelay.models.submission import WaitlistStatus, WaitlistSubmission
from formrelay.repositories.base import BaseRepository
from formrelay.utils.exceptions import NotFoundError

logger = structlog.get_logger()

LIST_PK = "WAITLIST_SUBMISSIONS"


class WaitlistSubmissionRepository(BaseRepository[WaitlistSubmission]):
    """Repository for WaitlistSubmission entities."""

    def __init__(self, table_name: str | None = None):
        """Initialize waitlist submission repository."""
        super().__init__(WaitlistSubmission, table_name)

    async def count(self, status: WaitlistStatus | str | None = WaitlistStatus.ACTIVE) -> int:
        """Count waitlist submissions with the given status (all when None)."""
        if status is None:
            return await self.count_items(pk=LIST_PK, index_name="GSI1")

        return await self.count_items(
            pk=LIST_PK,
            index_name="GSI1",
            filter_expression="#status = :status",
            expression_names={"#status": "status"},
            expression_values={":status": WaitlistStatus(status).value},
        )

    async def create_submission(
        self,
        email: str,
        name: str | None = None,
        status: WaitlistStatus | str = WaitlistStatus.ACTIVE,
        submitted_at: datetime | None = None,
    ) -> WaitlistSubmission:
        """Persist a new waitlist signup.

        The position is read from the active count before the write. The two
        steps are not atomic: concurrent signups can receive the same
        position.

        Args:
            email: Submitter email (normalized by the model).
            name: Optional submitter name.
            status: Initial status.
            submitted_at: Creation time. Defaults to now.

        Returns:
            The persisted submission.
        """
        position = await self.count(WaitlistStatus.ACTIVE) + 1

        fields = {"email": email, "name": name, "status": status, "position": position}
        if submitted_at is not None:
            fields["submitted_at"] = submitted_at

        submission = await self.create(WaitlistSubmission(**fields))
        logger.debug("Waitlist position assigned", submission_id=submission.id, position=position)
        return submission

    async def find_by_email(self, email: str) -> WaitlistSubmission | None:
        """Get the waitlist submission for an email, if any.

        Args:
            email: The email address.

        Returns:
            WaitlistSubmission or None if not found.
        """
        items = await self.query(pk=f"WAITLIST#{email.strip().lower()}", limit=1)
        return items[0] if items else None

    async def list_all(
        self,
        status: WaitlistStatus | str | None = None,
        limit: int = 100,
    ) -> list[WaitlistSubmission]:
        """List waitlist submissions by position, lowest first.

        Args:
            status: Optional status filter.
            limit: Maximum submissions to return.
        """
        if status is None:
            return await self.query(pk=LIST_PK, index_name="GSI1", limit=limit)

        return await self.query(
            pk=LIST_PK,
            index_name="GSI1",
            limit=limit,
            filter_expression="#status = :status",
            expression_names={"#status": "status"},
            expression_values={":status": WaitlistStatus(status).value},
        )

    async def update_status(
        self,
        submission_id: str,
        email: str,
        status: WaitlistStatus | str,
    ) -> WaitlistSubmission:
        """Move a signup to a new status. The position never changes.

        Raises:
            NotFoundError: If the submission does not exist.
            ValueError: If the status is not a waitlist status.
        """
        new_status = WaitlistStatus(status)
        submission = await self.get(
            pk=f"WAITLIST#{email.strip().lower()}",
            sk=f"SUBMISSION#{submission_id}",
        )
        if submission is None:
            raise NotFoundError("WaitlistSubmission", submission_id)

        submission.status = new_status
        return await self.update(submission)
