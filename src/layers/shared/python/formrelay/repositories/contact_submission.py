"""Contact submission repository for DynamoDB operations."""

from datetime import datetime

from formrelay.models.submission import ContactStatus, ContactSubmission
from formrelay.repositories.base import BaseRepository
from formrelay.utils.exceptions import NotFoundError

LIST_PK = "CONTACT_SUBMISSIONS"


class ContactSubmissionRepository(BaseRepository[ContactSubmission]):
    """Repository for ContactSubmission entities."""

    def __init__(self, table_name: str | None = None):
        """Initialize contact submission repository."""
        super().__init__(ContactSubmission, table_name)

    async def create_submission(
        self,
        name: str,
        email: str,
        message: str,
        status: ContactStatus | str = ContactStatus.NEW,
        submitted_at: datetime | None = None,
    ) -> ContactSubmission:
        """Persist a new contact submission with a fresh ID.

        Args:
            name: Submitter name.
            email: Submitter email (normalized by the model).
            message: Message body.
            status: Initial status.
            submitted_at: Creation time. Defaults to now.

        Returns:
            The persisted submission.
        """
        fields = {"name": name, "email": email, "message": message, "status": status}
        if submitted_at is not None:
            fields["submitted_at"] = submitted_at
        return await self.create(ContactSubmission(**fields))

    async def get_by_id(self, submission_id: str, email: str) -> ContactSubmission | None:
        """Get a contact submission by ID.

        Args:
            submission_id: The submission ID.
            email: Submitter email, used as the partition hint.

        Returns:
            ContactSubmission or None if not found.
        """
        return await self.get(
            pk=f"CONTACT#{email.strip().lower()}",
            sk=f"SUBMISSION#{submission_id}",
        )

    async def list_all(
        self,
        status: ContactStatus | str | None = None,
        limit: int = 100,
    ) -> list[ContactSubmission]:
        """List contact submissions, newest first.

        Args:
            status: Optional status filter.
            limit: Maximum submissions to return.
        """
        if status is None:
            return await self.query(pk=LIST_PK, index_name="GSI1", limit=limit, scan_forward=False)

        return await self.query(
            pk=LIST_PK,
            index_name="GSI1",
            limit=limit,
            scan_forward=False,
            filter_expression="#status = :status",
            expression_names={"#status": "status"},
            expression_values={":status": ContactStatus(status).value},
        )

    async def count(self, status: ContactStatus | str | None = None) -> int:
        """Count contact submissions, optionally by status."""
        if status is None:
            return await self.count_items(pk=LIST_PK, index_name="GSI1")

        return await self.count_items(
            pk=LIST_PK,
            index_name="GSI1",
            filter_expression="#status = :status",
            expression_names={"#status": "status"},
            expression_values={":status": ContactStatus(status).value},
        )

    async def update_status(
        self,
        submission_id: str,
        email: str,
        status: ContactStatus | str,
    ) -> ContactSubmission:
        """Move a submission to a new status.

        Raises:
            NotFoundError: If the submission does not exist.
            ValueError: If the status is not a contact status.
        """
        new_status = ContactStatus(status)
        submission = await self.get_by_id(submission_id, email)
        if submission is None:
            raise NotFoundError("ContactSubmission", submission_id)

        submission.status = new_status
        return await self.update(submission)
