"""
Notification dispatcher.

Moves e-mail delivery off the request path onto a bounded queue served
by a fixed pool of worker tasks. Every submission gets a job record
whose status and sent/failed counts can be read back while and after
it runs. A full queue refuses bulk sends with a 503; transactional
mails are logged and dropped so the write that triggered them still
succeeds.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from common.utils.exceptions import ServiceUnavailableException
from nhc.services.email.email_service import (
    EmailDeliveryError,
    EmailMessage,
    EmailService,
)

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SENT = "sent"
    PARTIAL = "partial"
    FAILED = "failed"


FINISHED_STATUSES = (JobStatus.SENT, JobStatus.PARTIAL, JobStatus.FAILED)


@dataclass
class MailJob:
    kind: str
    recipients: List[str]
    message: EmailMessage
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.QUEUED
    sent: int = 0
    failed: int = 0
    failed_recipients: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "subject": self.message.subject,
            "status": self.status.value,
            "recipients": len(self.recipients),
            "sent": self.sent,
            "failed": self.failed,
            "failedRecipients": list(self.failed_recipients),
            "createdAt": self.created_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }


class NotificationDispatcher:
    """
    Bounded background mail queue.
    """

    def __init__(
        self,
        email_service: EmailService,
        max_queue_size: int = 500,
        workers: int = 2,
        bulk_delay: float = 0.25,
        max_tracked_jobs: int = 1000,
    ):
        """
        Initialize NotificationDispatcher.

        Args:
            email_service: Renders and delivers messages
            max_queue_size: Jobs waiting before submissions are refused
            workers: Concurrent worker tasks
            bulk_delay: Pause between recipients of a multi-recipient job
            max_tracked_jobs: Finished job records kept for status queries
        """
        self._email_service = email_service
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._worker_count = max(1, workers)
        self._bulk_delay = bulk_delay
        self._max_tracked_jobs = max_tracked_jobs
        self._jobs: "OrderedDict[str, MailJob]" = OrderedDict()
        self._workers: List[asyncio.Task] = []

    @property
    def email_service(self) -> EmailService:
        return self._email_service

    @property
    def is_running(self) -> bool:
        return any(not w.done() for w in self._workers)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def start(self) -> None:
        if self.is_running:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"mail-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info(f"Notification dispatcher started with {self._worker_count} workers")

    async def stop(self, timeout: float = 30.0) -> None:
        """Drain queued jobs (up to timeout), then stop the workers."""
        if not self._workers:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Notification dispatcher stopped with {self._queue.qsize()} jobs still queued")

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Notification dispatcher stopped")

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        await self._queue.join()

    # ─────────────────────────────────────────────────────────────────
    # Submission
    # ─────────────────────────────────────────────────────────────────

    def submit(self, kind: str, recipients: List[str], message: EmailMessage) -> MailJob:
        """
        Queue a message for one or more recipients.

        Raises:
            ServiceUnavailableException: The queue is full
        """
        job = MailJob(kind=kind, recipients=list(recipients), message=message)
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.error(f"Mail queue full, refusing {kind} job for {len(recipients)} recipients")
            raise ServiceUnavailableException(
                message="Too many e-mails are waiting to be sent. Please try again later.",
                code="MAIL_QUEUE_FULL",
                retry_after=60,
            )

        self._track(job)
        logger.debug(f"Queued {kind} mail job {job.id} for {len(recipients)} recipients")
        return job

    def get_job(self, job_id: str) -> Optional[MailJob]:
        return self._jobs.get(job_id)

    def _notify(self, kind: str, recipient: str, message: EmailMessage) -> Optional[MailJob]:
        """
        Queue a transactional mail whose triggering write has already
        happened. A full queue drops the mail rather than failing the request.
        """
        try:
            return self.submit(kind, [recipient], message)
        except ServiceUnavailableException:
            logger.warning(f"Dropped {kind} mail to {recipient}: mail queue full")
            return None

    def send_verification(self, user: dict) -> Optional[MailJob]:
        message = self._email_service.verification_message(user.get("firstName"), user["code"])
        return self._notify("verification", user["email"], message)

    def send_registration_confirmation(self, user: dict) -> Optional[MailJob]:
        message = self._email_service.registration_message(
            user.get("firstName"),
            user.get("family"),
            user.get("donation"),
        )
        return self._notify("registration", user["email"], message)

    def send_password_reset(self, user: dict) -> Optional[MailJob]:
        message = self._email_service.reset_password_message(user.get("firstName"), user["resetCode"])
        return self._notify("reset_password", user["email"], message)

    def send_bulk(self, recipients: List[str], subject: str, body: str) -> MailJob:
        """
        Raises:
            ServiceUnavailableException: The queue is full
        """
        message = self._email_service.announcement_message(subject, body)
        return self.submit("bulk", recipients, message)

    # ─────────────────────────────────────────────────────────────────
    # Workers
    # ─────────────────────────────────────────────────────────────────

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._run(job)
            except Exception as e:
                job.status = JobStatus.FAILED
                job.finished_at = datetime.now(timezone.utc)
                logger.error(f"Mail worker {index} crashed on job {job.id}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _run(self, job: MailJob) -> None:
        job.status = JobStatus.RUNNING
        last = len(job.recipients) - 1

        for i, recipient in enumerate(job.recipients):
            try:
                await self._email_service.send_mail(recipient, job.message)
                job.sent += 1
            except EmailDeliveryError:
                job.failed += 1
                job.failed_recipients.append(recipient)

            if i < last and self._bulk_delay:
                await asyncio.sleep(self._bulk_delay)

        if job.failed == 0:
            job.status = JobStatus.SENT
        elif job.sent == 0:
            job.status = JobStatus.FAILED
        else:
            job.status = JobStatus.PARTIAL
        job.finished_at = datetime.now(timezone.utc)

        logger.info(
            f"Finished {job.kind} mail job {job.id}: {job.sent} sent, "
            f"{job.failed} errors, {len(job.recipients)} recipients, subject={job.message.subject!r}"
        )

    def _track(self, job: MailJob) -> None:
        self._jobs[job.id] = job
        # Forget the oldest finished jobs once over the limit
        while len(self._jobs) > self._max_tracked_jobs:
            oldest_id = next(
                (job_id for job_id, j in self._jobs.items() if j.is_finished),
                None,
            )
            if oldest_id is None:
                break
            del self._jobs[oldest_id]
