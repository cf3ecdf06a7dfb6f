"""Submission Gateway: sends the finished answer set to the backend.

One POST, no retry. What happens when that POST fails is a policy choice:

  FailurePolicy.SILENT_DEGRADE  (default)
      The user still reaches the completion screen and is told their data
      was saved. Nothing exists server-side; the payload is kept under
      `pendingSubmission` in the store and a warning is logged so the lead
      can be reconciled later.
  FailurePolicy.RAISE
      Same bookkeeping, then SubmissionFailedError is raised.

Contact fields are persisted locally on both the success and failure paths.
"""

import enum
import json
import logging
import time
from dataclasses import dataclass, field

import httpx

from mortgage_funnel.config import settings
from mortgage_funnel.wizard.answers import AnswerSet
from mortgage_funnel.wizard.errors import MissingFieldsError, SubmissionFailedError
from mortgage_funnel.wizard.flow import ENTRY_PATH, FlowRouter
from mortgage_funnel.wizard.session import PENDING_SUBMISSION_KEY, SESSION_KEY
from mortgage_funnel.wizard.store import SessionStore

logger = logging.getLogger(__name__)

CREATE_APPLICATION_PATH = "/api/landing/application/create"

SAVED_LOCALLY_MESSAGE = (
    "There was an issue submitting your application. "
    "Your data has been saved and we will contact you soon."
)


class FailurePolicy(str, enum.Enum):
    SILENT_DEGRADE = "silent_degrade"
    RAISE = "raise"


@dataclass
class SubmissionResult:
    submitted: bool
    next_path: str
    application_id: str | None = None
    tracking_number: str | None = None
    message: str | None = None
    payload: dict = field(default_factory=dict)


class SubmissionGateway:
    def __init__(
        self,
        store: SessionStore,
        client: httpx.Client | None = None,
        api_base_url: str | None = None,
        failure_policy: FailurePolicy | str | None = None,
        router: FlowRouter | None = None,
    ):
        self.store = store
        self.api_base_url = (api_base_url or settings.api_base_url).rstrip("/")
        # An injected client belongs to the caller and is never closed here
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=settings.submission_timeout_seconds)
        self.failure_policy = FailurePolicy(failure_policy or settings.submission_failure_policy)
        self.router = router or FlowRouter()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "SubmissionGateway":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def endpoint(self) -> str:
        return f"{self.api_base_url}{CREATE_APPLICATION_PATH}"

    def _session_id(self) -> str | None:
        try:
            record = json.loads(self.store.get(SESSION_KEY) or "null")
        except ValueError:
            return None
        return record.get("id") if isinstance(record, dict) else None

    def _persist_contact(self, answers: AnswerSet) -> None:
        for key, value in answers.contact_details().items():
            self.store.set(key, value)

    def submit(self, answers: AnswerSet) -> SubmissionResult:
        payload = answers.to_payload()
        missing = answers.missing_required()
        if missing:
            logger.warning(f"Submission aborted, missing required fields: {missing}")
            raise MissingFieldsError(missing)

        complete_path = (
            self.router.complete_path(answers.loan_type) if answers.loan_type else ENTRY_PATH
        )

        headers = {"Content-Type": "application/json"}
        session_id = self._session_id()
        if session_id:
            headers["X-Landing-Session"] = session_id

        status_code = None
        try:
            response = self.client.post(self.endpoint, json=payload, headers=headers)
            status_code = response.status_code
            body = response.json()
            if response.is_success and body.get("success"):
                data = body.get("data") or {}
                application_id = str(data["id"])
                self.store.set("applicationId", application_id)
                self._persist_contact(answers)
                self.store.delete(PENDING_SUBMISSION_KEY)
                logger.info(f"Application submitted: {application_id}")
                return SubmissionResult(
                    submitted=True,
                    next_path=complete_path,
                    application_id=application_id,
                    tracking_number=data.get("trackingNumber"),
                    payload=payload,
                )
            error = body.get("message") or f"HTTP {status_code}"
        except (httpx.HTTPError, ValueError, KeyError, AttributeError) as e:
            error = str(e) or e.__class__.__name__

        return self._handle_failure(answers, payload, error, status_code, complete_path)

    def _handle_failure(
        self,
        answers: AnswerSet,
        payload: dict,
        error: str,
        status_code: int | None,
        complete_path: str,
    ) -> SubmissionResult:
        self._persist_contact(answers)
        self.store.set(PENDING_SUBMISSION_KEY, json.dumps({
            "payload": payload,
            "error": error,
            "statusCode": status_code,
            "failedAt": int(time.time() * 1000),
        }))
        logger.warning(
            f"Application submission failed ({error}); cached locally for reconciliation",
            extra={"status_code": status_code, "loan_type": payload.get("loanType")},
        )

        if self.failure_policy == FailurePolicy.RAISE:
            raise SubmissionFailedError(error, status_code=status_code)

        return SubmissionResult(
            submitted=False,
            next_path=complete_path,
            message=SAVED_LOCALLY_MESSAGE,
            payload=payload,
        )

    def pending_submission(self) -> dict | None:
        """The locally cached payload of the last failed submission, if any."""
        raw = self.store.get(PENDING_SUBMISSION_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("Unreadable pending submission record")
            return None
