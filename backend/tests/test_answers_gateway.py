"""Tests for typed answer sets and the submission gateway."""

import json

import httpx
import pytest
from pydantic import ValidationError

from mortgage_funnel.wizard.answers import (
    InvestmentAnswers,
    PurchaseAnswers,
    RefinanceAnswers,
    load_answers,
)
from mortgage_funnel.wizard.errors import MissingFieldsError, SubmissionFailedError
from mortgage_funnel.wizard.gateway import (
    CREATE_APPLICATION_PATH,
    SAVED_LOCALLY_MESSAGE,
    FailurePolicy,
    SubmissionGateway,
)
from mortgage_funnel.wizard.session import PENDING_SUBMISSION_KEY, SessionTracker

API = "http://api.test"

REFINANCE_STORE = {
    "loanType": "refinance",
    "isUAEResident": "true",
    "residencyStatus": "uae-resident",
    "refinanceReason": "lower-rate",
    "currentRate": "3-5-to-4",
    "remainingBalance": "1m-2m",
    "propertyValue": "5m-10m",
    "monthlyIncomeRefinance": "30k-50k",
    "fullName": "Jane Doe",
    "email": "jane@example.com",
    "phoneNumber": "+971501234567",
}


class Recorder:
    """MockTransport handler that records requests and returns a canned reply."""

    def __init__(self, response=None, exc=None):
        self.requests: list[httpx.Request] = []
        self.response = response
        self.exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response


def created(application_id="65f0c0ffee0000000000abcd"):
    return httpx.Response(201, json={
        "success": True,
        "message": "Application submitted successfully",
        "data": {
            "id": application_id,
            "status": "New Lead",
            "submittedAt": "2026-10-18T10:00:00",
            "trackingNumber": "NM-ABC123-ABCD",
        },
    })


def make_gateway(store, handler, policy=FailurePolicy.SILENT_DEGRADE):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SubmissionGateway(store, client=client, api_base_url=API, failure_policy=policy)


def seed(store, values):
    for key, value in values.items():
        store.set(key, value)


@pytest.mark.unit
class TestAnswerSets:

    def test_load_picks_branch_model(self, store):
        seed(store, REFINANCE_STORE)

        answers = load_answers(store)

        assert isinstance(answers, RefinanceAnswers)
        assert answers.is_uae_resident is True

    def test_refinance_income_is_submitted_as_monthly_income(self, store):
        seed(store, REFINANCE_STORE)

        payload = load_answers(store).to_payload()

        assert payload["monthlyIncome"] == "30k-50k"
        assert "monthlyIncomeRefinance" not in payload
        assert payload["isUAEResident"] is True

    def test_refinance_payload_excludes_other_branches(self, store):
        seed(store, {**REFINANCE_STORE, "budgetRange": "1m-2m", "investmentGoal": "rental-income"})

        payload = load_answers(store).to_payload()

        assert "budgetRange" not in payload
        assert "investmentGoal" not in payload

    def test_investment_budget_falls_back_to_legacy_key(self):
        answers = InvestmentAnswers(loan_type="investment", investment_budget_range="2m-5m")

        assert answers.to_payload()["investmentBudget"] == "2m-5m"

    def test_investment_budget_prefers_current_key(self):
        answers = InvestmentAnswers(
            loan_type="investment", investment_budget="1m-2m", investment_budget_range="2m-5m",
        )

        assert answers.to_payload()["investmentBudget"] == "1m-2m"

    def test_non_resident_false_is_not_missing(self):
        answers = PurchaseAnswers(
            loan_type="new-purchase",
            is_uae_resident=False,
            residency_status="non-resident",
            full_name="Sam Lee",
            email="sam@example.com",
            phone_number="+14155550100",
        )

        assert answers.missing_required() == []
        assert answers.to_payload()["isUAEResident"] is False

    def test_blank_strings_count_as_missing(self):
        answers = PurchaseAnswers(loan_type="new-purchase", email="  ")

        assert "email" in answers.missing_required()

    def test_stored_value_outside_choices_is_rejected(self, store):
        seed(store, {**REFINANCE_STORE, "currentRate": "12-percent"})

        with pytest.raises(ValidationError):
            load_answers(store)


@pytest.mark.unit
class TestSubmissionGateway:

    def test_success_stores_application_id_and_contact(self, store, clock):
        SessionTracker(store, clock=clock).create()
        seed(store, REFINANCE_STORE)
        recorder = Recorder(created())
        gateway = make_gateway(store, recorder)

        result = gateway.submit(load_answers(store))

        assert result.submitted is True
        assert result.application_id == "65f0c0ffee0000000000abcd"
        assert result.tracking_number == "NM-ABC123-ABCD"
        assert result.next_path == "/get-mortgage/refinance/complete"
        assert store.get("applicationId") == "65f0c0ffee0000000000abcd"
        assert store.get("email") == "jane@example.com"

        request = recorder.requests[0]
        assert str(request.url) == f"{API}{CREATE_APPLICATION_PATH}"
        assert request.headers["X-Landing-Session"].startswith("landing_")
        body = json.loads(request.content)
        assert body["monthlyIncome"] == "30k-50k"
        assert body["loanType"] == "refinance"

    def test_missing_email_aborts_before_network(self, store):
        seed(store, {k: v for k, v in REFINANCE_STORE.items() if k != "email"})
        recorder = Recorder(created())
        gateway = make_gateway(store, recorder)

        with pytest.raises(MissingFieldsError) as exc_info:
            gateway.submit(load_answers(store))

        assert exc_info.value.missing == ["email"]
        assert "email" in str(exc_info.value)
        assert str(exc_info.value).startswith("Missing required information: email.")
        assert recorder.requests == []

    def test_missing_error_names_every_field(self, store):
        seed(store, {"loanType": "new-purchase"})
        gateway = make_gateway(store, Recorder(created()))

        with pytest.raises(MissingFieldsError) as exc_info:
            gateway.submit(load_answers(store))

        assert exc_info.value.missing == [
            "isUAEResident", "residencyStatus", "fullName", "email", "phoneNumber",
        ]

    def test_network_error_degrades_to_completion(self, store):
        seed(store, REFINANCE_STORE)
        gateway = make_gateway(store, Recorder(exc=httpx.ConnectError("connection refused")))

        result = gateway.submit(load_answers(store))

        assert result.submitted is False
        assert result.next_path == "/get-mortgage/refinance/complete"
        assert result.message == SAVED_LOCALLY_MESSAGE
        assert store.get("fullName") == "Jane Doe"
        assert store.get("email") == "jane@example.com"
        assert store.get("phoneNumber") == "+971501234567"
        assert store.get("applicationId") is None

        pending = gateway.pending_submission()
        assert pending["payload"]["monthlyIncome"] == "30k-50k"
        assert "connection refused" in pending["error"]
        assert "failedAt" in pending

    @pytest.mark.parametrize("response", [
        httpx.Response(500, json={"success": False, "message": "boom", "errorCode": "SLA_001"}),
        httpx.Response(200, json={"success": False, "message": "rejected"}),
        httpx.Response(502, text="<html>Bad gateway</html>"),
    ])
    def test_unsuccessful_responses_are_flagged(self, store, response):
        seed(store, REFINANCE_STORE)
        gateway = make_gateway(store, Recorder(response))

        result = gateway.submit(load_answers(store))

        assert result.submitted is False
        assert store.get(PENDING_SUBMISSION_KEY) is not None

    def test_raise_policy(self, store):
        seed(store, REFINANCE_STORE)
        gateway = make_gateway(
            store,
            Recorder(httpx.Response(400, json={"success": False, "message": "Invalid application data"})),
            policy=FailurePolicy.RAISE,
        )

        with pytest.raises(SubmissionFailedError) as exc_info:
            gateway.submit(load_answers(store))

        assert exc_info.value.status_code == 400
        assert store.get(PENDING_SUBMISSION_KEY) is not None
        assert store.get("email") == "jane@example.com"

    def test_success_clears_previous_pending_submission(self, store):
        seed(store, REFINANCE_STORE)
        store.set(PENDING_SUBMISSION_KEY, json.dumps({"payload": {}, "error": "x", "failedAt": 1}))
        gateway = make_gateway(store, Recorder(created()))

        gateway.submit(load_answers(store))

        assert gateway.pending_submission() is None

    def test_close_leaves_injected_client_open(self, store):
        gateway = make_gateway(store, Recorder(created()))

        gateway.close()

        assert gateway.client.is_closed is False

    def test_context_manager_closes_own_client(self, store):
        with SubmissionGateway(store, api_base_url=API) as gateway:
            assert gateway.client.is_closed is False

        assert gateway.client.is_closed is True
