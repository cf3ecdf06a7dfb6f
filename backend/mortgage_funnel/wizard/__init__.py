from mortgage_funnel.wizard.answers import (
    AnswerSet,
    InvestmentAnswers,
    PurchaseAnswers,
    RefinanceAnswers,
    load_answers,
)
from mortgage_funnel.wizard.errors import (
    InvalidAnswerError,
    MissingFieldsError,
    SessionInvalidError,
    SubmissionFailedError,
    WizardError,
)
from mortgage_funnel.wizard.flow import FlowRouter, FlowState, StepRequirement
from mortgage_funnel.wizard.funnel import LandingFunnel
from mortgage_funnel.wizard.gateway import FailurePolicy, SubmissionGateway, SubmissionResult
from mortgage_funnel.wizard.guard import GuardResult, StepGuard
from mortgage_funnel.wizard.session import SessionTracker
from mortgage_funnel.wizard.store import FileSessionStore, MemorySessionStore, SessionStore

__all__ = [
    "AnswerSet",
    "FailurePolicy",
    "FileSessionStore",
    "FlowRouter",
    "FlowState",
    "GuardResult",
    "InvalidAnswerError",
    "InvestmentAnswers",
    "LandingFunnel",
    "MemorySessionStore",
    "MissingFieldsError",
    "PurchaseAnswers",
    "RefinanceAnswers",
    "SessionInvalidError",
    "SessionStore",
    "SessionTracker",
    "StepGuard",
    "StepRequirement",
    "SubmissionFailedError",
    "SubmissionGateway",
    "SubmissionResult",
    "WizardError",
    "load_answers",
]
