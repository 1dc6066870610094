"""askuser - multiple-choice questions for agents, answered in the terminal."""

from askuser.core import AnswerStore, QuestionFlowController, ResponseFormatter, ViewMode
from askuser.exceptions import AskUserError, ConfigurationError, DeliveryError
from askuser.io import CallbackSink, CollectingSink, QuestionPresenter, ResponseSink
from askuser.models import Option, Question, SelectionState, parse_questions
from askuser.session import MultiQuestionSession, SingleQuestionSession, create_session

__version__ = "0.1.0"

__all__ = [
    "AnswerStore",
    "AskUserError",
    "CallbackSink",
    "CollectingSink",
    "ConfigurationError",
    "DeliveryError",
    "MultiQuestionSession",
    "Option",
    "Question",
    "QuestionFlowController",
    "QuestionPresenter",
    "ResponseFormatter",
    "ResponseSink",
    "SelectionState",
    "SingleQuestionSession",
    "ViewMode",
    "create_session",
    "parse_questions",
]
