"""Answer/selection state machine, independent of any renderer."""

from askuser.core.answers import AnswerStore, has_valid_answer
from askuser.core.flow import REVIEW_TAB, FlowState, QuestionFlowController
from askuser.core.formatter import ResponseFormatter
from askuser.core.keyboard import Key, KeyboardNavigationController, NavigationAction, navigate
from askuser.core.validation import SubmissionValidator
from askuser.core.view import ViewController, ViewMode

__all__ = [
    "AnswerStore",
    "has_valid_answer",
    "REVIEW_TAB",
    "FlowState",
    "QuestionFlowController",
    "ResponseFormatter",
    "Key",
    "KeyboardNavigationController",
    "NavigationAction",
    "navigate",
    "SubmissionValidator",
    "ViewController",
    "ViewMode",
]
