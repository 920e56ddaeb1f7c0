from .school import School
from .participant import Participant
from .question import Question
from .quiz_submission import QuizSubmission
from .system_settings import SystemSettings
from .log_entry import LogEntry

__all__ = [
	"School",
	"Participant",
	"Question",
	"QuizSubmission",
	"SystemSettings",
	"LogEntry",
]
