"""Snapshot models consumed by the presentation layer."""
import enum

from pydantic import BaseModel, ConfigDict, Field

from learncheck.models.quiz import Question, QuizSession


class Screen(str, enum.Enum):
    """Which view the presentation layer should render."""

    LOADING = "loading"
    WELCOME = "welcome"
    IN_PROGRESS = "in_progress"
    RESULTS = "results"


class OptionReview(str, enum.Enum):
    """Display state of a single option."""

    SELECTED = "selected"
    UNSELECTED = "unselected"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NEUTRAL = "neutral"


class ViewState(BaseModel):
    """Transient, non-persisted state of the quiz view."""

    currentQuestionIndex: int = 0
    isHintVisible: bool = False
    showResults: bool = False
    isWelcomeScreen: bool = True
    notice: str | None = None
    preferences: dict[str, object] = Field(default_factory=dict)


class OptionView(BaseModel):
    id: str
    text: str
    state: OptionReview


class QuestionProgress(BaseModel):
    """Everything needed to render the current question card."""

    question: Question
    questionNumber: int
    totalQuestions: int
    selectedOptionIds: list[str]
    options: list[OptionView]
    isSubmitted: bool
    isCorrect: bool
    isAnswered: bool
    isFirstQuestion: bool
    isLastQuestion: bool
    isAllQuestionsChecked: bool
    canViewScore: bool
    preHint: str | None = None
    feedback: str | None = None
    aiHint: str | None = None


class QuizResults(BaseModel):
    correct: int
    total: int
    score: int


class QuizSnapshot(BaseModel):
    """Read-only view of the controller at a point in time."""

    model_config = ConfigDict(frozen=True)

    userId: str | None
    tutorialId: str | None
    screen: Screen
    isBusy: bool
    viewState: ViewState
    session: QuizSession | None = None
    progress: QuestionProgress | None = None
    results: QuizResults | None = None


class AnswerSelection(BaseModel):
    """Request body for toggling an option."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    questionId: str
    optionId: str


class ActionResponse(BaseModel):
    """Response for every controller action endpoint."""

    applied: bool
    snapshot: QuizSnapshot
