"""Quiz and session Pydantic models."""
from pydantic import BaseModel, ConfigDict, Field

from learncheck.config import DEFAULT_MODULE_TITLE, SESSION_SCHEMA_VERSION


class Option(BaseModel):
    """Single answer option of a question."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    text: str = ""
    is_correct: bool = False


class Question(BaseModel):
    """Multiple-choice / multi-select question as served by the backend."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    question: str
    options: list[Option] = Field(default_factory=list)
    feedback: str = ""
    hint: str | None = None
    pre_hint: str | None = None

    def option_ids(self) -> set[str]:
        return {option.id for option in self.options}

    def correct_option_ids(self) -> set[str]:
        return {option.id for option in self.options if option.is_correct}


class CheckedStatus(BaseModel):
    """Verdict recorded when a question is submitted."""

    submitted: bool = False
    isCorrect: bool = False
    attemptCount: int = Field(default=0, ge=0)


class QuizMetadata(BaseModel):
    """Descriptive metadata attached to a tutorial quiz."""

    moduleTitle: str | None = None
    contextText: str | None = None


class QuizData(BaseModel):
    """Payload returned by the backend when a quiz is fetched."""

    questions: list[Question] = Field(default_factory=list)
    metadata: QuizMetadata = Field(default_factory=QuizMetadata)
    userPreferences: dict[str, object] | None = None


class RegeneratedQuestions(BaseModel):
    """Payload returned by the backend for a single-question regenerate."""

    questions: list[Question] = Field(default_factory=list)


class HintRequest(BaseModel):
    """Parameters sent to the hint generator."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    tutorialId: str
    questionId: str
    questionText: str
    contextText: str = ""
    studentAnswerIds: list[str] = Field(default_factory=list)
    options: list[Option] = Field(default_factory=list)


class QuizSession(BaseModel):
    """
    Persisted quiz state for one (user, tutorial) pair.
    Read and written as a whole unit.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    version: int = SESSION_SCHEMA_VERSION
    userId: str
    tutorialId: str
    questions: list[Question] = Field(default_factory=list)
    answers: dict[str, list[str]] = Field(default_factory=dict)
    checkedStatus: dict[str, CheckedStatus] = Field(default_factory=dict)
    aiHints: dict[str, str | None] = Field(default_factory=dict)
    isCompleted: bool = False
    score: int = 0
    correctCount: int = 0
    moduleTitle: str = DEFAULT_MODULE_TITLE
    contextText: str = ""
    userPreferences: dict[str, object] = Field(default_factory=dict)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def find_question(self, question_id: str) -> tuple[Question, int] | None:
        """Find question by ID, returning it with its index."""
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return question, index
        return None

    def is_submitted(self, question_id: str) -> bool:
        status = self.checkedStatus.get(question_id)
        return bool(status and status.submitted)

    def selected_options(self, question_id: str) -> list[str]:
        return list(self.answers.get(question_id, []))

    def is_all_questions_checked(self) -> bool:
        return self.total_questions > 0 and len(self.checkedStatus) == self.total_questions
