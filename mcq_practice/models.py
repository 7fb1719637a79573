from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional

# Bank records arrive as loosely-typed JSON; everything below a question id is
# defaulted or coerced rather than rejected.

def _text(value: Any) -> str:
    return "" if value is None else value if isinstance(value, str) else str(value)

def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else _text(value)

def _text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_text(v) for v in value if v is not None]

def _mapping(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else {}

class Asset(BaseModel):
    type: str = "image"
    src: str = ""
    alt: Optional[str] = None

    @field_validator("type", "src", mode="before")
    @classmethod
    def _as_text(cls, value):
        return _text(value)

    @field_validator("alt", mode="before")
    @classmethod
    def _as_optional_text(cls, value):
        return _optional_text(value)

class Prompt(BaseModel):
    stem: Optional[str] = None
    assets: List[Asset] = []
    options: List[str] = []

    @field_validator("stem", mode="before")
    @classmethod
    def _stem_text(cls, value):
        return _optional_text(value)

    @field_validator("assets", mode="before")
    @classmethod
    def _asset_records(cls, value):
        if not isinstance(value, list):
            return []
        return [a for a in value if isinstance(a, (dict, Asset))]

    @field_validator("options", mode="before")
    @classmethod
    def _option_texts(cls, value):
        return _text_list(value)

class Answer(BaseModel):
    mcq_key: Optional[str] = None

    @field_validator("mcq_key", mode="before")
    @classmethod
    def _key_text(cls, value):
        return _optional_text(value)

class WorkedStep(BaseModel):
    step: str = ""
    content: str = ""
    mark_award: Optional[float] = None

    @field_validator("step", "content", mode="before")
    @classmethod
    def _as_text(cls, value):
        return _text(value)

    @field_validator("mark_award", mode="before")
    @classmethod
    def _numeric_marks(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

class SocraticHints(BaseModel):
    level1: List[str] = []
    level2: List[str] = []
    level3: List[WorkedStep] = []

    @field_validator("level1", "level2", mode="before")
    @classmethod
    def _hint_texts(cls, value):
        return _text_list(value)

    @field_validator("level3", mode="before")
    @classmethod
    def _worked_steps(cls, value):
        if not isinstance(value, list):
            return []
        return [s if isinstance(s, (dict, WorkedStep)) else {"content": s} for s in value if s is not None]

    def visible(self, tier: int) -> "SocraticHints":
        """Hint tiers disclosed at the given level; higher tiers come back empty."""
        return SocraticHints(
            level1=self.level1 if tier >= 1 else [],
            level2=self.level2 if tier >= 2 else [],
            level3=self.level3 if tier >= 3 else [],
        )

class Question(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    unit: str = ""
    topic: str = ""
    prompt: Prompt = Prompt()
    answer: Answer = Answer()
    socratic_hints: SocraticHints = SocraticHints()

    @field_validator("id", "unit", "topic", mode="before")
    @classmethod
    def _as_text(cls, value):
        return _text(value)

    @field_validator("prompt", "answer", "socratic_hints", mode="before")
    @classmethod
    def _sub_record(cls, value):
        return _mapping(value)

    def option_letters(self) -> List[str]:
        return [chr(ord("A") + idx) for idx in range(len(self.prompt.options))]

class AttemptRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    times: int = 0
    correct_count: int = 0
    hints_total: int = 0
    time_total_sec: int = 0
    last_was_correct: bool = False
    last_hints_used: int = 0
    last_attempt_iso: Optional[str] = None
    unit: str = ""
    topic: str = ""

class ProgressState(BaseModel):
    attempts: Dict[str, AttemptRecord] = {}

class FeedbackEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    when_iso: str
    question_id: str
    unit: str = ""
    topic: str = ""
    note: str

class TopicSummary(BaseModel):
    unit: str
    topic: str
    total: int = 0
    correct: int = 0
    hints: int = 0
    weakness_total: int = 0
    accuracy: float = 0.0
    weakness_avg: float = 0.0

class SessionPhase(str, Enum):
    loading = "loading"
    in_progress = "in_progress"
    finished = "finished"

class OptionView(BaseModel):
    letter: str
    text: str

class QuestionView(BaseModel):
    id: str
    unit: str
    topic: str
    stem: str
    assets: List[Asset]
    options: List[OptionView]

class SessionView(BaseModel):
    phase: SessionPhase
    position: int
    length: int
    bank_size: int
    question: Optional[QuestionView] = None
    selected: Optional[str] = None
    submitted: bool = False
    is_correct: Optional[bool] = None
    correct_key: Optional[str] = None
    hint_level: int = 0
    max_hint_level: int = 3
    hints: SocraticHints = SocraticHints()
    summary: List[TopicSummary] = []
    load_error: Optional[str] = None

class SelectOptionRequest(BaseModel):
    letter: str

class FeedbackRequest(BaseModel):
    note: str
