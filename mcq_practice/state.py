import math
import random
import time
import logging
from typing import Callable, List, Optional
from .models import FeedbackEntry, OptionView, ProgressState, Question, QuestionView, SessionPhase, SessionView, SocraticHints, TopicSummary
from .services.progress_store import FeedbackLog, ProgressStore, utc_iso
from .services.repository import LoadError
from .services.summary import summarize_topics
from .config import settings

logger = logging.getLogger("mcq_practice")

def _elapsed_seconds(started: float, now: float) -> int:
	# half-up rounding, never below one second
	return max(1, int(math.floor(now - started + 0.5)))

class SessionEngine:
	"""Walks one learner through shuffled fixed-length sessions.

	Every action is a synchronous state transition. Calls that make no sense in
	the current state (no selection, already submitted, hint at the cap) are
	ignored rather than reported, so callers gate them with the exposed flags.
	"""

	def __init__(self, progress_store: ProgressStore, feedback_log: FeedbackLog, session_length: int = 10, max_hint_level: int = 3, rng: Optional[random.Random] = None, clock: Callable[[], float] = time.monotonic) -> None:
		self.progress_store = progress_store
		self.feedback_log = feedback_log
		self.session_length = session_length
		self.max_hint_level = max_hint_level
		self.rng = rng or random.Random()
		self.clock = clock
		self.questions: Optional[List[Question]] = None
		self.by_id: dict[str, Question] = {}
		self.load_error: Optional[LoadError] = None
		self.session_ids: List[str] = []
		self.index = 0
		self.progress: ProgressState = progress_store.load()
		self._reset_per_question()

	def _reset_per_question(self) -> None:
		self.selected: Optional[str] = None
		self.submitted = False
		self.is_correct: Optional[bool] = None
		self.hint_level = 0
		self.started_at = self.clock()

	def attach(self, questions: List[Question]) -> None:
		self.questions = list(questions)
		self.by_id = {q.id: q for q in self.questions}
		self.load_error = None
		logger.info({"event": "bank_attached", "questions": len(self.questions)})
		self.start_session()

	def fail(self, error: LoadError) -> None:
		self.questions = None
		self.by_id = {}
		self.session_ids = []
		self.index = 0
		self.load_error = error
		logger.error({"event": "bank_load_failed", "source": error.source, "cause": error.cause})

	@property
	def loaded(self) -> bool:
		return self.questions is not None

	@property
	def length(self) -> int:
		return len(self.session_ids)

	@property
	def phase(self) -> SessionPhase:
		if not self.loaded:
			return SessionPhase.loading
		if self.index >= self.length:
			return SessionPhase.finished
		return SessionPhase.in_progress

	@property
	def session_questions(self) -> List[Question]:
		return [self.by_id[qid] for qid in self.session_ids if qid in self.by_id]

	@property
	def current_question(self) -> Optional[Question]:
		if self.index < self.length:
			return self.by_id.get(self.session_ids[self.index])
		return None

	def start_session(self) -> None:
		if not self.loaded:
			logger.debug({"event": "start_ignored", "reason": "not_loaded"})
			return
		ids = [q.id for q in self.questions]
		for i in range(len(ids) - 1, 0, -1):
			j = self.rng.randint(0, i)
			ids[i], ids[j] = ids[j], ids[i]
		self.session_ids = ids[:min(self.session_length, len(ids))]
		self.index = 0
		self._reset_per_question()
		logger.info({"event": "session_started", "length": self.length, "pool": len(ids)})

	def select_option(self, letter: str) -> None:
		if self.submitted or self.current_question is None:
			return
		self.selected = letter

	def submit(self) -> None:
		question = self.current_question
		if question is None or not self.selected or self.submitted:
			logger.debug({"event": "submit_ignored", "has_question": question is not None, "selected": self.selected, "submitted": self.submitted})
			return
		correct = self.selected == question.answer.mcq_key
		self.submitted = True
		self.is_correct = correct
		spent = _elapsed_seconds(self.started_at, self.clock())
		self.progress = self.progress_store.record_attempt(question, correct, self.hint_level, spent)
		logger.info({"event": "answer_submitted", "question_id": question.id, "selected": self.selected, "correct_key": question.answer.mcq_key, "is_correct": correct, "hints_used": self.hint_level, "time_spent_sec": spent})

	def request_hint(self) -> None:
		self.hint_level = max(0, min(self.max_hint_level, self.hint_level + 1))

	def next_question(self) -> None:
		if self.index < self.length - 1:
			self.index += 1
			self._reset_per_question()
		else:
			self.index = self.length
			logger.info({"event": "session_finished", "length": self.length})

	def reset_progress(self) -> None:
		self.progress = self.progress_store.reset()

	def report_issue(self, note: str) -> Optional[FeedbackEntry]:
		question = self.current_question
		text = (note or "").strip()
		if question is None or not text:
			return None
		entry = FeedbackEntry(when_iso=utc_iso(), question_id=question.id, unit=question.unit, topic=question.topic, note=text)
		self.feedback_log.append(entry)
		return entry

	def summary(self) -> List[TopicSummary]:
		return summarize_topics(self.progress, self.session_questions)

	def snapshot(self, render: Callable[[Optional[str]], str] = lambda t: t or "") -> SessionView:
		"""Everything the presentation layer needs for one render.

		``render`` is applied to stem, option and hint text (e.g. exponent markup).
		"""
		question = self.current_question
		view = SessionView(
			phase=self.phase,
			position=min(self.index + 1, self.length),
			length=self.length,
			bank_size=len(self.questions or []),
			selected=self.selected,
			submitted=self.submitted,
			is_correct=self.is_correct,
			hint_level=self.hint_level,
			max_hint_level=self.max_hint_level,
			load_error=self.load_error.user_message() if self.load_error else None,
		)
		if question is not None:
			view.question = QuestionView(
				id=question.id,
				unit=question.unit,
				topic=question.topic,
				stem=render(question.prompt.stem or "(Missing stem)"),
				assets=question.prompt.assets,
				options=[OptionView(letter=letter, text=render(text)) for letter, text in zip(question.option_letters(), question.prompt.options)],
			)
			hints = question.socratic_hints.visible(self.hint_level)
			view.hints = SocraticHints(
				level1=[render(h) for h in hints.level1],
				level2=[render(h) for h in hints.level2],
				level3=[step.model_copy(update={"content": render(step.content)}) for step in hints.level3],
			)
			if self.submitted:
				view.correct_key = question.answer.mcq_key
		if self.phase is SessionPhase.finished:
			view.summary = self.summary()
		return view

engine = SessionEngine(
	ProgressStore(settings.progress_file),
	FeedbackLog(settings.feedback_file),
	session_length=settings.session_length,
	max_hint_level=settings.max_hint_level,
)
