from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import threading
from time import perf_counter
from datetime import datetime, timezone
from typing import List
from .state import engine
from .models import FeedbackEntry, FeedbackRequest, SelectOptionRequest, SessionView, TopicSummary
from .services.repository import LoadError, load_questions
from .services.formatting import format_exponents_html
from .config import settings

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("mcq_practice")

app = FastAPI(default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"utc_time": datetime.now(timezone.utc).isoformat(),
		"data_dir": settings.data_dir,
		"index": settings.bank_index_file,
		"session_length": settings.session_length,
	})
	try:
		engine.attach(load_questions(settings.data_dir, settings.bank_index_file))
	except LoadError as e:
		engine.fail(e)

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

# routes run in the threadpool; one engine, one caller at a time
engine_lock = threading.Lock()

def _require_loaded() -> None:
	if engine.load_error is not None:
		raise HTTPException(status_code=503, detail=engine.load_error.user_message())
	if not engine.loaded:
		raise HTTPException(status_code=503, detail="questions_loading")

def _view(html: bool) -> SessionView:
	return engine.snapshot(format_exponents_html if html else (lambda t: t or ""))

@app.get("/api/session", response_model=SessionView)
def get_session(html: bool = False):
	with engine_lock:
		_require_loaded()
		return _view(html)

@app.post("/api/session/start", response_model=SessionView)
def start_session(html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.start_session()
		return _view(html)

@app.post("/api/session/select", response_model=SessionView)
def select_option(payload: SelectOptionRequest, html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.select_option(payload.letter)
		return _view(html)

@app.post("/api/session/submit", response_model=SessionView)
def submit_answer(html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.submit()
		return _view(html)

@app.post("/api/session/hint", response_model=SessionView)
def request_hint(html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.request_hint()
		return _view(html)

@app.post("/api/session/next", response_model=SessionView)
def next_question(html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.next_question()
		return _view(html)

@app.post("/api/progress/reset", response_model=SessionView)
def reset_progress(html: bool = False):
	with engine_lock:
		_require_loaded()
		engine.reset_progress()
		return _view(html)

@app.get("/api/summary", response_model=List[TopicSummary])
def get_summary():
	with engine_lock:
		_require_loaded()
		return engine.summary()

@app.post("/api/feedback", response_model=FeedbackEntry)
def report_issue(payload: FeedbackRequest):
	with engine_lock:
		_require_loaded()
		entry = engine.report_issue(payload.note)
	if entry is None:
		raise HTTPException(status_code=400, detail="empty_note_or_no_question")
	return entry
