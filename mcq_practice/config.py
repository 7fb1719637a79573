import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    data_dir: str = os.getenv("DATA_DIR", "public")
    bank_index_file: str = os.getenv("BANK_INDEX_FILE", "data/index.json")
    progress_file: str = os.getenv("PROGRESS_FILE", os.path.join("storage", "progress.json"))
    feedback_file: str = os.getenv("FEEDBACK_FILE", os.path.join("storage", "feedback.json"))
    session_length: int = int(os.getenv("SESSION_LENGTH", "10"))
    max_hint_level: int = int(os.getenv("MAX_HINT_LEVEL", "3"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
