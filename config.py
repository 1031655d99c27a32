import os
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SCHEMA = os.getenv("SCHEMA", "public")

# LLM for the daily summary
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
INSIGHT_MODEL = os.getenv("INSIGHT_MODEL", "gpt-4o-mini")

# Local mirror of the {date -> ledger} map
LOCAL_SNAPSHOT_PATH = os.getenv("LOCAL_SNAPSHOT_PATH", "valorcafe_cloud_state_v2.json")

# All ledger dates are calendar days in this timezone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Sao_Paulo")

# Google Drive archive for exported reports (optional)
DRIVE_REPORT_FOLDER_ID = os.getenv("DRIVE_REPORT_FOLDER_ID", "")
GOOGLE_CREDENTIALS_JSON = os.getenv("GOOGLE_CREDENTIALS_JSON")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging():
    """Configura o logging da aplicação (uma vez por processo)."""
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, LOG_LEVEL, logging.INFO))
    # As bibliotecas HTTP são muito verbosas em DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def now() -> datetime:
    return datetime.now(ZoneInfo(APP_TIMEZONE))


def today() -> str:
    """Current calendar date in APP_TIMEZONE as YYYY-MM-DD."""
    return now().date().isoformat()


def supabase_configured() -> bool:
    if not SUPABASE_URL or not SUPABASE_KEY:
        logger.warning("SUPABASE_URL/SUPABASE_KEY não configurados. Rodando apenas em modo local.")
        return False
    return True


def drive_configured() -> bool:
    return bool(DRIVE_REPORT_FOLDER_ID and GOOGLE_CREDENTIALS_JSON)
