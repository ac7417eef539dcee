from contextlib import contextmanager
import logging
from sqlmodel import SQLModel, Session, create_engine

from .config import load_settings
from .models import StorageEntry  # noqa: F401  registers the table on metadata

logger = logging.getLogger(__name__)

_ENGINE = None
_ENGINE_URL = None  # track current engine's URL so we can switch when env changes

def _compute_url() -> str:
    db_path = load_settings().db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"

def get_engine():
    global _ENGINE, _ENGINE_URL
    url = _compute_url()
    if _ENGINE is None or _ENGINE_URL != url:
        # swap engine if URL changed (common in tests)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(url, echo=False)
        _ENGINE_URL = url
        logger.debug("Opened storage engine at %s", url)
    return _ENGINE

def reset_engine():
    """For tests: drop the cached engine so a new TAGNOTES_DB_PATH is picked up."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None

def init_db():
    engine = get_engine()
    SQLModel.metadata.create_all(engine)

@contextmanager
def session_scope():
    # keep objects alive after commit so returned models retain values
    session = Session(get_engine(), expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
