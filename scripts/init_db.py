import sys
import os
import logging

# 1. Setup Paths (Same as manage_ingestion.py)
CURRENT_SCRIPT_PATH = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(CURRENT_SCRIPT_PATH))
sys.path.append(PROJECT_ROOT)

from app.config import settings
from app.database import Base, sync_engine

# The models must be imported so that Base knows about the tables.
import app.models

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def init_db() -> bool:
    logger.info("🏗️  Starting Database Construction...")
    logger.info(f"   - Target: {sync_engine.url.render_as_string(hide_password=True)}")

    try:
        # create_all skips tables that already exist
        Base.metadata.create_all(bind=sync_engine)
    except Exception as e:
        logger.error(f"❌ Database Creation Failed: {e}")
        return False

    logger.info("✅ Database Tables Created Successfully!")
    logger.info(f"   - Tables: {list(Base.metadata.tables.keys())}")
    return True

if __name__ == "__main__":
    sys.exit(0 if init_db() else 1)
