# storefront/main.py
import uvicorn

from storefront.api import create_app
from storefront.data.database import Base, init_db
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

try:
    init_db()
    logger.info(f"Database ready, tables: {sorted(Base.metadata.tables.keys())}")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
