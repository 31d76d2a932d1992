import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from pos_dashboard.config import settings

logger = logging.getLogger("db_connection_check")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    logger.info("DATABASE_URL=%s", engine.url)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("DB connection FAILED: %s", exc)
        return 1
    logger.info("DB connection OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
