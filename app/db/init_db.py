import logging
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import Base, engine
# Registers every table on Base.metadata
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

def init_db(bind=None):
    """
    Initialize the database by creating all TaxiTap tables and indexes.
    Existing tables are left untouched.
    """
    bind = bind or engine
    try:
        Base.metadata.create_all(bind=bind, checkfirst=True)
        for table in Base.metadata.sorted_tables:
            logger.info(f"Table {table.name} ready")

        logger.info("TaxiTap tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating database tables: {e}")
        raise
