"""
Setup script for initializing the TaxiTap database tables.
Creates missing tables and indexes; existing tables are not altered.
"""

import logging
from app.db.init_db import init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def setup_database():
    """Initialize database tables for the TaxiTap backend."""
    logger.info("Creating TaxiTap database tables...")
    try:
        init_db()
        logger.info("Database tables created successfully!")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise

if __name__ == "__main__":
    setup_database()
