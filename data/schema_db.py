#Tables read by the expenses report
import logging

import mysql.connector

logger = logging.getLogger(__name__)

SCHEMA = {
    "expenses": """
        CREATE TABLE IF NOT EXISTS `expenses` (
            `id` INT AUTO_INCREMENT PRIMARY KEY,
            `year` SMALLINT NOT NULL,
            `month` TINYINT NOT NULL,
            `day` TINYINT NOT NULL,
            `category` VARCHAR(64) DEFAULT NULL,
            `description` VARCHAR(255) DEFAULT NULL,
            `amount` DECIMAL(12, 2) NOT NULL DEFAULT 0,
            KEY `idx_expenses_period` (`year`, `month`, `day`)
        )
    """,
    "income": """
        CREATE TABLE IF NOT EXISTS `income` (
            `id` INT AUTO_INCREMENT PRIMARY KEY,
            `year` SMALLINT NOT NULL,
            `month` TINYINT NOT NULL,
            `day` TINYINT NOT NULL,
            `source` VARCHAR(128) DEFAULT NULL,
            `amount` DECIMAL(12, 2) NOT NULL DEFAULT 0,
            KEY `idx_income_period` (`year`, `month`, `day`)
        )
    """,
}


def create_schema(conn: mysql.connector.MySQLConnection) -> None:
    """Create the expenses and income tables if they are missing."""
    cur = conn.cursor()
    try:
        for table_name, create_stmt in SCHEMA.items():
            cur.execute(create_stmt)
            logger.info("Ensured table %s", table_name)
        conn.commit()
    finally:
        cur.close()
