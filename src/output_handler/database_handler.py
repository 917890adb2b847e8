"""
Database Handler Module.

This module provides SQLite storage for resolved vehicle records.

Features:
    - Automatic schema creation
    - Generated record identifiers (UUID)
    - Flat columns for querying plus the verbatim JSON payload
    - Duplicate detection by identifier and source file
    - Query helpers (search, manual review queue, statistics)

Author: ML Engineering Team
"""

import json
import sqlite3
import uuid
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from src.resolver.vehicle_record import ProcessedDocument, StructuredVehicleRecord
from src.utils.exceptions import DatabaseError
from src.utils.helpers import ensure_directory
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

Storable = Union[ProcessedDocument, StructuredVehicleRecord]


class DatabaseHandler:
    """
    Handles database operations for vehicle records.

    Each record is stored under a generated record_id with its fields in
    flat columns and its full to_dict() form in a JSON payload column.

    Attributes:
        db_path: Path to the SQLite database file
        table_name: Name of the main table
        avoid_duplicates: Skip records whose identifier and source file
            are already stored

    Example:
        >>> db = DatabaseHandler()
        >>> record_id = db.insert(processed_document)
        >>> db.get(record_id)['manufacturer']
        'Hyundai'
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        """
        Initialize the database handler.

        Args:
            db_path: Path to database file. If None, uses configuration.
        """
        # Load configuration
        if db_path:
            self.db_path = Path(db_path)
        else:
            output_dir = Path(get_config("paths.output_dir", "outputs"))
            db_name = get_config("output.database.name", "vehicle_records.db")
            self.db_path = output_dir / db_name

        self.table_name = get_config("output.database.table_name", "vehicle_records")
        self.avoid_duplicates = get_config("output.database.avoid_duplicates", True)
        self.review_threshold = float(get_config("resolution.review_threshold", 60))

        # Ensure directory exists
        ensure_directory(self.db_path.parent)

        self._create_tables()

        logger.info(f"DatabaseHandler initialized (db: {self.db_path})")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_tables(self) -> None:
        """Create the required database tables."""
        create_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            record_id TEXT PRIMARY KEY,
            identifier_code TEXT,
            model_year INTEGER,
            manufacturer TEXT,
            model TEXT,
            odometer_reading INTEGER,
            location TEXT,
            market_value REAL,
            settlement_value REAL,
            dialect TEXT,
            overall_confidence REAL,
            warning_count INTEGER,
            source_file TEXT,
            processing_time REAL,
            payload TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """

        try:
            with closing(self._connect()) as conn:
                cursor = conn.cursor()
                cursor.execute(create_sql)

                # Create indexes for faster lookups
                cursor.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.table_name}_identifier
                    ON {self.table_name} (identifier_code)
                """)

                cursor.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.table_name}_manufacturer
                    ON {self.table_name} (manufacturer)
                """)

                conn.commit()

            logger.debug("Database tables created/verified")

        except sqlite3.Error as e:
            raise DatabaseError("create tables", str(e))

    def insert(self, item: Storable) -> Optional[str]:
        """
        Insert a single record into the database.

        Args:
            item: ProcessedDocument or bare StructuredVehicleRecord.

        Returns:
            Generated record_id, or None if skipped as a duplicate.

        Raises:
            DatabaseError: If insertion fails.
        """
        if isinstance(item, ProcessedDocument):
            record = item.record
            source_file = item.source_file
            processing_time = item.processing_time
            payload = item.to_dict()
        else:
            record = item
            source_file = None
            processing_time = 0.0
            payload = record.to_dict()

        # Check for duplicates if enabled
        if self.avoid_duplicates and record.identifier_code:
            if self.exists(record.identifier_code, source_file):
                logger.debug(f"Duplicate detected, skipping: {record.identifier_code}")
                return None

        record_id = str(uuid.uuid4())
        now = datetime.now().isoformat()

        insert_sql = f"""
        INSERT INTO {self.table_name} (
            record_id, identifier_code, model_year, manufacturer, model,
            odometer_reading, location, market_value, settlement_value,
            dialect, overall_confidence, warning_count, source_file,
            processing_time, payload, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """

        values = (
            record_id,
            record.identifier_code,
            record.model_year,
            record.manufacturer,
            record.model,
            record.odometer_reading,
            record.location,
            record.market_value,
            record.settlement_value,
            record.dialect.value,
            record.overall_confidence,
            len(record.warnings),
            source_file,
            processing_time,
            json.dumps(payload),
            now,
            now,
        )

        try:
            with closing(self._connect()) as conn:
                conn.execute(insert_sql, values)
                conn.commit()

        except sqlite3.Error as e:
            raise DatabaseError("insert", str(e))

        logger.debug(f"Inserted record {record_id} ({record.identifier_code})")
        return record_id

    def insert_batch(self, items: List[Storable]) -> Dict[str, int]:
        """
        Insert multiple records.

        Args:
            items: ProcessedDocument or StructuredVehicleRecord objects.

        Returns:
            Dictionary with 'inserted' and 'skipped' counts.
        """
        inserted = 0
        skipped = 0

        for item in items:
            if self.insert(item):
                inserted += 1
            else:
                skipped += 1

        logger.info(f"Batch insert complete: {inserted} inserted, {skipped} skipped")
        return {'inserted': inserted, 'skipped': skipped}

    def exists(self, identifier_code: str, source_file: Optional[str] = None) -> bool:
        """
        Check if a record with the given identifier exists.

        Args:
            identifier_code: Identifier to check.
            source_file: Optional source file for a more specific check.

        Returns:
            True if a matching record exists.
        """
        query = f"SELECT COUNT(*) FROM {self.table_name} WHERE identifier_code = ?"
        params = [identifier_code]

        if source_file:
            query += " AND source_file = ?"
            params.append(source_file)

        return self._fetch_scalar("exists", query, params) > 0

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a stored row by record_id.

        Returns:
            Row dictionary with the payload decoded, or None.
        """
        rows = self._fetch_rows(
            "get",
            f"SELECT * FROM {self.table_name} WHERE record_id = ? LIMIT 1",
            (record_id,)
        )
        return rows[0] if rows else None

    def get_record(self, record_id: str) -> Optional[StructuredVehicleRecord]:
        """Rebuild the stored StructuredVehicleRecord from its payload."""
        row = self.get(record_id)
        if row is None:
            return None
        return StructuredVehicleRecord.from_dict(row['payload'])

    def get_all(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Retrieve all records, newest first.

        Args:
            limit: Maximum number of records to retrieve.
        """
        query = f"SELECT * FROM {self.table_name} ORDER BY created_at DESC"
        params: List[Any] = []
        if limit:
            query += " LIMIT ?"
            params.append(int(limit))

        return self._fetch_rows("get_all", query, params)

    def search(
        self,
        manufacturer: Optional[str] = None,
        model_year: Optional[int] = None,
        min_confidence: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Search records with various filters.

        Args:
            manufacturer: Filter by manufacturer (partial match).
            model_year: Filter by exact model year.
            min_confidence: Filter by minimum overall confidence.

        Returns:
            List of matching record dictionaries.
        """
        conditions = []
        params: List[Any] = []

        if manufacturer:
            conditions.append("manufacturer LIKE ?")
            params.append(f"%{manufacturer}%")

        if model_year is not None:
            conditions.append("model_year = ?")
            params.append(model_year)

        if min_confidence is not None:
            conditions.append("overall_confidence >= ?")
            params.append(min_confidence)

        query = f"SELECT * FROM {self.table_name}"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY created_at DESC"

        return self._fetch_rows("search", query, params)

    def get_needing_review(self, threshold: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        Retrieve records whose confidence is below the review threshold.

        Args:
            threshold: Confidence threshold. Defaults to configuration.
        """
        if threshold is None:
            threshold = self.review_threshold

        return self._fetch_rows(
            "get_needing_review",
            f"SELECT * FROM {self.table_name} WHERE overall_confidence < ? "
            f"ORDER BY overall_confidence ASC",
            (threshold,)
        )

    def get_count(self) -> int:
        """Get the total number of records in the database."""
        return self._fetch_scalar("get_count", f"SELECT COUNT(*) FROM {self.table_name}")

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the stored data.

        Returns:
            Dictionary with various statistics.
        """
        stats = {}

        try:
            with closing(self._connect()) as conn:
                cursor = conn.cursor()

                # Total count
                cursor.execute(f"SELECT COUNT(*) FROM {self.table_name}")
                stats['total_records'] = cursor.fetchone()[0]

                # Average confidence
                cursor.execute(f"SELECT AVG(overall_confidence) FROM {self.table_name}")
                stats['avg_confidence'] = cursor.fetchone()[0] or 0

                # Review queue
                cursor.execute(
                    f"SELECT COUNT(*) FROM {self.table_name} WHERE overall_confidence < ?",
                    (self.review_threshold,)
                )
                stats['needing_review'] = cursor.fetchone()[0]

                # Unique manufacturers
                cursor.execute(f"SELECT COUNT(DISTINCT manufacturer) FROM {self.table_name}")
                stats['unique_manufacturers'] = cursor.fetchone()[0]

                # Per dialect
                cursor.execute(
                    f"SELECT dialect, COUNT(*) FROM {self.table_name} GROUP BY dialect"
                )
                stats['by_dialect'] = {row[0]: row[1] for row in cursor.fetchall()}

            return stats

        except sqlite3.Error as e:
            raise DatabaseError("get_statistics", str(e))

    def delete(self, record_id: str) -> bool:
        """
        Delete a record by record_id.

        Returns:
            True if deleted, False if not found.
        """
        try:
            with closing(self._connect()) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"DELETE FROM {self.table_name} WHERE record_id = ?",
                    (record_id,)
                )
                deleted = cursor.rowcount > 0
                conn.commit()

        except sqlite3.Error as e:
            raise DatabaseError("delete", str(e))

        if deleted:
            logger.debug(f"Deleted record: {record_id}")
        return deleted

    def _fetch_rows(self, operation: str, query: str, params=()) -> List[Dict[str, Any]]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(operation, str(e))

        results = []
        for row in rows:
            result = dict(row)
            result['payload'] = json.loads(result['payload'])
            results.append(result)
        return results

    def _fetch_scalar(self, operation: str, query: str, params=()) -> Any:
        try:
            with closing(self._connect()) as conn:
                value = conn.execute(query, params).fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseError(operation, str(e))
        return value
