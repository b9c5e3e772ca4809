# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides the small set of generic helpers the services share:
# - single-row lookups by column
# - row counts
# - clearing a table (used by reset & sync)
# - the cache_metadata key/value table
#
# Services build anything more specific with the query builder returned by
# SupabaseClient.get_client().
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   person = SupabaseClient.fetch_one("people", "api_id", "usr-123")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid, utcnow_iso

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST refuses an unfiltered DELETE, so clearing a table filters on an
# id that can never exist.
NIL_UUID = "00000000-0000-0000-0000-000000000000"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so callers can log something actionable.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        company = SupabaseClient.fetch_one("companies", "slug", "acme-labs")
        total = SupabaseClient.count_rows("posts", "status", "published")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Generic Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        column: str,
        value: Any,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the first row of `table` where `column` equals `value`.

        Returns None when nothing matches. Uses limit(1) rather than
        single() so a missing row isn't an error.
        """
        client = cls.get_client()
        if isinstance(value, UUID):
            value = normalize_uuid(value)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "column": column},
            )

        if response.data:
            return response.data[0]
        return None

    @classmethod
    def count_rows(
        cls,
        table: str,
        column: str | None = None,
        value: Any = None,
    ) -> int:
        """Count rows in a table, optionally filtered by one equality."""
        client = cls.get_client()
        query = client.table(table).select("id", count="exact")
        if column is not None:
            query = query.eq(column, value)

        try:
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table},
            )
        return response.count or 0

    @classmethod
    def clear_table(cls, table: str) -> None:
        """Delete every row of a table."""
        client = cls.get_client()
        try:
            client.table(table).delete().neq("id", NIL_UUID).execute()
            logger.info(f"Cleared table: {table}")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to clear {table}: {e}",
                code="CLEAR_FAILED",
                suggestion="Check foreign keys referencing this table",
                details={"table": table},
            )

    # -------------------------------------------------------------------------
    # Cache Metadata
    # -------------------------------------------------------------------------

    @classmethod
    def get_cache_metadata(cls, key: str) -> str | None:
        """Read a value from the cache_metadata key/value table."""
        row = cls.fetch_one("cache_metadata", "key", key)
        return row.get("value") if row else None

    @classmethod
    def set_cache_metadata(cls, key: str, value: str) -> None:
        """Upsert a value into the cache_metadata key/value table."""
        client = cls.get_client()
        try:
            (
                client.table("cache_metadata")
                .upsert(
                    {"key": key, "value": value, "updated_at": utcnow_iso()},
                    on_conflict="key",
                )
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to write cache metadata: {e}",
                code="CACHE_METADATA_FAILED",
                details={"key": key},
            )
