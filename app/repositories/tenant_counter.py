from database.connection import get_db, with_retry


class TenantCounterRepository:
    """Per-business usage counters (customers enrolled, monthly messages)."""

    @staticmethod
    @with_retry()
    def get(business_id: str) -> dict | None:
        """Get the counter row of a business, if one exists yet."""
        db = get_db()
        result = db.table("tenant_counters").select("*").eq(
            "business_id", business_id
        ).limit(1).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    def enroll_customer(
        business_id: str,
        customer: dict,
        max_customers: int | None,
        month_key: str,
    ) -> dict:
        """Insert a customer and increment total_customers in one transaction.

        Runs the enroll_customer SQL function (database/schema.py), which locks
        the counter row, rejects when total_customers >= max_customers and
        otherwise writes both rows. A None limit never rejects.

        Returns:
            {"status": "accepted", "customer": {...}, "total_customers": n}
            or {"status": "limit_reached"}
        """
        db = get_db()
        result = db.rpc("enroll_customer", {
            "p_business_id": business_id,
            "p_customer": customer,
            "p_max_customers": max_customers,
            "p_month_key": month_key,
        }).execute()
        return result.data

    @staticmethod
    @with_retry()
    def reset_monthly_counters(business_id: str, stale_month_key: str | None, month_key: str) -> dict | None:
        """Zero the monthly counters if the row still carries stale_month_key.

        Returns the updated row, or None if someone else already moved the
        row to another month.
        """
        db = get_db()
        query = db.table("tenant_counters").update({
            "notifications_this_month": 0,
            "emails_this_month": 0,
            "month_key": month_key,
        }).eq("business_id", business_id)
        if stale_month_key is None:
            query = query.is_("month_key", "null")
        else:
            query = query.eq("month_key", stale_month_key)
        result = query.execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    def increment_notifications(business_id: str, month_key: str, expected: int) -> dict | None:
        """Bump notifications_this_month from expected to expected + 1.

        Compare-and-set on both the count and the month; returns None when
        the row changed in between.
        """
        db = get_db()
        result = db.table("tenant_counters").update({
            "notifications_this_month": expected + 1,
        }).eq("business_id", business_id).eq(
            "month_key", month_key
        ).eq("notifications_this_month", expected).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @with_retry()
    def create(business_id: str, month_key: str) -> dict | None:
        """Create an empty counter row (no-op if one already exists)."""
        db = get_db()
        result = db.table("tenant_counters").upsert(
            {"business_id": business_id, "month_key": month_key},
            on_conflict="business_id",
            ignore_duplicates=True,
        ).execute()
        return result.data[0] if result and result.data else None
