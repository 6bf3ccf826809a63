from datetime import datetime

from database.connection import get_db, with_retry


class CustomerRepository:
    """Customer records, always addressed by (business_id, customer_id).

    Rows are created only through TenantCounterRepository.enroll_customer so
    the plan limit check and the insert share one transaction.
    """

    @staticmethod
    @with_retry()
    def get(business_id: str, customer_id: str) -> dict | None:
        """Get a customer of a business by ID."""
        db = get_db()
        result = db.table("customers").select("*").eq(
            "business_id", business_id
        ).eq("id", customer_id).limit(1).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @with_retry()
    def get_all(business_id: str) -> list[dict]:
        """Get all customers for a business ordered by creation date (newest first)."""
        db = get_db()
        result = db.table("customers").select("*").eq(
            "business_id", business_id
        ).order("created_at", desc=True).execute()
        return result.data if result and result.data else []

    @staticmethod
    def update_counters(
        business_id: str,
        customer_id: str,
        expected_version: int,
        counters: dict,
        last_visit_at: datetime,
    ) -> dict | None:
        """Write new loyalty counters if the row is still at expected_version.

        Not retried on connection errors: a retry after a committed write
        would see the moved version and look like a concurrent scan.

        Returns the updated row, or None when another write got there first
        (the caller re-reads and retries).
        """
        db = get_db()
        result = db.table("customers").update({
            **counters,
            "last_visit_at": last_visit_at.isoformat(),
            "version": expected_version + 1,
        }).eq("business_id", business_id).eq(
            "id", customer_id
        ).eq("version", expected_version).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @with_retry()
    def set_active(business_id: str, customer_id: str, active: bool) -> dict | None:
        """Soft-delete or restore a customer. Counters are left untouched."""
        db = get_db()
        result = db.table("customers").update({"active": active}).eq(
            "business_id", business_id
        ).eq("id", customer_id).execute()
        return result.data[0] if result and result.data else None
