from database.connection import get_db, with_retry


class PlanRepository:
    """Read-only access to subscription plans (managed outside this service)."""

    @staticmethod
    @with_retry()
    def get_by_name(name: str) -> dict | None:
        """Get a plan by its exact name."""
        db = get_db()
        result = db.table("plans").select("*").eq("name", name).limit(1).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @with_retry()
    def get_all() -> list[dict]:
        """Get every plan, ordered by name."""
        db = get_db()
        result = db.table("plans").select("*").order("name").execute()
        return result.data if result and result.data else []
