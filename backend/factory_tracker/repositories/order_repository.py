"""Repository class for local order database operations."""

from typing import Any, Dict, Iterable, List, Optional, Set
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from factory_tracker.models.order import Order, OrderProduct


class OrderRepository:
    """Repository for Order database operations.

    Methods only flush; committing is left to the caller so that several
    calls can share one transaction.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_external_id(self, external_id: str) -> Optional[Order]:
        """Get the first order carrying an external id, with its lines loaded.

        Args:
            external_id: External id (e.g., "NETSIM-1042")

        Returns:
            Order instance or None
        """
        result = await self.session.execute(
            select(Order)
            .options(selectinload(Order.products))
            .where(Order.external_id == external_id)
            .order_by(Order.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_existing_external_ids(self, external_ids: Iterable[str]) -> Set[str]:
        """Return the subset of ``external_ids`` that exist locally.

        Args:
            external_ids: Candidate external ids

        Returns:
            Set of external ids already present
        """
        ids = list(external_ids)
        if not ids:
            return set()
        result = await self.session.execute(
            select(Order.external_id).where(Order.external_id.in_(ids))
        )
        return set(result.scalars().all())

    async def list_external_ids_with_prefix(self, prefix: str) -> Set[str]:
        result = await self.session.execute(
            select(Order.external_id).where(Order.external_id.startswith(prefix))
        )
        return set(result.scalars().all())

    async def create_with_products(
        self,
        order_data: Dict[str, Any],
        products_data: List[Dict[str, Any]],
    ) -> Order:
        """Create an order together with all of its lines.

        Args:
            order_data: Column values for the order header
            products_data: Column values for each line, in order

        Returns:
            Created Order instance with ``products`` populated
        """
        order = Order(**order_data)
        order.products = [OrderProduct(**data) for data in products_data]
        self.session.add(order)
        await self.session.flush()
        return order

    async def delete(self, order: Order) -> None:
        """Delete an order (its lines go with it).

        Args:
            order: Order to delete
        """
        await self.session.delete(order)
        await self.session.flush()

    async def update_status(self, order: Order, status: str) -> Order:
        order.status = status
        await self.session.flush()
        return order
