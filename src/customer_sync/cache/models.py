"""Cache tables."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..schemas import Customer


class Base(DeclarativeBase):
    pass


class CustomerRow(Base):
    __tablename__ = "Customer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    cg_id: Mapped[str | None] = mapped_column("cgId", String, default=None)
    name: Mapped[str | None] = mapped_column(String, default=None)
    email: Mapped[str | None] = mapped_column(String, default=None)
    mobile: Mapped[str | None] = mapped_column(String, default=None)

    def apply(self, customer: Customer) -> None:
        """Overwrite every field from ``customer`` (last write wins)."""
        self.cg_id = customer.cg_id
        self.name = customer.name
        self.email = customer.email
        self.mobile = customer.mobile

    def to_customer(self) -> Customer:
        return Customer(
            id=self.id,
            cg_id=self.cg_id or "",
            name=self.name or "",
            email=self.email or "",
            mobile=self.mobile or "",
        )

    def __repr__(self) -> str:
        return f"<CustomerRow {self.id} {self.name!r}>"


class StoreMeta(Base):
    """Key/value bookkeeping for the cache itself (schema version)."""

    __tablename__ = "store_meta"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(100))
