"""Table model."""

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class Table(Base):
    """Table model representing a dining table that can seat one party."""

    __tablename__ = "tables"

    table_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    table_name: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    reservation_id: Mapped[int | None] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("reservations.reservation_id"),
        unique=True,
    )

    @property
    def occupied(self) -> bool:
        """A table is occupied exactly while it holds a reservation."""
        return self.reservation_id is not None
