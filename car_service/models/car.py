"""Car ORM: one stored car document per row.

Invariants:
    - id is a UUID primary key generated at insert time and never updated
    - document holds the car payload exactly as accepted (manufacturer embedded)
    - created_at defines find-all ordering (insertion order)

Design Decisions:
    - JSON document column over one column per field: single-field updates may
      target any top-level key, including ones outside the Car schema
"""

import copy
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from car_service.db.base import Base


class Car(Base):
    __tablename__ = "cars"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_api(self) -> dict:
        """Stored document with its identifier under "id"."""
        return {**copy.deepcopy(self.document), "id": str(self.id)}
