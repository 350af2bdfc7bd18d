import uuid

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .page_type import PageType
from .tenant import Tenant


class Page(TimestampMixin, Base):
    __tablename__ = "pages"
    # Final authority for per-tenant slug uniqueness
    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_pages_tenant_id_slug"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    page_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("page_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", server_default="draft"
    )
    summary: Mapped[dict | None] = mapped_column(JSON)
    content: Mapped[dict | None] = mapped_column(JSON)

    tenant: Mapped[Tenant] = relationship(Tenant)
    page_type: Mapped[PageType] = relationship(PageType)
