from decimal import Decimal
from sqlalchemy import Integer, String, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clinica.core.db import Base


class Servicio(Base):
    __tablename__ = "servicios"
    __table_args__ = (CheckConstraint("precio >= 0", name="ck_servicios_precio"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(150), unique=True)
    precio: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
