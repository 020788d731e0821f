from datetime import timezone

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String,
    Table, TEXT,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator
from .database import Base # Importa o 'Base' declarativo


class UTCDateTime(TypeDecorator):
    """Grava sempre em UTC e devolve o datetime com fuso (o SQLite descarta o tzinfo)."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# Associação N:N entre Ordens de Serviço e Serviços do catálogo
work_order_services = Table(
    "work_order_services",
    Base.metadata,
    Column("work_order_id", Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id"), primary_key=True),
)


# 1. Credenciais dos perfis de acesso (admin / funcionario)
class RoleCredential(Base):
    __tablename__ = "role_credentials"
    role = Column(String(20), primary_key=True)
    password_hash = Column(String(255), nullable=False)


# 2. Clientes
class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(50))
    email = Column(String(255), index=True)
    birthday = Column(Date)

    # Um Cliente tem muitos Veículos e muitas Ordens de Serviço
    vehicles = relationship("Vehicle", back_populates="owner", cascade="all, delete-orphan", order_by="Vehicle.id")
    work_orders = relationship("WorkOrder", back_populates="customer", cascade="all, delete-orphan")

    @property
    def service_history(self):
        """Ordens de serviço do cliente, da mais recente para a mais antiga."""
        return sorted(self.work_orders, key=lambda wo: (wo.checkin_time, wo.id), reverse=True)


# 3. Veículos
class Vehicle(Base):
    __tablename__ = "vehicles"
    id = Column(Integer, primary_key=True, autoincrement=True)
    plate = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    color = Column(String(50))
    observations = Column(TEXT)

    # Chave Estrangeira
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)

    owner = relationship("Customer", back_populates="vehicles")
    work_orders = relationship("WorkOrder", back_populates="vehicle", cascade="all, delete")


# 4. Produtos (insumos em estoque)
class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    supplier = Column(String(200))
    cost = Column(Numeric(10, 2), default=0)
    stock = Column(Numeric(10, 2), default=0)
    min_stock = Column(Numeric(10, 2), default=0)

    # Remover o produto remove também as linhas de consumo dos serviços
    service_entries = relationship("ServiceProduct", back_populates="product", cascade="all, delete-orphan")

    @property
    def low_stock(self) -> bool:
        return (self.stock or 0) < (self.min_stock or 0)


# 5. Serviços do catálogo
class Service(Base):
    __tablename__ = "services"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    # Lista de materiais: quais produtos (e quanto) o serviço consome
    products_consumed = relationship(
        "ServiceProduct", back_populates="service", cascade="all, delete-orphan"
    )


class ServiceProduct(Base):
    __tablename__ = "service_products"
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    quantity = Column(Numeric(10, 2), nullable=False)

    service = relationship("Service", back_populates="products_consumed")
    product = relationship("Product", back_populates="service_entries")


# 6. Ordens de Serviço
class WorkOrder(Base):
    __tablename__ = "work_orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    employee = Column(String(100))
    status = Column(String(50), nullable=False) # (Ex: "Aguardando", "Entregue")
    checkin_time = Column(UTCDateTime(), nullable=False, index=True)
    checkout_time = Column(UTCDateTime())
    damage_log = Column(TEXT)
    # Congelado na criação: não é recalculado se o preço do catálogo mudar
    total = Column(Numeric(10, 2), nullable=False, default=0)
    is_paid = Column(Boolean, nullable=False, default=False)
    payment_method = Column(String(20))
    # Preenchido na única baixa de estoque da OS
    stock_consumed_at = Column(UTCDateTime())

    customer = relationship("Customer", back_populates="work_orders")
    vehicle = relationship("Vehicle", back_populates="work_orders")
    services = relationship("Service", secondary=work_order_services, order_by="Service.id")


# 7. Despesas
class Expense(Base):
    __tablename__ = "expenses"
    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String(500), nullable=False)
    category = Column(String(50), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
