"""
Catálogo: serviços (com lista de materiais) e produtos de estoque.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from lavajato.database import transaction
from lavajato.database_models import Product, Service, ServiceProduct, work_order_services
from lavajato.exceptions import ConfigurationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NULLABLE_PRODUCT_FIELDS = {"supplier"}


class CatalogStore:
    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # CONSULTAS USADAS PELO NÚCLEO
    # ============================================

    def resolve_services(self, ids: Iterable[int]) -> List[Service]:
        """
        Resolve os IDs no catálogo, na ordem recebida e sem repetição.
        Falha com NotFoundError se qualquer ID não existir.
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        found = {
            service.id: service
            for service in self.db.query(Service)
            .options(selectinload(Service.products_consumed))
            .filter(Service.id.in_(unique_ids))
            .all()
        }
        missing = [service_id for service_id in unique_ids if service_id not in found]
        if missing:
            raise NotFoundError("Serviço", ", ".join(str(i) for i in missing))

        return [found[service_id] for service_id in unique_ids]

    def find_service_by_name(self, name: str) -> Service:
        service = self.db.query(Service).filter(Service.name == name).first()
        if service is None:
            raise ConfigurationError(f"Serviço '{name}' não cadastrado no catálogo.")
        return service

    def decrement_stock(self, product_id: int, quantity: Decimal) -> None:
        """Baixa de estoque em um único UPDATE (stock = stock - quantidade)."""
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise NotFoundError("Produto", product_id)

        product = self.db.get(Product, product_id)
        if product.low_stock:
            logger.warning(
                "Estoque baixo: %s (%s restantes, mínimo %s)",
                product.name, product.stock, product.min_stock,
            )

    # ============================================
    # SERVIÇOS
    # ============================================

    def list_services(self) -> List[Service]:
        return (
            self.db.query(Service)
            .options(selectinload(Service.products_consumed))
            .order_by(Service.name)
            .all()
        )

    def get_service(self, service_id: int) -> Service:
        service = self.db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise NotFoundError("Serviço", service_id)
        return service

    def create_service(self, name: str, price: Decimal, products_consumed: Optional[list] = None) -> Service:
        with transaction(self.db):
            self._check_unique_name(name)
            service = Service(name=name, price=price)
            self.db.add(service)
            self._set_products_consumed(service, products_consumed or [])
            self.db.flush()
        self.db.refresh(service)
        logger.info("Serviço criado: %s (R$ %s)", service.name, service.price)
        return service

    def update_service(
        self,
        service_id: int,
        name: Optional[str] = None,
        price: Optional[Decimal] = None,
        products_consumed: Optional[list] = None,
    ) -> Service:
        """
        Atualiza nome/preço/insumos. Ordens já abertas não mudam de total:
        o valor é congelado na criação da OS.
        """
        with transaction(self.db):
            service = self.get_service(service_id)
            if name is not None and name != service.name:
                self._check_unique_name(name)
                service.name = name
            if price is not None:
                service.price = price
            if products_consumed is not None:
                self._set_products_consumed(service, products_consumed)
        self.db.refresh(service)
        return service

    def delete_service(self, service_id: int) -> None:
        with transaction(self.db):
            service = self.get_service(service_id)
            in_use = self.db.execute(
                work_order_services.select()
                .where(work_order_services.c.service_id == service_id)
                .limit(1)
            ).first()
            if in_use:
                raise ValidationError(
                    f"O serviço '{service.name}' aparece em ordens de serviço e não pode ser excluído."
                )
            self.db.delete(service)

    def _check_unique_name(self, name: str) -> None:
        if self.db.query(Service).filter(Service.name == name).first():
            raise ValidationError(f"Já existe um serviço chamado '{name}'.")

    def _set_products_consumed(self, service: Service, entries: list) -> None:
        # entries: objetos com product_id/quantity (modelo da API) ou tuplas
        pairs = []
        for entry in entries:
            if isinstance(entry, tuple):
                product_id, quantity = entry
            else:
                product_id, quantity = entry.product_id, entry.quantity
            pairs.append((product_id, Decimal(str(quantity))))

        product_ids = [product_id for product_id, _ in pairs]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Produto repetido na lista de insumos do serviço.")
        for product_id, quantity in pairs:
            if quantity <= 0:
                raise ValidationError(f"Quantidade inválida para o produto {product_id}.")
            if self.db.get(Product, product_id) is None:
                raise NotFoundError("Produto", product_id)

        service.products_consumed.clear()
        self.db.flush()
        for product_id, quantity in pairs:
            service.products_consumed.append(
                ServiceProduct(product_id=product_id, quantity=quantity)
            )

    # ============================================
    # PRODUTOS
    # ============================================

    def list_products(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.name).all()

    def list_low_stock(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.stock < Product.min_stock)
            .order_by(Product.name)
            .all()
        )

    def get_product(self, product_id: int) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Produto", product_id)
        return product

    def create_product(self, product_data: dict) -> Product:
        with transaction(self.db):
            product = Product(**product_data)
            self.db.add(product)
        self.db.refresh(product)
        return product

    def update_product(self, product_id: int, product_data: dict) -> Product:
        """Atualização parcial: só os campos presentes em product_data mudam."""
        with transaction(self.db):
            product = self.get_product(product_id)
            for key, value in product_data.items():
                if not hasattr(product, key):
                    continue
                # Só o fornecedor pode ser apagado; nos demais, nulo mantém o valor
                if value is None and key not in NULLABLE_PRODUCT_FIELDS:
                    continue
                setattr(product, key, value)
        self.db.refresh(product)
        return product

    def delete_product(self, product_id: int) -> None:
        with transaction(self.db):
            product = self.get_product(product_id)
            self.db.delete(product)
