# commission_hub/sales_commission/service.py
"""
Sale use-cases: list, create, update, delete.

Ties together the normalizer (validation), AccessControl (who may touch
what, who owns a record) and the repository (storage). Pages call this
and turn the exceptions into st.error messages.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .access_control import AccessControl
from .normalizer import normalize_sale_input
from .repository import SalesRepository

logger = logging.getLogger(__name__)


class SaleServiceError(Exception):
    """Base error of sale operations."""


class SaleNotFoundError(SaleServiceError):
    def __init__(self, sale_id: str):
        super().__init__("Venda não encontrada.")
        self.sale_id = sale_id


class SalePermissionError(SaleServiceError):
    def __init__(self, sale_id: str):
        super().__init__("Sem permissão para alterar esta venda.")
        self.sale_id = sale_id


def _timestamp(now: Optional[datetime]) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat()


class SalesService:
    """
    Usage:
        service = SalesService(SalesRepository(), access)

        sales = service.list_sales()
        sale = service.create_sale(form_fields)
        service.update_sale(sale['id'], session.to_raw_fields())
        service.delete_sale(sale['id'])
    """

    def __init__(self, repository: SalesRepository, access: AccessControl):
        self.repository = repository
        self.access = access

    def list_sales(self) -> List[Dict[str, Any]]:
        return self.repository.list_sales_for_user(self.access.user_role, self.access.user_id)

    def create_sale(self, raw_fields: Mapping[str, Any], now: datetime = None) -> Dict[str, Any]:
        """
        Validate and store a new sale.

        Raises:
            SaleValidationError: invalid input (nothing is stored)
        """
        sale = normalize_sale_input(raw_fields, enforce_positive=True)
        user_id, consultor_name = self.access.resolve_owner(raw_fields)
        timestamp = _timestamp(now)

        record = {
            'id': uuid.uuid4().hex,
            'user_id': user_id,
            'consultor_name': consultor_name,
            **sale.to_record(),
            'created_at': timestamp,
            'updated_at': timestamp,
        }
        return self.repository.create_sale(record)

    def _get_modifiable(self, sale_id: str) -> Dict[str, Any]:
        current = self.repository.get_sale(sale_id)
        if current is None:
            raise SaleNotFoundError(sale_id)
        if not self.access.can_modify(current):
            logger.warning(f"Rejected change of sale {sale_id} by user_id={self.access.user_id}")
            raise SalePermissionError(sale_id)
        return current

    def update_sale(self, sale_id: str, raw_fields: Mapping[str, Any], now: datetime = None) -> Dict[str, Any]:
        """
        Replace the editable fields of a sale.

        Quantities are not required to be positive here, so a sale can be
        corrected down to zero.

        Raises:
            SaleNotFoundError, SalePermissionError, SaleValidationError
        """
        self._get_modifiable(sale_id)
        sale = normalize_sale_input(raw_fields, enforce_positive=False)
        timestamp = _timestamp(now)

        def mutate(current: Dict[str, Any]) -> Dict[str, Any]:
            user_id, consultor_name = self.access.resolve_owner(raw_fields, current)
            return {
                **current,
                **sale.to_record(),
                'user_id': user_id,
                'consultor_name': consultor_name,
                'updated_at': timestamp,
            }

        updated = self.repository.update_sale(sale_id, mutate)
        if updated is None:
            # deleted between the check and the write
            raise SaleNotFoundError(sale_id)
        return updated

    def delete_sale(self, sale_id: str) -> bool:
        """
        Raises:
            SaleNotFoundError, SalePermissionError
        """
        self._get_modifiable(sale_id)
        if not self.repository.delete_sale(sale_id):
            raise SaleNotFoundError(sale_id)
        return True
