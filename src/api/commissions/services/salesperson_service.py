from typing import List, Optional
from sqlmodel import Session, select
from src.api.commissions.models.salesperson import Salesperson
from src.api.commissions.schemas.salesperson import SalespersonCreate, SalespersonUpdate
from src.api.common.constants.commissions import SalespersonStatus
from src.api.common.exceptions import NotFoundError
from src.api.common.utils.database import transaction


class SalespersonService:
    def __init__(self, db: Session):
        self.db = db

    def create_salesperson(self, salesperson_data: SalespersonCreate) -> Salesperson:
        """Create a new salesperson"""
        salesperson = Salesperson(**salesperson_data.model_dump())
        with transaction(self.db):
            self.db.add(salesperson)
        self.db.refresh(salesperson)
        return salesperson

    def get_salesperson(self, salesperson_id: int) -> Optional[Salesperson]:
        """Get a salesperson by ID"""
        return self.db.get(Salesperson, salesperson_id)

    def get_salespeople(self, status: Optional[SalespersonStatus] = None,
                        skip: int = 0, limit: int = 100) -> List[Salesperson]:
        """Get a list of salespeople"""
        statement = select(Salesperson)
        if status:
            statement = statement.where(Salesperson.status == status)
        return self.db.exec(statement.order_by(Salesperson.name).offset(skip).limit(limit)).all()

    def update_salesperson(self, salesperson_id: int, salesperson_data: SalespersonUpdate) -> Salesperson:
        """Update a salesperson"""
        salesperson = self.get_salesperson(salesperson_id)
        if not salesperson:
            raise NotFoundError("Salesperson", salesperson_id)

        update_data = salesperson_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(salesperson, key, value)
        salesperson.touch()

        with transaction(self.db):
            self.db.add(salesperson)
        self.db.refresh(salesperson)
        return salesperson
