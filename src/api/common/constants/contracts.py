from enum import Enum
from sqlalchemy.dialects.postgresql import ENUM

# Python enums for type hints and constants


class ContractKind(str, Enum):
    SALE = "SALE"
    PURCHASE = "PURCHASE"


class ContractStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class RecurrencePeriod(str, Enum):
    MONTHLY = "MONTHLY"
    BIMONTHLY = "BIMONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"

    @property
    def months(self) -> int:
        return RECURRENCE_STEP_MONTHS[self]


RECURRENCE_STEP_MONTHS = {
    RecurrencePeriod.MONTHLY: 1,
    RecurrencePeriod.BIMONTHLY: 2,
    RecurrencePeriod.QUARTERLY: 3,
    RecurrencePeriod.SEMIANNUAL: 6,
    RecurrencePeriod.ANNUAL: 12,
}


class DiscountMode(str, Enum):
    NONE = "NONE"
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"


class PaymentMethod(str, Enum):
    PIX = "PIX"
    TRANSFER = "TRANSFER"
    BOLETO = "BOLETO"
    CREDIT_CARD = "CREDIT_CARD"


class SplitPolicy(str, Enum):
    EQUAL = "EQUAL"
    CUSTOM = "CUSTOM"


class InstallmentKind(str, Enum):
    NORMAL = "NORMAL"
    GO_LIVE = "GO_LIVE"


class InstallmentStatus(str, Enum):
    AWAITING_COMPLETION = "AWAITING_COMPLETION"
    PENDING = "PENDING"
    SETTLED = "SETTLED"


class LedgerDirection(str, Enum):
    RECEIVABLE = "RECEIVABLE"
    PAYABLE = "PAYABLE"


# Contract number prefixes: CV (sale contract), CF (supplier contract)
CONTRACT_NUMBER_PREFIXES = {
    ContractKind.SALE: "CV",
    ContractKind.PURCHASE: "CF",
}

CONTRACT_DIRECTIONS = {
    ContractKind.SALE: LedgerDirection.RECEIVABLE,
    ContractKind.PURCHASE: LedgerDirection.PAYABLE,
}

# Tolerance for the custom split percent sum (100 +/- 0.01)
SPLIT_PERCENT_TOLERANCE = "0.01"


# SQLAlchemy enum types for database
contract_kind_enum = ENUM(
    *[x.value for x in ContractKind],
    name='contractkind',
    create_type=False  # Important: let migrations handle type creation
)

contract_status_enum = ENUM(
    *[x.value for x in ContractStatus],
    name='contractstatus',
    create_type=False
)

installment_status_enum = ENUM(
    *[x.value for x in InstallmentStatus],
    name='installmentstatus',
    create_type=False
)

ledger_direction_enum = ENUM(
    *[x.value for x in LedgerDirection],
    name='ledgerdirection',
    create_type=False
)
