from enum import Enum
from sqlalchemy.dialects.postgresql import ENUM


class CommissionRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class SalespersonStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# reference_type stored on notifications raised by the commission workflow
COMMISSION_REFERENCE_TYPE = "commission_request"

commission_request_status_enum = ENUM(
    *[x.value for x in CommissionRequestStatus],
    name='commissionrequeststatus',
    create_type=False  # Important: let migrations handle type creation
)
