from enum import Enum


class YearEnrollmentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TRANSFERRED = "Transferred"


class SemesterEnrollmentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TRANSFERRED = "transferred"


class PromotionStatus(str, Enum):
    ELIGIBLE = "Eligible"
    NOT_ELIGIBLE = "NotEligible"
    YEAR_DROP = "YearDrop"
    HOLD = "Hold"
    PROMOTED = "Promoted"


class PaymentPlan(str, Enum):
    ONE_TIME = "OneTime"
    INSTALLMENT = "Installment"


class CustomFieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
