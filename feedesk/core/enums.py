from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    CASHIER = "cashier"
    PARENT = "parent"


class LateFeeType(str, Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


class ChargeScopeType(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    CLASS = "CLASS"
    SCHOOL = "SCHOOL"


class PaymentMode(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CHEQUE = "cheque"
    ONLINE = "online"


class TransactionStatus(str, Enum):
    completed = "completed"
    pending = "pending"
    failed = "failed"
    refunded = "refunded"


class TransactionKind(str, Enum):
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
