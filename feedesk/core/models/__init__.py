from feedesk.core.models.class_model import SchoolClass
from feedesk.core.models.student import Student
from feedesk.core.models.quarter import Quarter
from feedesk.core.models.fee_structure import FeeStructure
from feedesk.core.models.extra_charge import ExtraCharge
from feedesk.core.models.transaction import Transaction
from feedesk.core.models.fee_audit_log import FeeAuditLog

__all__ = [
    "SchoolClass",
    "Student",
    "Quarter",
    "FeeStructure",
    "ExtraCharge",
    "Transaction",
    "FeeAuditLog",
]
