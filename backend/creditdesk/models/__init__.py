"""
CreditDesk Database Models
Exports all models for use throughout the application.
"""

from creditdesk.models.user import User, UserRole, UserStatus
from creditdesk.models.credit_transaction import CreditTransaction
from creditdesk.models.search import Search
from creditdesk.models.system_setting import SystemSetting

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "CreditTransaction",
    "Search",
    "SystemSetting",
]
