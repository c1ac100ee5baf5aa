from gymledger.auth.models import PasswordResetToken, Teacher
from gymledger.core.models.class_assignment import ClassAssignment
from gymledger.core.models.class_session import ClassSession
from gymledger.core.models.fixed_values import FixedValues
from gymledger.core.models.modality import Modality
from gymledger.core.models.rank import Rank
from gymledger.core.models.role import Role

__all__ = [
    "ClassAssignment",
    "ClassSession",
    "FixedValues",
    "Modality",
    "PasswordResetToken",
    "Rank",
    "Role",
    "Teacher",
]
