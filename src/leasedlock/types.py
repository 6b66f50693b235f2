"""Type definitions for leasedlock."""

from typing import Literal, TypeAlias

# Classified result of a single conditional write or delete
Outcome: TypeAlias = Literal["ok", "condition_failed", "table_not_found"]
