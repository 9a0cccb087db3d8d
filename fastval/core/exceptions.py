from __future__ import annotations

from fastval.core.engine import ErrorRecord, RuleCompileError

__all__ = ["ErrorRecord", "RuleCompileError", "ValidationFailure", "FORBIDDEN_KEYS"]

# error-map key for records that belong to no field (unknown keys at the root)
FORBIDDEN_KEYS = "forbiddenKeys"


class ValidationFailure(Exception):
    status = 400
    code = 4000

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        self.message = "Validation failed"
        super().__init__(self.message)

    def get_status(self) -> int:
        return self.status
