"""Error taxonomy for plan construction, mutation, documents, and persistence.

Every error carries a machine-readable ``code`` alongside the message so that
callers (session results, CLI, sync clients) can branch without string matching.
"""

from __future__ import annotations


class MesoplanError(Exception):
    code = "mesoplan_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        field: str | None = None,
        docs_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.field = field
        self.docs_hint = docs_hint

    def to_dict(self) -> dict[str, str | None]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "docs_hint": self.docs_hint,
        }


class PlanInputError(MesoplanError):
    code = "invalid_plan_input"


class MutationError(MesoplanError):
    code = "mutation_failed"


class ExerciseNotFoundError(MutationError):
    code = "exercise_not_found"


class DayNotFoundError(MutationError):
    code = "day_not_found"


class InvalidReorderError(MutationError):
    code = "invalid_reorder"


class StaleGenerationError(MutationError):
    code = "stale_generation"

    def __init__(self, *, expected: int, current: int) -> None:
        super().__init__(
            f"plan generation advanced from {expected} to {current}; reload the plan and retry",
            docs_hint="Read the current plan and re-issue the edit against its generation.",
        )
        self.expected = expected
        self.current = current


class PlanDocumentError(MesoplanError):
    code = "invalid_document"


class PersistenceError(MesoplanError):
    code = "persistence_failed"

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
