"""Exception taxonomy for the habit core.

Validation problems are raised before any local state is touched. Remote write
failures are raised after the coordinator has reverted to the store's truth.
"""


class HabitCoreError(Exception):
    pass


class HabitValidationError(HabitCoreError, ValueError):
    pass


class HabitNotFoundError(HabitCoreError, LookupError):
    pass


class RemoteWriteError(HabitCoreError):
    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
