class AppError(Exception):
    """Base class for all engine exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ElectiveSelectionError(AppError):
    """Raised when an elective selection cannot be committed."""
    reason = "rejected"

    def __init__(self, group_name: str, message: str, details: dict = None):
        self.group_name = group_name
        super().__init__(message, status_code=400, details={"group": group_name, **(details or {})})

class ElectiveLockedError(ElectiveSelectionError):
    """Raised when a group already holds a confirmed selection."""
    reason = "locked"

    def __init__(self, group_name: str):
        super().__init__(group_name, "This elective is locked and cannot be changed.")

class ElectiveCapExceededError(ElectiveSelectionError):
    """Raised when more options are chosen than the group allows."""
    reason = "cap_exceeded"

    def __init__(self, group_name: str, choose_count: int):
        super().__init__(
            group_name,
            f"You can only choose {choose_count} option(s) for {group_name}",
            details={"choose_count": choose_count},
        )

class IncompleteElectiveSelectionError(ElectiveSelectionError):
    """Raised when fewer options are confirmed than the group requires."""
    reason = "incomplete"

    def __init__(self, group_name: str, choose_count: int):
        super().__init__(
            group_name,
            f"You must choose exactly {choose_count} option(s) for {group_name}.",
            details={"choose_count": choose_count},
        )

class UnknownElectiveOptionError(ElectiveSelectionError):
    reason = "unknown_option"

    def __init__(self, group_name: str, option: str):
        super().__init__(
            group_name,
            f"{option} is not an option of {group_name}.",
            details={"option": option},
        )

class EmptyElectiveSelectionError(ElectiveSelectionError):
    reason = "empty"

    def __init__(self, group_name: str):
        super().__init__(group_name, f"Choose at least one option for {group_name}.")

class UnsupportedExportFormatError(AppError):
    """Raised when no encoder is registered for a download format."""
    def __init__(self, fmt: str, supported: list[str]):
        super().__init__(
            f"Unsupported export format {fmt!r}",
            status_code=400,
            details={"supported": supported},
        )
