"""Fatal build checkpoint errors.

Each fatal checkpoint raises BuildAbortedError with a stable code. Warn
checkpoints never raise; they log and continue.
"""

CLONE_FAILED = "clone_failed"
TOOLCHAIN_MISSING = "toolchain_missing"
BUILD_DIR_REMOVE_FAILED = "build_dir_remove_failed"
BUILD_DIR_CREATE_FAILED = "build_dir_create_failed"
CHDIR_FAILED = "chdir_failed"
CONFIGURE_FAILED = "configure_failed"
BUILD_FAILED = "build_failed"
LOG_INIT_FAILED = "log_init_failed"


class BuildAbortedError(Exception):
    """Raised when a fatal checkpoint fails and the run must stop."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


__all__ = [
    "BUILD_DIR_CREATE_FAILED",
    "BUILD_DIR_REMOVE_FAILED",
    "BUILD_FAILED",
    "CHDIR_FAILED",
    "CLONE_FAILED",
    "CONFIGURE_FAILED",
    "LOG_INIT_FAILED",
    "TOOLCHAIN_MISSING",
    "BuildAbortedError",
]
