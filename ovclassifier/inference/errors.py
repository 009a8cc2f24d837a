"""
Error taxonomy for the classification pipeline.

Each error derives from the builtin it refines so that callers can
catch either the specific class or the familiar builtin.
"""


class ClassifierError(Exception):
    """Base class for all pipeline errors."""


class DeviceIndexOutOfRange(ClassifierError, IndexError):
    """Device index outside the last enumerated device list."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Device index {index} out of range for {count} device(s)")


class ModelParseError(ClassifierError, RuntimeError):
    """Model file is missing, unreadable or not a valid model graph."""


class ReshapeError(ClassifierError, RuntimeError):
    """Model rejected the requested input shape.

    Not fatal: the model is compiled at its native shape instead.
    """


class CompileError(ClassifierError, RuntimeError):
    """Backend failed to compile the model for the selected device."""


class ShapeMismatch(ClassifierError, ValueError):
    """Raw frame size does not match the session input resolution."""


class UninitializedSession(ClassifierError, RuntimeError):
    """No session was successfully created, or it has been released."""


class InferenceRuntimeError(ClassifierError, RuntimeError):
    """Failure while preprocessing, executing or reading back a frame."""
