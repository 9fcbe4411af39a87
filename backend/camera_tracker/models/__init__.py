from .detection import Detection

__all__ = ["Detection"]
