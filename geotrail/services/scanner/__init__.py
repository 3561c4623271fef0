from .service import EventScanner

__all__ = ["EventScanner"]
