"""MediPass: medical records with time-limited, redacted sharing links."""

from .settings import MediPassSettings
from .main import create_app

__all__ = ["create_app", "MediPassSettings"]
