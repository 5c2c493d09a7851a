from src.services import scheduler_service


__all__ = [
    "scheduler_service",
]
