"""Request-scoped values shared by API routes."""

from datetime import date


def get_today() -> date:
    """Date that default report ranges end on."""

    return date.today()
