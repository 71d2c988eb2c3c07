"""Shared FastAPI dependencies.

Reusable type aliases and dependency functions that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.
"""

from typing import Annotated

from fastapi import Depends, Request

from api_template.services.widget import WidgetStore


def get_widget_store(request: Request) -> WidgetStore:
    """Return the widget store created by ``create_app``."""
    return request.app.state.widgets


Widgets = Annotated[WidgetStore, Depends(get_widget_store)]
