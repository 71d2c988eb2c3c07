"""Widget business logic.

The template ships an in-memory store so the sample endpoints work without
any backing service. Replace ``WidgetStore`` with a real repository when
building on the template.
"""

from dataclasses import dataclass, field
from itertools import count

from api_template.exceptions import ConflictError, NotFoundError


@dataclass
class Widget:
    id: int
    name: str
    description: str | None = None
    quantity: int = 0


@dataclass
class WidgetStore:
    """Process-local widget storage keyed by id."""

    _widgets: dict[int, Widget] = field(default_factory=dict)
    _ids: count = field(default_factory=lambda: count(1))

    def list_all(self) -> list[Widget]:
        return list(self._widgets.values())

    def get(self, widget_id: int) -> Widget:
        widget = self._widgets.get(widget_id)
        if widget is None:
            raise NotFoundError("Widget", widget_id)
        return widget

    def create(self, name: str, description: str | None = None, quantity: int = 0) -> Widget:
        """Add a widget; names are unique, case-insensitively."""
        if any(w.name.casefold() == name.casefold() for w in self._widgets.values()):
            raise ConflictError(f"Widget named {name!r} already exists")
        widget = Widget(id=next(self._ids), name=name, description=description, quantity=quantity)
        self._widgets[widget.id] = widget
        return widget
