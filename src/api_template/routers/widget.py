"""Widget endpoints."""

from fastapi import APIRouter

from api_template.dependencies import Widgets
from api_template.schemas.problem import ProblemDetails, ValidationProblemDetails
from api_template.schemas.widget import WidgetCreate, WidgetListResponse, WidgetResponse

router = APIRouter(prefix="/api/widgets", tags=["widgets"])

_VALIDATION_PROBLEM = {422: {"model": ValidationProblemDetails}}
_NOT_FOUND = {404: {"model": ProblemDetails}}
_CONFLICT = {409: {"model": ProblemDetails}}


@router.get("", response_model=WidgetListResponse, status_code=200)
async def list_widgets(widgets: Widgets) -> WidgetListResponse:
    """List all widgets."""
    items = widgets.list_all()
    return WidgetListResponse(
        items=[WidgetResponse.model_validate(w) for w in items],
        total=len(items),
    )


@router.get(
    "/{widget_id}",
    response_model=WidgetResponse,
    responses={**_NOT_FOUND, **_VALIDATION_PROBLEM},
)
async def get_widget(widget_id: int, widgets: Widgets) -> WidgetResponse:
    """Fetch a single widget by id."""
    return WidgetResponse.model_validate(widgets.get(widget_id))


@router.post(
    "",
    response_model=WidgetResponse,
    status_code=201,
    responses={**_CONFLICT, **_VALIDATION_PROBLEM},
)
async def create_widget(payload: WidgetCreate, widgets: Widgets) -> WidgetResponse:
    """Create a widget. Names must be unique."""
    widget = widgets.create(payload.name, payload.description, payload.quantity)
    return WidgetResponse.model_validate(widget)
