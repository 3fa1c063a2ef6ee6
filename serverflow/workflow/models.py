"""Wire contracts of the workflow API and the client-side workflow state."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue

WORKFLOW_ID_KEY = "__workflow_id"
CREATED_AT_KEY = "__created_at"
ERROR_STATE_KEY = "__error__"
INIT_STATE_KEY = "__init__"
RESERVED_PREFIX = "__"
DEFAULT_COMPLETION_STATES = ("__end__", "__final__", "__complete__")


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump with wire names; unset top-level optionals are omitted, nested nulls kept."""
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if value is not None}


class StateType(str, Enum):
    """Classification of a server FSM state."""

    TECHNICAL = "technical"
    INTEGRATION = "integration"
    SCREEN = "screen"
    SERVICE = "service"


# ----------------------------------------------------------------------
# Workflow definition


class Transition(_WireModel):
    target_state: str
    condition: Optional[str] = None
    event_name: Optional[str] = None


class Expression(_WireModel):
    """Variable computed by a technical state."""

    variable: str
    dependent_variables: List[str] = Field(default_factory=list)
    expression: str


class IntegrationConfig(_WireModel):
    """External API call performed by an integration state."""

    variable: str
    url: str
    params: Dict[str, str] = Field(default_factory=dict)
    method: str = "get"


class StateModel(_WireModel):
    state_type: StateType
    name: str
    transitions: List[Transition] = Field(default_factory=list)
    expressions: List[Expression] = Field(default_factory=list)
    integration_config: Optional[IntegrationConfig] = None
    initial_state: bool = False
    final_state: bool = False


class StateSet(_WireModel):
    states: List[StateModel]


class SaveWorkflowRequest(_WireModel):
    states: StateSet
    predefined_context: Dict[str, JsonValue] = Field(default_factory=dict)


class SaveWorkflowResponse(_WireModel):
    status: str
    wf_description_id: str
    wf_context_id: str


class HealthCheckResponse(_WireModel):
    status: str


# ----------------------------------------------------------------------
# Screen state payload


class ValidationConfig(_WireModel):
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    min_age: Optional[int] = Field(default=None, alias="minAge")
    max_age: Optional[int] = Field(default=None, alias="maxAge")


class LinkData(_WireModel):
    text: str
    url: str


class FieldData(_WireModel):
    """Input field; ``type`` is one of text, email, password, number, date, phone, checkbox."""

    id: str
    type: str
    label: str
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[ValidationConfig] = None
    mask: Optional[str] = None
    link: Optional[LinkData] = None


class ButtonData(_WireModel):
    """Button that fires ``event``; ``enabled`` may hold a ``{{variable}}`` condition."""

    id: str
    label: str
    event: str
    style: str = "primary"
    enabled: Optional[str] = None


class ActionData(_WireModel):
    event: str
    params: Dict[str, JsonValue] = Field(default_factory=dict)


class CardItem(_WireModel):
    id: str
    title: str
    price: Optional[str] = None
    features: Optional[List[str]] = None
    badge: Optional[str] = None
    highlighted: bool = False
    action: Optional[ActionData] = None


class StatusStyle(_WireModel):
    label: str
    color: str


class ComponentData(_WireModel):
    """Informational component (text, card_list, status_badge, progress_bar, conditional, image)."""

    type: str
    content: Optional[str] = None
    style: Optional[str] = None
    url: Optional[str] = None
    items: Optional[List[CardItem]] = None
    status: Optional[str] = None
    status_map: Optional[Dict[str, StatusStyle]] = Field(default=None, alias="statusMap")
    value: Optional[str] = None
    max: Optional[int] = None
    condition: Optional[str] = None
    if_true: Optional["ComponentData"] = Field(default=None, alias="ifTrue")
    if_false: Optional["ComponentData"] = Field(default=None, alias="ifFalse")


class ScreenData(_WireModel):
    title: Optional[str] = None
    description: Optional[str] = None
    fields: Optional[List[FieldData]] = None
    buttons: Optional[List[ButtonData]] = None
    components: Optional[List[ComponentData]] = None


# ----------------------------------------------------------------------
# Execution


class WorkflowExecutionRequest(_WireModel):
    client_session_id: str
    client_workflow_id: Optional[str] = None
    context: Dict[str, JsonValue] = Field(default_factory=dict)
    event_name: Optional[str] = None


class WorkflowExecutionResponse(_WireModel):
    session_id: str
    context: Dict[str, JsonValue]
    current_state: str
    state_type: StateType
    screen: Optional[ScreenData] = None


class WorkflowState(BaseModel):
    """Client snapshot of the active workflow session.

    Replaced wholesale after every successful call; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    workflow_id: str
    current_state: str
    state_type: StateType
    context: Dict[str, Any] = Field(default_factory=dict)
    screen: Optional[ScreenData] = None
    created_at: Optional[str] = None
    is_error: bool = False

    @property
    def is_transient(self) -> bool:
        """Technical and integration states advance on their own server-side."""
        return self.state_type in (StateType.TECHNICAL, StateType.INTEGRATION)

    @property
    def is_interactive(self) -> bool:
        return self.state_type is StateType.SCREEN

    def is_completed(self, completion_states: Iterable[str] = DEFAULT_COMPLETION_STATES) -> bool:
        """Detect terminal success from the state name; ``state_type`` alone cannot."""
        return not self.is_error and self.current_state in set(completion_states)

    @property
    def visible_context(self) -> Dict[str, Any]:
        return filter_user_visible_context(self.context)


def filter_user_visible_context(context: Dict[str, Any]) -> Dict[str, Any]:
    """Drop reserved ``__``-prefixed keys."""
    return {key: value for key, value in context.items() if not key.startswith(RESERVED_PREFIX)}
