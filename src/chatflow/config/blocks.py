"""Block and edge models with discriminated unions.

Type-safe block definitions using Pydantic discriminated unions. Each block
type has its own class with only the fields it needs, discriminated by
``type``. JSON uses the editor's camelCase names (``variableToSave``,
``sourceHandle``); Python code uses snake_case attributes.

Defaults are lenient so half-edited flows from the editor still load.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

MAX_BUTTON_OPTIONS = 3


class BlockType(str, Enum):
    """Discriminator values of the sixteen block variants."""

    START = "Start"
    TEXT = "Text"
    IMAGE = "Image"
    AUDIO = "Audio"
    VIDEO = "Video"
    DOCUMENT = "Document"
    LOCATION = "Location"
    TEMPLATE = "Template"
    OPTIONS = "Options"
    LIST = "List"
    AI_CALL = "AICall"
    CONDITION = "Condition"
    SAVE_RESPONSE = "SaveResponse"
    DELAY = "Delay"
    INTEGRATION = "Integration"
    GROUP = "Group"


class ConditionOperator(str, Enum):
    """Comparison applied by a Condition block."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"


HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


class FlowModel(BaseModel):
    """Base for immutable, camelCase-aliased flow models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        coerce_numbers_to_str=True,
    )


class BlockOption(FlowModel):
    """One choice of an Options or List block; ``id`` doubles as the edge handle."""

    id: str
    label: str = ""


class ConditionClause(FlowModel):
    """Comparison between a stored variable and a literal value."""

    variable: str = ""
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: str = ""


class BaseBlock(FlowModel):
    """Fields shared by all block types."""

    id: str = Field(description="Unique block identifier within the flow")


class StartBlock(BaseBlock):
    """Entry point of a flow; carries no content."""

    type: Literal["Start"] = "Start"


class TextBlock(BaseBlock):
    type: Literal["Text"] = "Text"
    content: str = Field(default="", description="Message text (supports {{variable}})")


class ImageBlock(BaseBlock):
    type: Literal["Image"] = "Image"
    url: str = ""


class AudioBlock(BaseBlock):
    type: Literal["Audio"] = "Audio"
    url: str = ""


class VideoBlock(BaseBlock):
    type: Literal["Video"] = "Video"
    url: str = ""


class DocumentBlock(BaseBlock):
    type: Literal["Document"] = "Document"
    url: str = ""
    filename: str = ""


class LocationBlock(BaseBlock):
    type: Literal["Location"] = "Location"
    latitude: str = ""
    longitude: str = ""
    name: str = ""
    address: str = ""


class TemplateBlock(BaseBlock):
    """Reference to a pre-approved message template."""

    type: Literal["Template"] = "Template"
    template_name: str = ""
    variables: str = Field(default="", description="Comma-separated template variables")

    @property
    def variable_names(self) -> list[str]:
        """Template variables as a list, blanks dropped."""
        return [name.strip() for name in self.variables.split(",") if name.strip()]


class OptionsBlock(BaseBlock):
    """Question with up to three reply buttons, one route per option."""

    type: Literal["Options"] = "Options"
    message: str = ""
    options: tuple[BlockOption, ...] = Field(default=(), max_length=MAX_BUTTON_OPTIONS)


class ListBlock(BaseBlock):
    """Question with a menu of choices, one route per option."""

    type: Literal["List"] = "List"
    message: str = ""
    button_text: str = ""
    options: tuple[BlockOption, ...] = ()


class AICallBlock(BaseBlock):
    type: Literal["AICall"] = "AICall"
    prompt: str = ""
    variable_to_save: str = ""


class ConditionBlock(BaseBlock):
    """Routes through the ``then`` or ``else`` handle."""

    type: Literal["Condition"] = "Condition"
    clause: ConditionClause = Field(default_factory=ConditionClause)


class SaveResponseBlock(BaseBlock):
    """Prompt that waits for free text and stores it."""

    type: Literal["SaveResponse"] = "SaveResponse"
    message: str = ""
    variable_to_save: str = ""


class DelayBlock(BaseBlock):
    type: Literal["Delay"] = "Delay"
    seconds: float = 0.0


class IntegrationBlock(BaseBlock):
    """Outbound HTTP call whose response is stored in a variable."""

    type: Literal["Integration"] = "Integration"
    url: str = ""
    method: HttpMethod = "GET"
    headers: str = Field(default="", description="JSON object (supports {{variable}})")
    body: str = Field(default="", description="JSON document (supports {{variable}})")
    variable_to_save: str = ""

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class GroupBlock(BaseBlock):
    """Visual container only; traversal skips it."""

    type: Literal["Group"] = "Group"
    label: str = ""


# Plain union for exhaustive matching
AnyBlock = (
    StartBlock
    | TextBlock
    | ImageBlock
    | AudioBlock
    | VideoBlock
    | DocumentBlock
    | LocationBlock
    | TemplateBlock
    | OptionsBlock
    | ListBlock
    | AICallBlock
    | ConditionBlock
    | SaveResponseBlock
    | DelayBlock
    | IntegrationBlock
    | GroupBlock
)

# Discriminated union (for parsing)
Block = Annotated[AnyBlock, Field(discriminator="type")]

# Blocks that suspend waiting for a choice
ChoiceBlock = OptionsBlock | ListBlock

_block_adapter: TypeAdapter[AnyBlock] = TypeAdapter(Block)


def parse_block(data: object) -> AnyBlock:
    """Validate a single block from a dict (camelCase or snake_case keys)."""
    return _block_adapter.validate_python(data)


class Edge(FlowModel):
    """Directed connection; ``source_handle`` selects one output of the source."""

    id: str = ""
    source: str
    target: str
    source_handle: str | None = None


__all__ = [
    "AICallBlock",
    "AnyBlock",
    "AudioBlock",
    "BaseBlock",
    "Block",
    "BlockOption",
    "BlockType",
    "ChoiceBlock",
    "ConditionBlock",
    "ConditionClause",
    "ConditionOperator",
    "DelayBlock",
    "DocumentBlock",
    "Edge",
    "FlowModel",
    "GroupBlock",
    "HttpMethod",
    "ImageBlock",
    "IntegrationBlock",
    "ListBlock",
    "LocationBlock",
    "MAX_BUTTON_OPTIONS",
    "OptionsBlock",
    "SaveResponseBlock",
    "StartBlock",
    "TemplateBlock",
    "TextBlock",
    "VideoBlock",
    "parse_block",
]
