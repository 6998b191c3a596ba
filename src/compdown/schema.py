"""Document schema for compdown.

Pydantic models for the declarative document: folders, imported files,
compositions, layers, shapes, transforms, keyframes and markers.

Composition defaults are filled in here, so a validated document always
carries concrete width/height/duration/framerate/pixelAspect/color values.
Optional fields elsewhere stay absent (None) and are dropped by to_dict().

Only Transform rejects unknown keys. Every other model ignores them, so
documents written for newer versions still load.

Cross-references (folder parents, layer parents, layer file ids) are NOT
checked here. They are resolved in materialize.py.
"""

from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BeforeValidator,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    PlainValidator,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    Tag,
    model_validator,
)
from pydantic_core import PydanticCustomError


# ── Static tables ─────────────────────────────────────────────────

LAYER_TYPES = ("solid", "null", "adjustment", "text", "shape")

BLENDING_MODES = frozenset({
    "normal", "dissolve",
    "darken", "multiply", "colorBurn", "linearBurn", "darkerColor",
    "lighten", "screen", "colorDodge", "linearDodge", "lighterColor",
    "overlay", "softLight", "hardLight", "vividLight", "linearLight",
    "pinLight", "hardMix",
    "difference", "exclusion", "subtract", "divide",
    "hue", "saturation", "color", "luminosity",
})

COMPOSITION_DEFAULTS = MappingProxyType({
    "width": 1920,
    "height": 1080,
    "duration": 10,
    "framerate": 30,
    "pixelAspect": 1,
})

DEFAULT_COMP_COLOR = "000000"

# Top-level layers go into whatever composition is open in the host.
TIMELINE_DESTINATION = "_timeline"

EASINGS = ("linear", "easeIn", "easeOut", "easeInOut", "hold")

SHAPE_TYPES = ("rectangle", "ellipse", "polygon", "star", "path")

# Keys each shape type must define.
SHAPE_REQUIREMENTS = MappingProxyType({
    "rectangle": ("size",),
    "ellipse": ("size",),
    "polygon": ("points", "outerRadius"),
    "star": ("points", "outerRadius", "innerRadius"),
    "path": ("vertices",),
})

SHAPE_OPERATOR_TYPES = (
    "trimPaths", "zigZag", "repeater", "offsetPaths", "puckerBloat",
    "roundCorners", "mergePaths", "twist", "wigglePaths",
)

# Tagged-union labels pydantic inserts into error locations. They are not
# document keys and are stripped before errors are reported.
UNION_TAGS = frozenset({
    "static-value", "keyframed", "controller-name", "controller-property",
})


# ── Field types ───────────────────────────────────────────────────

Name = Annotated[StrictStr, Field(min_length=1)]

HexColor = Annotated[StrictStr, Field(pattern=r"^[0-9A-Fa-f]{6}$")]

Number = Annotated[StrictFloat, Field(allow_inf_nan=False)]

NonNegative = Annotated[StrictFloat, Field(ge=0, allow_inf_nan=False)]

Positive = Annotated[StrictFloat, Field(gt=0, allow_inf_nan=False)]

Pair = tuple[Number, Number]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _integral_to_int(value: Any) -> Any:
    """Hosts report sizes like 1920.0. Whole floats count as integers."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Dimension = Annotated[StrictInt, Field(gt=0), BeforeValidator(_integral_to_int)]


def _check_identifier(value: Any) -> Union[str, int]:
    """File ids may be strings or integers, never booleans."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError("must be a string or an integer id")
    return value


def _check_keyframe_value(value: Any) -> Union[float, list]:
    if _is_number(value):
        return value
    if (
        isinstance(value, (list, tuple))
        and len(value) in (2, 3)
        and all(_is_number(v) for v in value)
    ):
        return list(value)
    raise ValueError("keyframe value must be a number or a list of 2 or 3 numbers")


Identifier = Annotated[Union[str, int], PlainValidator(_check_identifier)]

KeyframeValue = Annotated[Any, PlainValidator(_check_keyframe_value)]


def _anchored_error(error_type: str, message: str, anchor: str | None = None):
    """Build a cross-field error that points at one key of the object.

    The anchor is appended to the error path so the line mapper can find
    a source line for it.
    """
    context = {"anchor": anchor} if anchor else None
    return PydanticCustomError(error_type, message, context)


# ── Base model ────────────────────────────────────────────────────


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    def to_dict(self) -> dict:
        """Plain JSON-compatible dict, absent optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


# ── Keyframes and animatable values ───────────────────────────────


class Keyframe(_Model):
    time: NonNegative
    value: KeyframeValue
    easing: Literal[EASINGS] | None = None


def _static_or_keyframed(value: Any) -> str:
    """A list whose first item is a mapping is a keyframe list."""
    if isinstance(value, list) and value and isinstance(value[0], (dict, Keyframe)):
        return "keyframed"
    return "static-value"


def _animatable(static_type):
    return Annotated[
        Union[
            Annotated[static_type, Tag("static-value")],
            Annotated[list[Keyframe], Tag("keyframed")],
        ],
        Discriminator(_static_or_keyframed),
    ]


AnimatableNumber = _animatable(Number)

AnimatablePair = _animatable(Pair)

AnimatableColor = _animatable(HexColor)


# ── Shapes ────────────────────────────────────────────────────────


class ShapeFill(_Model):
    color: AnimatableColor
    opacity: AnimatableNumber | None = None


class ShapeStroke(_Model):
    color: AnimatableColor
    width: AnimatableNumber | None = None
    opacity: AnimatableNumber | None = None


class ShapeOperator(BaseModel):
    """Path operator. Only the operator type is checked; its parameters
    are passed through to the host as written."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: Literal[SHAPE_OPERATOR_TYPES]


class Shape(_Model):
    type: Literal[SHAPE_TYPES]
    name: StrictStr | None = None
    position: AnimatablePair | None = None
    fill: ShapeFill | None = None
    stroke: ShapeStroke | None = None
    operators: list[ShapeOperator] | None = None

    # rectangle / ellipse
    size: AnimatablePair | None = None
    roundness: AnimatableNumber | None = None

    # polygon / star
    points: AnimatableNumber | None = None
    outerRadius: AnimatableNumber | None = None
    innerRadius: AnimatableNumber | None = None
    outerRoundness: AnimatableNumber | None = None
    innerRoundness: AnimatableNumber | None = None
    rotation: AnimatableNumber | None = None

    # path
    vertices: Annotated[list[Pair], Field(min_length=1)] | None = None
    inTangents: list[Pair] | None = None
    outTangents: list[Pair] | None = None
    closed: StrictBool | None = None

    @model_validator(mode="after")
    def _check_required(self):
        required = SHAPE_REQUIREMENTS[self.type]
        missing = [key for key in required if getattr(self, key) is None]
        if missing:
            names = ", ".join(f"'{key}'" for key in missing)
            raise _anchored_error(
                "shape_fields", f"{self.type} shapes require {names}", "type",
            )
        return self


# ── Layers ────────────────────────────────────────────────────────


class Transform(_Model):
    model_config = ConfigDict(extra="forbid", frozen=True)

    anchorPoint: Pair | None = None
    position: Pair | None = None
    scale: Pair | None = None
    rotation: Number | None = None
    opacity: Annotated[StrictFloat, Field(ge=0, le=100)] | None = None


class Layer(_Model):
    """One layer: a built-in type (solid/null/adjustment/text/shape) or an
    instance of an imported file or another composition (``file``).

    When both ``type`` and ``file`` are given, ``file`` wins.
    """

    name: Name
    type: Literal[LAYER_TYPES] | None = None
    file: Identifier | None = None

    # solid
    color: HexColor | None = None
    width: Dimension | None = None
    height: Dimension | None = None

    # text
    text: StrictStr | None = None
    fontSize: Positive | None = None
    font: StrictStr | None = None

    # shape
    shapes: list[Shape] | None = None

    # timing
    inPoint: NonNegative | None = None
    outPoint: NonNegative | None = None
    startTime: NonNegative | None = None

    # flags
    enabled: StrictBool | None = None
    shy: StrictBool | None = None
    locked: StrictBool | None = None
    threeDLayer: StrictBool | None = None

    parent: StrictStr | None = None
    blendingMode: Literal[tuple(sorted(BLENDING_MODES))] | None = None
    transform: Transform | None = None

    @model_validator(mode="after")
    def _check_kind(self):
        if self.type is None and self.file is None:
            raise _anchored_error(
                "layer_kind",
                "Layer must have either a 'type' or a 'file' reference",
                "name",
            )
        if self.type == "solid" and self.color is None:
            raise _anchored_error(
                "solid_color", "Solid layers require a 'color'", "type",
            )
        if self.type == "text" and self.text is None:
            raise _anchored_error(
                "text_content", "Text layers require 'text' content", "type",
            )
        if self.type == "shape" and not self.shapes:
            raise _anchored_error(
                "shape_contents", "Shape layers require a non-empty 'shapes' list",
                "type",
            )
        return self


# ── Compositions ──────────────────────────────────────────────────


class Marker(_Model):
    time: Number
    comment: StrictStr | None = None
    duration: NonNegative | None = None
    chapter: StrictStr | None = None
    url: StrictStr | None = None
    label: Annotated[StrictInt, Field(ge=0, le=16)] | None = None


class EssentialGraphicsProperty(_Model):
    property: Name
    name: StrictStr | None = None


EssentialGraphicsItem = Annotated[
    Union[
        Annotated[Name, Tag("controller-name")],
        Annotated[EssentialGraphicsProperty, Tag("controller-property")],
    ],
    Discriminator(
        lambda v: "controller-name" if isinstance(v, str) else "controller-property"
    ),
]


class Composition(_Model):
    name: Name
    width: Dimension = COMPOSITION_DEFAULTS["width"]
    height: Dimension = COMPOSITION_DEFAULTS["height"]
    duration: Positive = float(COMPOSITION_DEFAULTS["duration"])
    framerate: Positive = float(COMPOSITION_DEFAULTS["framerate"])
    pixelAspect: Positive = float(COMPOSITION_DEFAULTS["pixelAspect"])
    color: HexColor = DEFAULT_COMP_COLOR
    folder: StrictStr | None = None
    layers: list[Layer] | None = None
    essentialGraphics: list[EssentialGraphicsItem] | None = None
    markers: list[Marker] | None = None

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        # "width: null" falls back to the default like an omitted key.
        if isinstance(data, dict):
            defaulted = set(COMPOSITION_DEFAULTS) | {"color"}
            return {k: v for k, v in data.items() if not (k in defaulted and v is None)}
        return data


# ── Project items ─────────────────────────────────────────────────


class Folder(_Model):
    name: Name
    parent: StrictStr | None = None


class FileRef(_Model):
    id: Identifier
    path: Name
    sequence: StrictBool | None = None
    folder: StrictStr | None = None


# ── Document ──────────────────────────────────────────────────────


class Document(_Model):
    destination: Literal[TIMELINE_DESTINATION] | None = None
    folders: list[Folder] | None = None
    files: list[FileRef] | None = None
    # Reverse reads emit "compositions"; both spellings are accepted.
    comps: list[Composition] | None = Field(
        None, validation_alias=AliasChoices("comps", "compositions"),
    )
    layers: list[Layer] | None = None

    @model_validator(mode="after")
    def _check_sections(self):
        if not (self.folders or self.files or self.comps):
            raise _anchored_error(
                "empty_sections",
                "Document must define at least one of 'folders', 'files' or 'comps'",
            )
        return self
