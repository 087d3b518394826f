# tootloom/codecs.py
"""Scalar codecs for Mastodon values that use bespoke wire formats.

A codec is a pair of pure functions between a wire string and an in-memory
value. Codecs are never looked up by type: every entity field that needs one
declares it through an `Annotated` alias such as `DimensionField`, so the
binding is visible in the model definition.
"""

import re
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Annotated, Any, ClassVar, Protocol, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    GetCoreSchemaHandler,
    PlainSerializer,
    PositiveInt,
)
from pydantic_core import CoreSchema, core_schema

from .exceptions import CodecFormatError

V = TypeVar("V")


class Codec(Protocol[V]):
    """Bidirectional converter between a wire string and a value."""

    name: str

    def decode(self, wire: str) -> V:
        """Parse `wire`, raising `CodecFormatError` if it breaks the grammar."""
        ...

    def encode(self, value: V) -> str:
        """Render `value` in its canonical wire form."""
        ...


# --- Dimension ---


class Dimension(BaseModel):
    """Width and height of an image or video, in pixels.

    Both components are strictly positive. The wire form is `"<width>x<height>"`.
    """

    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class DimensionCodec:
    """Codec for `Dimension` values such as `"1920x1080"`.

    Only ASCII digits around a single lower-case `x` are accepted. A zero
    component is rejected, as is anything with signs, spaces or extra
    separators.
    """

    name = "dimension"
    _pattern: ClassVar[re.Pattern[str]] = re.compile(r"([0-9]+)x([0-9]+)")

    def decode(self, wire: str) -> Dimension:
        match = self._pattern.fullmatch(wire)
        if match is None:
            raise CodecFormatError(
                f"Invalid dimension format: {wire!r}. Expected format: widthxheight",
                codec=self.name,
                value=wire,
            )
        width, height = int(match.group(1)), int(match.group(2))
        if width == 0 or height == 0:
            raise CodecFormatError(
                f"Dimension components must be greater than 0, got {wire!r}",
                codec=self.name,
                value=wire,
            )
        return Dimension(width=width, height=height)

    def encode(self, value: Dimension) -> str:
        return f"{value.width}x{value.height}"


# --- Scope ---


class ScopeName(str, Enum):
    """Closed set of OAuth scopes understood by Mastodon."""

    READ = "read"
    READ_ACCOUNTS = "read:accounts"
    READ_BLOCKS = "read:blocks"
    READ_BOOKMARKS = "read:bookmarks"
    READ_FAVOURITES = "read:favourites"
    READ_FILTERS = "read:filters"
    READ_FOLLOWS = "read:follows"
    READ_LISTS = "read:lists"
    READ_MUTES = "read:mutes"
    READ_NOTIFICATIONS = "read:notifications"
    READ_SEARCH = "read:search"
    READ_STATUSES = "read:statuses"
    WRITE = "write"
    WRITE_ACCOUNTS = "write:accounts"
    WRITE_BLOCKS = "write:blocks"
    WRITE_BOOKMARKS = "write:bookmarks"
    WRITE_CONVERSATIONS = "write:conversations"
    WRITE_FAVOURITES = "write:favourites"
    WRITE_FILTERS = "write:filters"
    WRITE_FOLLOWS = "write:follows"
    WRITE_LISTS = "write:lists"
    WRITE_MEDIA = "write:media"
    WRITE_MUTES = "write:mutes"
    WRITE_NOTIFICATIONS = "write:notifications"
    WRITE_REPORTS = "write:reports"
    WRITE_STATUSES = "write:statuses"
    PUSH = "push"

    @property
    def parent(self) -> "ScopeName | None":
        """The top-level scope this one belongs to, `None` for top-level scopes."""
        head, sep, _ = self.value.partition(":")
        return ScopeName(head) if sep else None


_SCOPE_ORDER = {name: index for index, name in enumerate(ScopeName)}


class Scope:
    """Immutable, order-irrelevant set of `ScopeName` values.

    The empty scope is legal. `str(scope)` gives the space-delimited wire form.
    """

    __slots__ = ("_names",)

    ALL: ClassVar["Scope"]

    def __init__(self, *names: ScopeName | str):
        self._names: frozenset[ScopeName] = frozenset(ScopeName(n) for n in names)

    @property
    def names(self) -> frozenset[ScopeName]:
        return self._names

    def includes(self, name: ScopeName | str) -> bool:
        """Whether `name` is granted, directly or through its parent scope."""
        name = ScopeName(name)
        return name in self._names or (
            name.parent is not None and name.parent in self._names
        )

    def __or__(self, other: "Scope") -> "Scope":
        return Scope(*self._names, *other._names)

    def __iter__(self):
        return iter(sorted(self._names, key=_SCOPE_ORDER.__getitem__))

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self._names == other._names

    def __hash__(self) -> int:
        return hash(self._names)

    def __str__(self) -> str:
        return SCOPE_CODEC.encode(self)

    def __repr__(self) -> str:
        return f"Scope({str(self)!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.is_instance_schema(cls)


Scope.ALL = Scope(ScopeName.READ, ScopeName.WRITE, ScopeName.PUSH)


class ScopeCodec:
    """Codec for space-delimited scope strings such as `"read write:media"`."""

    name = "scope"

    def decode(self, wire: str) -> Scope:
        names = []
        for token in wire.split():
            try:
                names.append(ScopeName(token))
            except ValueError:
                raise CodecFormatError(
                    f"Unknown scope {token!r} in {wire!r}",
                    codec=self.name,
                    value=wire,
                ) from None
        return Scope(*names)

    def encode(self, value: Scope) -> str:
        return " ".join(name.value for name in value)


# --- PrecisionDateTime ---


class Precision(str, Enum):
    """How much of a timestamp the server actually sent."""

    EXACT = "exact"
    START_OF_DAY = "start_of_day"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


class PrecisionDateTime(BaseModel):
    """A timestamp that remembers how precise the server's value was.

    Mastodon returns full ISO 8601 datetimes for most fields but bare dates
    for some (e.g. `last_status_at`). Unparseable values are kept as
    `INVALID` rather than failing the whole entity.
    """

    model_config = ConfigDict(frozen=True)

    precision: Precision
    instant: datetime | None = None
    source: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.instant is not None

    @classmethod
    def unavailable(cls) -> "PrecisionDateTime":
        return cls(precision=Precision.UNAVAILABLE)


class PrecisionDateTimeCodec:
    """Codec for ISO 8601 datetimes and dates.

    Decoding never raises: a value that is neither an offset datetime nor a
    plain date decodes to `Precision.INVALID`.
    """

    name = "precision_datetime"

    def decode(self, wire: str) -> PrecisionDateTime:
        try:
            parsed = datetime.fromisoformat(wire)
        except ValueError:
            parsed = None
        if parsed is not None and parsed.tzinfo is not None:
            return PrecisionDateTime(
                precision=Precision.EXACT, instant=parsed, source=wire
            )
        try:
            day = date.fromisoformat(wire)
        except ValueError:
            return PrecisionDateTime(precision=Precision.INVALID, source=wire)
        return PrecisionDateTime(
            precision=Precision.START_OF_DAY,
            instant=datetime.combine(day, time.min, tzinfo=UTC),
            source=wire,
        )

    def encode(self, value: PrecisionDateTime) -> str | None:
        if value.instant is None:
            return None
        if value.precision is Precision.START_OF_DAY:
            return value.instant.date().isoformat()
        return value.instant.isoformat().replace("+00:00", "Z")


DIMENSION_CODEC = DimensionCodec()
SCOPE_CODEC = ScopeCodec()
PRECISION_DATETIME_CODEC = PrecisionDateTimeCodec()


# --- Field bindings ---


def _decode_dimension(value: Any) -> Any:
    if isinstance(value, Dimension):
        return value
    if not isinstance(value, str):
        raise CodecFormatError(
            f"Dimension must be a string, got {type(value).__name__}",
            codec=DIMENSION_CODEC.name,
            value=repr(value),
        )
    return DIMENSION_CODEC.decode(value)


def _decode_scope(value: Any) -> Any:
    if isinstance(value, Scope):
        return value
    if isinstance(value, list):
        # Some servers send scopes as a JSON array
        value = " ".join(str(v) for v in value)
    if not isinstance(value, str):
        raise CodecFormatError(
            f"Scope must be a string, got {type(value).__name__}",
            codec=SCOPE_CODEC.name,
            value=repr(value),
        )
    return SCOPE_CODEC.decode(value)


def _decode_precision_datetime(value: Any) -> Any:
    if isinstance(value, PrecisionDateTime):
        return value
    if value is None:
        return PrecisionDateTime.unavailable()
    return PRECISION_DATETIME_CODEC.decode(str(value))


# CodecFormatError is not a ValueError, so pydantic lets it propagate unwrapped
DimensionField = Annotated[
    Dimension,
    BeforeValidator(_decode_dimension),
    PlainSerializer(DIMENSION_CODEC.encode, return_type=str),
]
ScopeField = Annotated[
    Scope,
    BeforeValidator(_decode_scope),
    PlainSerializer(SCOPE_CODEC.encode, return_type=str),
]
PrecisionDateTimeField = Annotated[
    PrecisionDateTime,
    BeforeValidator(_decode_precision_datetime),
    PlainSerializer(PRECISION_DATETIME_CODEC.encode, return_type=str | None),
]
