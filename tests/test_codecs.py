"""Tests for the scalar codecs and their pydantic field bindings."""

from datetime import UTC, datetime

import pytest
from pydantic import BaseModel

from tootloom.codecs import (
    DIMENSION_CODEC,
    PRECISION_DATETIME_CODEC,
    SCOPE_CODEC,
    Dimension,
    DimensionField,
    Precision,
    PrecisionDateTimeField,
    Scope,
    ScopeField,
    ScopeName,
)
from tootloom.exceptions import CodecFormatError, DecodeError


class Sized(BaseModel):
    size: DimensionField


class Scoped(BaseModel):
    scopes: ScopeField


class Dated(BaseModel):
    created_at: PrecisionDateTimeField


# --- Dimension ---


@pytest.mark.parametrize(
    ("wire", "width", "height"),
    [("800x600", 800, 600), ("1x1", 1, 1), ("1920x1080", 1920, 1080)],
)
def test_dimension_decode(wire, width, height):
    assert DIMENSION_CODEC.decode(wire) == Dimension(width=width, height=height)


def test_dimension_encode_is_canonical():
    assert DIMENSION_CODEC.encode(Dimension(width=1920, height=1080)) == "1920x1080"
    assert str(Dimension(width=4, height=3)) == "4x3"


@pytest.mark.parametrize(
    ("width", "height"),
    [(1, 1), (640, 480), (1, 4096), (4096, 1), (2_147_483_647, 3_000_000_000)],
)
def test_dimension_encode_decode_preserves_value(width, height):
    value = Dimension(width=width, height=height)
    assert DIMENSION_CODEC.decode(DIMENSION_CODEC.encode(value)) == value


@pytest.mark.parametrize(
    "wire",
    ["800600", "", "x", "800x", "x600", "800X600", "-1x5", "8 x6", "1x2x3", "axb"],
)
def test_dimension_rejects_malformed(wire):
    with pytest.raises(CodecFormatError) as exc_info:
        DIMENSION_CODEC.decode(wire)
    assert exc_info.value.codec == "dimension"
    assert exc_info.value.value == wire


@pytest.mark.parametrize("wire", ["0x0", "0x600", "800x0"])
def test_dimension_rejects_zero_components(wire):
    with pytest.raises(CodecFormatError, match="greater than 0"):
        DIMENSION_CODEC.decode(wire)


def test_dimension_field_decodes_and_serializes():
    model = Sized.model_validate({"size": "800x600"})
    assert model.size == Dimension(width=800, height=600)
    assert model.model_dump(mode="json") == {"size": "800x600"}


def test_dimension_field_failure_is_a_decode_error():
    """The codec error escapes pydantic validation unwrapped."""
    with pytest.raises(CodecFormatError) as exc_info:
        Sized.model_validate({"size": "800600"})
    assert isinstance(exc_info.value, DecodeError)


def test_dimension_field_rejects_non_string():
    with pytest.raises(CodecFormatError):
        Sized.model_validate({"size": 800})


# --- Scope ---


def test_scope_decode_is_order_irrelevant():
    assert SCOPE_CODEC.decode("write:media read") == Scope(
        ScopeName.READ, ScopeName.WRITE_MEDIA
    )


def test_scope_encode_uses_declaration_order():
    scope = Scope(ScopeName.PUSH, ScopeName.WRITE, ScopeName.READ)
    assert SCOPE_CODEC.encode(scope) == "read write push"
    assert str(Scope.ALL) == "read write push"


@pytest.mark.parametrize(
    "scope",
    [
        Scope(),
        Scope(ScopeName.READ_ACCOUNTS),
        Scope.ALL,
        Scope(ScopeName.PUSH, ScopeName.READ_STATUSES, ScopeName.WRITE_MEDIA),
        Scope(ScopeName.READ, ScopeName.READ_STATUSES),
    ],
    ids=["empty", "sub-scope", "all", "mixed", "parent-and-child"],
)
def test_scope_encode_decode_preserves_value(scope):
    assert SCOPE_CODEC.decode(SCOPE_CODEC.encode(scope)) == scope


def test_scope_empty_is_legal():
    scope = SCOPE_CODEC.decode("")
    assert len(scope) == 0
    assert SCOPE_CODEC.encode(scope) == ""


def test_scope_collapses_duplicates_and_whitespace():
    assert SCOPE_CODEC.decode("  read   read\twrite ") == Scope("read", "write")


def test_scope_rejects_unknown_token():
    with pytest.raises(CodecFormatError, match="admin:read"):
        SCOPE_CODEC.decode("read admin:read")


def test_scope_includes_sub_scopes_of_granted_parent():
    scope = Scope(ScopeName.READ)
    assert scope.includes(ScopeName.READ_STATUSES)
    assert not scope.includes(ScopeName.WRITE_MEDIA)
    assert ScopeName.READ in scope


def test_scope_union():
    assert Scope("read") | Scope("push") == Scope("read", "push")


def test_scope_field_accepts_string_and_list():
    assert Scoped.model_validate({"scopes": "read write"}).scopes == Scope(
        "read", "write"
    )
    assert Scoped.model_validate({"scopes": ["read", "push"]}).scopes == Scope(
        "read", "push"
    )
    assert Scoped(scopes=Scope("read")).model_dump() == {"scopes": "read"}


# --- PrecisionDateTime ---


def test_precision_datetime_exact():
    value = PRECISION_DATETIME_CODEC.decode("2022-11-20T13:45:10.000Z")
    assert value.precision is Precision.EXACT
    assert value.instant == datetime(2022, 11, 20, 13, 45, 10, tzinfo=UTC)
    assert value.is_valid


def test_precision_datetime_date_only_is_start_of_day():
    value = PRECISION_DATETIME_CODEC.decode("2022-11-20")
    assert value.precision is Precision.START_OF_DAY
    assert value.instant == datetime(2022, 11, 20, tzinfo=UTC)
    assert PRECISION_DATETIME_CODEC.encode(value) == "2022-11-20"


def test_precision_datetime_invalid_keeps_source():
    value = PRECISION_DATETIME_CODEC.decode("yesterday")
    assert value.precision is Precision.INVALID
    assert value.source == "yesterday"
    assert not value.is_valid
    assert PRECISION_DATETIME_CODEC.encode(value) is None


def test_precision_datetime_encode_uses_z_suffix():
    value = PRECISION_DATETIME_CODEC.decode("2022-11-20T13:45:10+00:00")
    assert PRECISION_DATETIME_CODEC.encode(value) == "2022-11-20T13:45:10Z"


def test_precision_datetime_field_null_is_unavailable():
    assert Dated.model_validate({"created_at": None}).created_at.precision is (
        Precision.UNAVAILABLE
    )
