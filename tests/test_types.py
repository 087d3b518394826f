from tootloom.types import Method, Parameters


def test_parameters_preserve_order_and_repeats():
    params = Parameters().append("b", "2").append("a", 1).append("b", "3")
    assert params.items() == [("b", "2"), ("a", "1"), ("b", "3")]
    assert params.get("b") == "2"
    assert params.get("missing") is None


def test_parameters_lists_use_array_keys():
    params = Parameters().append("media_ids", ["1", "2"]).append("tags[]", ["x"])
    assert params.items() == [("media_ids[]", "1"), ("media_ids[]", "2"), ("tags[]", "x")]


def test_parameters_booleans_are_lowercase():
    assert Parameters().append("local", True).append("remote", False).items() == [
        ("local", "true"),
        ("remote", "false"),
    ]


def test_parameters_to_query_encodes_values():
    params = Parameters().append("status", "hi & bye").append("ids", [1, 2])
    assert params.to_query() == "status=hi+%26+bye&ids%5B%5D=1&ids%5B%5D=2"


def test_parameters_without_and_copy_do_not_mutate():
    params = Parameters().append("max_id", "1").append("tag", "x")
    trimmed = params.without("max_id")
    copied = params.copy().append("extra", "y")

    assert trimmed.items() == [("tag", "x")]
    assert len(params) == 2
    assert len(copied) == 3


def test_empty_parameters_are_falsy():
    assert not Parameters()
    assert Parameters().extend(Parameters().append("a", "1"))


def test_method_values():
    assert Method("PATCH") is Method.PATCH
    assert [m.value for m in Method] == ["GET", "POST", "PATCH", "PUT", "DELETE"]
