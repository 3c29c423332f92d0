import pytest

from chorus.errors import OutputAddressError
from chorus.outputs import OutputMap, format_address


def test_set_creates_intermediate_records() -> None:
    outputs = OutputMap()
    outputs.set(("profile", "name"), "Ada")

    assert outputs.get(("profile", "name")) == "Ada"
    assert outputs.to_dict() == {"profile": {"name": "Ada"}}
    assert "profile" in outputs


def test_get_returns_default_for_missing_path() -> None:
    outputs = OutputMap()
    assert outputs.get(("missing", 0, "x")) is None
    assert outputs.get(("missing",), "fallback") == "fallback"


def test_ensure_list_creates_empty_list_once() -> None:
    outputs = OutputMap()
    items = outputs.ensure_list(("items",))
    items.append({"a": 1})

    assert outputs.ensure_list(("items",)) is items
    assert outputs["items"] == [{"a": 1}]


def test_ensure_list_rejects_non_list_value() -> None:
    outputs = OutputMap()
    outputs.set(("items",), "not a list")

    with pytest.raises(OutputAddressError) as exc_info:
        outputs.ensure_list(("items",))
    assert exc_info.value.path == ("items",)


def test_list_index_addressing_writes_into_elements() -> None:
    outputs = OutputMap()
    outputs.ensure_list(("turns",)).append({})
    outputs.set(("turns", 0, "answer"), "yes")

    assert outputs.to_dict() == {"turns": [{"answer": "yes"}]}


def test_writing_into_a_string_element_is_rejected() -> None:
    outputs = OutputMap()
    outputs.set(("topics",), ["a", "b"])

    with pytest.raises(OutputAddressError):
        outputs.set(("topics", 0, "summary"), "x")


def test_index_past_end_is_rejected() -> None:
    outputs = OutputMap()
    outputs.set(("items",), [])

    with pytest.raises(OutputAddressError):
        outputs.set(("items", 3), "x")


def test_to_dict_is_a_copy() -> None:
    outputs = OutputMap()
    outputs.set(("items",), ["a"])
    snapshot = outputs.to_dict()
    snapshot["items"].append("b")

    assert outputs["items"] == ["a"]


def test_format_address() -> None:
    assert format_address(("turns", 2, "answer")) == "turns/2/answer"
