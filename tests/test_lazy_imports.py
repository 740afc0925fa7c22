"""Tests for signpost.__init__ — lazy imports cover all public names."""

import pytest

import signpost


@pytest.mark.parametrize("name", signpost.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(signpost, name)
    assert obj is not None, f"signpost.{name} resolved to None"


def test_router_is_the_routing_router() -> None:
    from signpost.routing.router import Router

    assert signpost.Router is Router


def test_unknown_name_raises_attribute_error() -> None:
    """Accessing an unregistered name raises AttributeError."""
    with pytest.raises(AttributeError, match="no attribute"):
        signpost.__getattr__("ThisDoesNotExist")
