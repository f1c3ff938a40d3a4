"""Tests for the transform registry and built-in transforms."""

import logging

import pytest

from binding_resolver.errors import TransformFailed
from binding_resolver.registry import TransformRegistry, default_registry


@pytest.fixture
def registry() -> TransformRegistry:
    return default_registry()


class TestBuiltinTransforms:
    def test_builtins_registered(self, registry):
        for name in ("pick", "flatten", "first", "last", "count", "extractProperties"):
            assert registry.get(name) is not None, f"missing built-in {name}"

    def test_flatten_one_level(self, registry):
        assert registry.apply([[1, 2], [3, [4]], 5], "flatten", {}) == [1, 2, 3, [4], 5]

    def test_flatten_non_array_passthrough(self, registry):
        assert registry.apply({"a": 1}, "flatten", {}) == {"a": 1}

    def test_first_and_last(self, registry):
        assert registry.apply([1, 2, 3], "first", {}) == 1
        assert registry.apply([1, 2, 3], "last", {}) == 3

    def test_first_and_last_of_empty_is_none(self, registry):
        assert registry.apply([], "first", {}) is None
        assert registry.apply([], "last", {}) is None

    def test_count(self, registry):
        assert registry.apply([1, 2, 3], "count", {}) == 3
        assert registry.apply({"not": "a list"}, "count", {}) == 0

    def test_extract_properties_array(self, registry):
        data = [{"id": "1", "properties": {"name": "A"}}, {"id": "2"}]
        assert registry.apply(data, "extractProperties", {}) == [{"name": "A"}, {"id": "2"}]

    def test_extract_properties_single(self, registry):
        assert registry.apply({"properties": {"x": 1}}, "extractProperties", {}) == {"x": 1}

    def test_pick_with_argument(self, registry):
        data = [{"properties": {"title": "A"}}, {"properties": {"title": "B"}}]
        assert registry.apply(data, "pick:properties.title", {}) == ["A", "B"]

    def test_pick_single_object(self, registry):
        assert registry.apply({"name": "Acme"}, "pick:name", {}) == "Acme"

    def test_bare_pick_returns_data(self, registry):
        assert registry.apply({"a": 1}, "pick", {}) == {"a": 1}


class TestTransformRegistry:
    def test_unknown_transform_returns_data_unchanged(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            assert registry.apply([1, 2], "doesNotExist", {}) == [1, 2]
        assert "doesNotExist" in caplog.text

    def test_argument_on_non_parameterized_is_unknown(self, registry):
        assert registry.lookup("first:x") is None

    def test_register_custom(self, registry):
        registry.register("double", lambda data, ctx: [x * 2 for x in data])
        assert registry.apply([1, 2], "double", {}) == [2, 4]

    def test_register_overwrites(self, registry):
        registry.register("count", lambda data, ctx: -1)
        assert registry.apply([1], "count", {}) == -1

    def test_transform_receives_context(self, registry):
        registry.register("scale", lambda data, ctx: data * ctx["factor"])
        assert registry.apply(3, "scale", {"factor": 10}) == 30

    def test_failing_transform_raises_transform_failed(self, registry):
        def boom(data, ctx):
            raise ValueError("bad shape")

        registry.register("boom", boom)
        with pytest.raises(TransformFailed) as exc:
            registry.apply([1], "boom", {})
        assert str(exc.value) == "Transform 'boom' failed: bad shape"
        assert isinstance(exc.value.cause, ValueError)

    def test_default_registries_are_independent(self):
        first = default_registry()
        second = default_registry()
        first.register("custom", lambda data, ctx: data)
        assert first.get("custom") is not None
        assert second.get("custom") is None

    def test_copy_is_independent(self, registry):
        clone = registry.copy()
        clone.register("extra", lambda data, ctx: data)
        assert registry.get("extra") is None
        assert clone.count() == registry.count() + 1
