"""Tests for {{path}} interpolation in strings and nested objects."""

import copy

from binding_resolver.interpolate import (
    extract_interpolation_keys,
    get_nested_value,
    has_interpolation,
    interpolate_object,
    interpolate_string,
    validate_interpolation_keys,
)
from core.types import ResolutionContext


class TestGetNestedValue:
    def test_dotted_path(self):
        assert get_nested_value({"user": {"name": "John"}}, "user.name") == "John"

    def test_list_index(self):
        assert get_nested_value({"items": [{"id": 1}, {"id": 2}]}, "items.1.id") == 2

    def test_missing_segment_is_none(self):
        assert get_nested_value({"user": {}}, "user.profile.name") is None

    def test_bad_list_index_is_none(self):
        assert get_nested_value({"items": [1]}, "items.5") is None
        assert get_nested_value({"items": [1]}, "items.first") is None

    def test_negative_index_is_none(self):
        assert get_nested_value({"items": [1, 2, 3]}, "items.-1") is None

    def test_underscore_attributes_not_read(self):
        ctx = ResolutionContext(route={"id": "1"})
        assert get_nested_value({"o": ctx}, "o.__init__.__globals__.__name__") is None
        assert get_nested_value({"o": ctx}, "o._private") is None
        assert interpolate_string("{{o.__class__}}", {"o": ctx}) == "{{o.__class__}}"

    def test_attribute_access_on_objects(self):
        assert get_nested_value({"o": ResolutionContext(route={"id": "1"})}, "o.route.id") == "1"

    def test_underscore_mapping_keys_still_resolve(self):
        assert get_nested_value({"row": {"_id": "x1"}}, "row._id") == "x1"

    def test_scalar_midway_is_none(self):
        assert get_nested_value({"count": 3}, "count.value") is None

    def test_resolution_context(self):
        ctx = ResolutionContext(route={"id": "42"}, values={"tenant": "acme"})
        assert get_nested_value(ctx, "route.id") == "42"
        assert get_nested_value(ctx, "tenant") == "acme"


class TestInterpolateString:
    def test_replaces_placeholder(self):
        assert interpolate_string("Hello {{user.name}}!", {"user": {"name": "John"}}) == "Hello John!"

    def test_url_with_route_param(self):
        ctx = {"route": {"id": "123"}}
        assert interpolate_string("/api/customers/{{route.id}}", ctx) == "/api/customers/123"

    def test_whitespace_inside_braces(self):
        assert interpolate_string("{{ route.id }}", {"route": {"id": "7"}}) == "7"

    def test_multiple_placeholders(self):
        ctx = {"a": 1, "b": "two"}
        assert interpolate_string("{{a}}-{{b}}-{{a}}", ctx) == "1-two-1"

    def test_unresolved_placeholder_left_verbatim(self):
        sql = "SELECT * FROM orders WHERE customer = '{{route.customerId}}'"
        assert interpolate_string(sql, {"route": {}}) == sql

    def test_none_value_left_verbatim(self):
        assert interpolate_string("{{x}}", {"x": None}) == "{{x}}"

    def test_objects_render_as_json(self):
        assert interpolate_string("{{f}}", {"f": {"a": [1, 2]}}) == '{"a": [1, 2]}'

    def test_booleans_render_lowercase(self):
        assert interpolate_string("{{on}}/{{off}}", {"on": True, "off": False}) == "true/false"

    def test_zero_is_not_treated_as_missing(self):
        assert interpolate_string("page={{p}}", {"p": 0}) == "page=0"

    def test_plain_string_unchanged(self):
        assert interpolate_string("no placeholders", {}) == "no placeholders"


class TestInterpolateObject:
    def test_nested_strings_interpolated(self):
        obj = {"filter": {"customerId": "{{route.id}}"}, "limit": 10}
        result = interpolate_object(obj, {"route": {"id": "123"}})
        assert result == {"filter": {"customerId": "123"}, "limit": 10}

    def test_arrays_interpolated_elementwise(self):
        result = interpolate_object(["{{a}}", 1, None, True], {"a": "x"})
        assert result == ["x", 1, None, True]

    def test_does_not_mutate_input(self):
        obj = {"filter": {"ids": ["{{route.id}}"], "status": "active"}, "limit": 5}
        original = copy.deepcopy(obj)
        result = interpolate_object(obj, {"route": {"id": "9"}})
        assert obj == original
        assert result is not obj
        assert result["filter"] is not obj["filter"]

    def test_idempotent(self):
        obj = {"q": "{{route.id}}", "nested": [{"v": "{{route.id}}"}]}
        ctx = {"route": {"id": "abc"}}
        assert interpolate_object(obj, ctx) == interpolate_object(obj, ctx)

    def test_non_string_leaves_pass_through(self):
        assert interpolate_object(3.5, {}) == 3.5
        assert interpolate_object(None, {}) is None


class TestInterpolationKeys:
    def test_has_interpolation(self):
        assert has_interpolation("id={{route.id}}")
        assert not has_interpolation("id=1")

    def test_extract_keys_unique_in_order(self):
        value = {"a": "{{route.id}} and {{user.name}}", "b": ["{{route.id}}"]}
        assert extract_interpolation_keys(value) == ["route.id", "user.name"]

    def test_validate_reports_missing(self):
        check = validate_interpolation_keys("{{route.id}}/{{route.tab}}", {"route": {"id": "1"}})
        assert not check.valid
        assert check.missing_keys == ["route.tab"]

    def test_validate_all_present(self):
        check = validate_interpolation_keys({"x": "{{a}}"}, {"a": 1})
        assert check.valid
        assert check.missing_keys == []
