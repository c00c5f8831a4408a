"""
Tests for deep-merge utilities.
"""

from machina.utils import deep_copy_value, deep_merge


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_empty_partial_is_noop(self):
        """Test empty and None partials leave the base untouched."""
        base = {"a": 1, "nested": {"b": 2}}

        deep_merge(base, {})
        deep_merge(base, None)

        assert base == {"a": 1, "nested": {"b": 2}}

    def test_nested_mappings_merge(self):
        """Test nested mappings merge key by key."""
        base = {"options": {"units": "metric", "lang": "en"}}

        deep_merge(base, {"options": {"lang": "fr"}, "city": "Paris"})

        assert base == {"options": {"units": "metric", "lang": "fr"}, "city": "Paris"}

    def test_non_mapping_replaces(self):
        """Test lists and scalars replace instead of merging."""
        base = {"tags": ["a", "b"], "options": {"x": 1}}

        deep_merge(base, {"tags": ["c"], "options": "flat"})

        assert base == {"tags": ["c"], "options": "flat"}

    def test_partials_merge_in_call_order(self):
        """Test successive merges equal one merge of all partials in order."""
        partials = [
            {"a": 1, "n": {"x": 1}},
            {"b": 2, "n": {"y": 2}},
            {"a": 3, "n": {"x": 4}},
        ]

        stepwise = {}
        for partial in partials:
            deep_merge(stepwise, partial)

        assert stepwise == {"a": 3, "b": 2, "n": {"x": 4, "y": 2}}

    def test_source_mutation_does_not_leak(self):
        """Test later mutation of the partial does not affect the base."""
        partial = {"items": [1, 2], "nested": {"k": "v"}}
        base = deep_merge({}, partial)

        partial["items"].append(3)
        partial["nested"]["k"] = "changed"

        assert base == {"items": [1, 2], "nested": {"k": "v"}}

    def test_returns_base(self):
        """Test deep_merge returns the mapping it updated."""
        base = {}
        assert deep_merge(base, {"a": 1}) is base


class TestDeepCopyValue:
    """Tests for deep_copy_value."""

    def test_callables_kept_by_reference(self):
        """Test functions and callable objects are not copied."""

        class Handler:
            def __call__(self):
                return "called"

        handler = Handler()

        assert deep_copy_value(handler) is handler
        assert deep_copy_value(print) is print

    def test_uncopyable_kept_by_reference(self):
        """Test objects refusing deepcopy are kept as-is."""

        class Uncopyable:
            def __deepcopy__(self, memo):
                raise TypeError("no copies")

        value = Uncopyable()
        assert deep_copy_value(value) is value
