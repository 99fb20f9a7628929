"""
Tests for di/definition.py and di/value.py.
"""
import pytest

from core.errors import InvalidConfigError
from di.container import Container
from di.definition import Definition
from di.value import Value

from tests.di.sample_services import Cache, Database


# =============================================================================
# Definition Tests
# =============================================================================

class TestDefinition:
    """Tests for the fluent definition builder."""

    def test_of_sets_class(self):
        """Test the class lands in both class_name and config."""
        definition = Definition.of(Cache)

        assert definition.class_name is Cache
        assert definition.config == {"class": Cache}
        assert definition.is_valid()

    def test_empty_definition_is_invalid(self):
        """Test a definition without class."""
        definition = Definition.create()

        assert not definition.is_valid()
        assert definition.dump_definition() == {}

    def test_with_config_keeps_class(self):
        """Test replacing config does not lose the class."""
        definition = Definition.of(Database).with_config({"dsn": "sqlite://x"})

        assert definition.config == {"dsn": "sqlite://x", "class": Database}

    def test_with_config_can_set_class(self):
        """Test a class inside the config wins."""
        definition = Definition.create().with_config({"class": Cache, "ttl": 1})

        assert definition.class_name is Cache
        assert definition.is_valid()

    def test_dump_without_params(self):
        """Test the config map form."""
        assert Definition.of(Cache).dump_definition() == {"class": Cache}

    def test_dump_with_params(self):
        """Test the [config, params] form."""
        dumped = Definition.of(Cache).with_params([10]).dump_definition()

        assert dumped == [{"class": Cache}, [10]]

    def test_dump_is_a_copy(self):
        """Test mutating the dump leaves the builder untouched."""
        definition = Definition.of(Cache)
        dumped = definition.dump_definition()
        dumped["ttl"] = 5

        assert "ttl" not in definition.config

    def test_chaining(self):
        """Test every builder method returns the definition."""
        definition = Definition.create().of_class(Cache).with_params([1]).with_config({})

        assert definition.dump_definition() == [{"class": Cache}, [1]]


# =============================================================================
# Value Tests
# =============================================================================

class TestValue:
    """Tests for deferred Value callbacks."""

    def test_resolve_passes_container(self):
        """Test the callback receives the container."""
        container = Container()
        value = Value.of(lambda c: c)

        assert value.resolve(container) is container

    def test_callback_must_be_callable(self):
        """Test non-callables are rejected."""
        with pytest.raises(InvalidConfigError):
            Value("not callable")

    def test_from_state(self):
        """Test restoring from an attribute map."""
        value = Value.from_state({"callback": lambda c: "restored"})

        assert value.resolve(Container()) == "restored"

    def test_from_state_requires_callback(self):
        """Test a state without callback fails."""
        with pytest.raises(InvalidConfigError) as exc_info:
            Value.from_state({})

        assert "callback" in exc_info.value.message
