import unittest
from abc import ABC, abstractmethod
from unittest.mock import MagicMock

import pytest

from pybeans import ErrorKind, Registry, UnknownContractError, UnknownNameError


class Greeter(ABC):
    @abstractmethod
    def greet(self) -> str: ...


class English(Greeter):
    def greet(self) -> str:
        return "hello"


class Spanish(Greeter):
    def greet(self) -> str:
        return "hola"


class TestPrimarySelection(unittest.TestCase):
    reg: Registry

    def setUp(self):
        self.errors = MagicMock()
        self.reg = Registry(error_handler=self.errors)

    def test_single_registration_is_implicit_primary(self):
        self.reg.register_instance(Greeter, "en", English())

        assert self.reg.primary(Greeter).greet() == "hello"
        assert self.reg.resolve(Greeter).greet() == "hello"
        assert self.reg.get_primary_name(Greeter) == ""
        self.errors.assert_not_called()

    def test_two_registrations_without_primary_is_ambiguous(self):
        self.reg.register_instance(Greeter, "en", English())
        self.reg.register_instance(Greeter, "es", Spanish())

        assert self.reg.primary(Greeter) is None

        self.errors.assert_called_once()
        err = self.errors.call_args[0][0]
        assert err.kind is ErrorKind.NO_PRIMARY_AVAILABLE
        assert err.contract.type is Greeter

    def test_explicit_primary_wins_over_registration_order(self):
        self.reg.register_instance(Greeter, "en", English())
        self.reg.register_instance(Greeter, "es", Spanish())
        self.reg.set_primary(Greeter, "es")

        assert self.reg.primary(Greeter).greet() == "hola"
        assert self.reg.get_primary_name(Greeter) == "es"

    def test_set_primary_without_replace_keeps_existing(self):
        self.reg.register_instance(Greeter, "en", English())
        self.reg.register_instance(Greeter, "es", Spanish())
        self.reg.set_primary(Greeter, "en")

        self.reg.set_primary(Greeter, "es")

        assert self.reg.get_primary_name(Greeter) == "en"
        assert self.reg.primary(Greeter).greet() == "hello"

    def test_set_primary_with_replace_overwrites(self):
        self.reg.register_instance(Greeter, "en", English())
        self.reg.register_instance(Greeter, "es", Spanish())
        self.reg.set_primary(Greeter, "en")

        self.reg.set_primary(Greeter, "es", replace=True)

        assert self.reg.get_primary_name(Greeter) == "es"
        assert self.reg.primary(Greeter).greet() == "hola"

    def test_primary_resolves_through_singleton_cache(self):
        self.reg.register_constructor(Greeter, "en", English, singleton=True)
        self.reg.set_primary(Greeter, "en")

        assert self.reg.primary(Greeter) is self.reg.resolve(Greeter, "en")


def test_set_primary_unknown_contract_raises():
    r = Registry()
    with pytest.raises(UnknownContractError) as ctx:
        r.set_primary(Greeter, "some-random-name")
    assert ctx.value.kind is ErrorKind.UNKNOWN_CONTRACT
    assert str(ctx.value) == "no dependencies found for type Greeter, unable to resolve"


def test_set_primary_unknown_name_raises_and_is_not_reported():
    handler = MagicMock()
    r = Registry(error_handler=handler)
    r.register_instance(Greeter, "en", English())

    with pytest.raises(UnknownNameError) as ctx:
        r.set_primary(Greeter, "something")

    assert str(ctx.value) == "dependency something not registered, unable to set as primary"
    assert r.get_primary_name(Greeter) == ""
    handler.assert_not_called()


def test_get_primary_name_of_unknown_contract_is_empty():
    r = Registry()
    assert r.get_primary_name(Greeter) == ""
