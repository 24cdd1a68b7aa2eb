import unittest
from typing import Protocol

import pytest

from pybeans import DuplicateNameError, EmptyNameError, Registry


class Notifier(Protocol):
    def send(self, msg: str) -> str: ...


class TestProvidesDecorator(unittest.TestCase):
    reg: Registry

    def setUp(self):
        self.reg = Registry()

    def test_class_is_registered_under_its_name(self):
        @self.reg.provides(Notifier)
        class EmailNotifier:
            def send(self, msg: str) -> str:
                return f"email: {msg}"

        assert self.reg.exists(Notifier, "EmailNotifier")
        assert isinstance(self.reg.primary(Notifier), EmailNotifier)

    def test_function_name_drops_make_prefix(self):
        @self.reg.provides(Notifier)
        def make_sms():
            return object()

        assert self.reg.names(Notifier) == ["sms"]

    def test_explicit_name_and_singleton(self):
        calls = []

        @self.reg.provides(Notifier, "slack", singleton=True)
        def build():
            calls.append(1)
            return object()

        first = self.reg.resolve(Notifier, "slack")
        assert self.reg.resolve(Notifier, "slack") is first
        assert len(calls) == 1

    def test_decorated_object_is_returned_unchanged(self):
        def make_push():
            return object()

        assert self.reg.provides(Notifier)(make_push) is make_push

    def test_primary_flag_replaces_existing_primary(self):
        @self.reg.provides(Notifier, "email", primary=True)
        def email():
            return "email"

        @self.reg.provides(Notifier, "mock", primary=True)
        def mock():
            return "mock"

        assert self.reg.get_primary_name(Notifier) == "mock"
        assert self.reg.primary(Notifier) == "mock"

    def test_duplicate_name_raises(self):
        @self.reg.provides(Notifier, "email")
        def email():
            return "email"

        with pytest.raises(DuplicateNameError):
            self.reg.provides(Notifier, "email")(email)

    def test_non_callable_is_rejected(self):
        with pytest.raises(TypeError):
            self.reg.provides(Notifier, "x")(42)

    def test_explicit_empty_name_is_rejected(self):
        def make_push():
            return object()

        with pytest.raises(EmptyNameError):
            self.reg.provides(Notifier, "")(make_push)

        assert Notifier not in self.reg
