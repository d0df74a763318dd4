import pytest

from asyncable import AsyncableMixin, CallBuilder, Deferred, DeferredCall, Immediate, asyncable, capture, install_interception
from asyncable.capture import RESERVED


def test_install_is_idempotent(app):
    @asyncable(intercept=True)
    class Billing:
        @staticmethod
        def total(order_id):
            return order_id * 2

    first = Billing.__dict__["total"]
    install_interception(Billing)
    install_interception(Billing)

    assert Billing.__dict__["total"] is first
    assert Billing.total(4).force() == 8


def test_only_public_static_and_class_methods_are_wrapped(app):
    @asyncable(intercept=True)
    class Billing(AsyncableMixin):
        @staticmethod
        def _private(x):
            return x

        @staticmethod
        def mro_like(x):
            return x

        def instance_method(self):
            return "instance"

    assert Billing._private(1) == 1
    assert Billing().instance_method() == "instance"
    assert isinstance(Billing.mro_like(1), DeferredCall)
    assert isinstance(Billing.mro(), list)
    assert {"run_async", "run_after", "run_at", "capture"} <= RESERVED
    assert not isinstance(Billing.run_async(), DeferredCall)


def test_methods_attached_later_are_picked_up_on_reinstall(app):
    @asyncable(intercept=True)
    class Billing:
        pass

    Billing.refund = staticmethod(lambda order_id: -order_id)
    assert Billing.refund(3) == -3

    install_interception(Billing)
    assert Billing.refund(3).force() == -3


def test_subclasses_are_intercepted_and_registered(app, backend):
    @asyncable(intercept=True)
    class Base:
        @staticmethod
        def inherited(x):
            return x + 1

    class Child(Base):
        @classmethod
        def declared_later(cls, x):
            return f"{cls.__name__}:{x}"

    handle = Child.declared_later(1)
    assert isinstance(handle, DeferredCall)
    assert handle.force() == "Child:1"
    assert app.registry.resolve("Child") is Child

    Child.inherited(1).enqueue_now()
    assert backend.jobs[0].args == ["Child.inherited", 1]
    assert backend.drain() == [2]


def test_existing_init_subclass_keeps_running(app):
    seen = []

    class Plugin:
        def __init_subclass__(cls, **kwargs):
            super().__init_subclass__(**kwargs)
            seen.append(cls.__name__)

    install_interception(Plugin)
    app.register(Plugin)

    class Exporter(Plugin):
        @staticmethod
        def run():
            return "ran"

    assert seen == ["Exporter"]
    assert Exporter.run().force() == "ran"


def test_capture_builder_returns_tagged_results(app):
    @asyncable
    class Inventory:
        @staticmethod
        def count(sku):
            return 3

    install_interception(Inventory)
    Inventory.restock = staticmethod(lambda sku: sku)

    deferred = capture(Inventory).invoke("count", "abc")
    immediate = capture(Inventory).invoke("restock", "abc")

    assert isinstance(deferred, Deferred)
    assert deferred.handle.force() == 3
    assert immediate == Immediate("abc")


def test_capture_defer_captures_any_method(app, backend):
    @asyncable
    class Inventory(AsyncableMixin):
        @staticmethod
        def count(sku):
            return 3

    builder = Inventory.capture()
    assert isinstance(builder, CallBuilder)
    assert not builder.is_deferrable("count")

    handle = builder.defer("count", "abc")
    handle.enqueue_now()
    assert backend.jobs[0].args == ["Inventory.count", "abc"]


def test_capture_rejects_private_and_reserved_names(app):
    @asyncable
    class Inventory(AsyncableMixin):
        pass

    with pytest.raises(AttributeError):
        capture(Inventory).invoke("__init__")
    with pytest.raises(AttributeError):
        capture(Inventory).invoke("run_async")
    with pytest.raises(AttributeError):
        capture(Inventory).invoke("missing")


def test_pinned_app_is_used_for_dispatch(app, backend):
    from asyncable import Asyncable
    from asyncable.backends import InMemoryBackend

    other = Asyncable("other", backend=InMemoryBackend(default_queue="pinned"))

    @asyncable(app=other, intercept=True)
    class Pinned:
        @staticmethod
        def go():
            return "went"

    Pinned.go().enqueue_now()

    assert backend.jobs == []
    assert other.backend.jobs[0].queue == "pinned"
    assert other.registry.resolve("Pinned") is Pinned
    assert "Pinned" not in app.registry
