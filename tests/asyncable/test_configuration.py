import sys
import types

import pytest

from asyncable import Asyncable
from asyncable.backends import CeleryBackend, ImmediateBackend, InMemoryBackend
from asyncable.conf import Configuration, Settings
from asyncable.conf.settings import _filter_by_namespace, _namespaced_attributes


def test_fallbacks_apply_without_backend():
    conf = Configuration.from_backend(None)

    assert conf.queue == "default"
    assert conf.retry is True
    assert conf.dead is None
    assert conf.effective_options == {"queue": "default", "retry": True}


def test_backend_defaults_win_over_fallbacks():
    conf = Configuration.from_backend(InMemoryBackend(default_queue="mailers"))

    assert conf.queue == "mailers"
    assert conf.effective_options["queue"] == "mailers"


def test_overrides_win_over_backend_defaults():
    conf = Configuration.from_backend(InMemoryBackend(), queue="critical", retry=5, tags="a, b")

    assert conf.effective_options == {"queue": "critical", "retry": 5, "tags": ["a", "b"]}


def test_absent_options_are_left_out():
    conf = Configuration.from_backend(ImmediateBackend(), pool=None, dead=False, backtrace=10)

    options = conf.effective_options
    assert "pool" not in options
    assert options["dead"] is False
    assert options["backtrace"] == 10
    assert "validate_arguments" not in options


def test_assignment_is_validated():
    conf = Configuration()
    conf.retry = False
    conf.tags = ("x", "y")

    assert conf.retry is False
    assert conf.tags == ["x", "y"]

    with pytest.raises(ValueError):
        conf.unknown = 1


def test_update_is_case_insensitive():
    conf = Configuration().update({"QUEUE": "low"}, pool="batch")

    assert conf.queue == "low"
    assert conf.pool == "batch"


def test_celery_default_queue_comes_from_celery_app():
    from celery import Celery

    celery_app = Celery("conf-test")
    celery_app.conf.task_default_queue = "jobs"

    conf = Configuration.from_backend(CeleryBackend(celery_app))

    assert conf.queue == "jobs"
    assert conf.retry is True


def test_filter_by_namespace():
    mapping = {"QUEUE": 1, "ASYNCABLE_RETRY": 2, "OTHER_X": 3}

    assert _filter_by_namespace(mapping, "ASYNCABLE") == {"RETRY": 2}
    assert _filter_by_namespace({"queue": "q"}, None) == {"QUEUE": "q"}


def test_namespaced_attributes_reads_dict_and_prefixed_keys():
    source = types.SimpleNamespace(ASYNCABLE={"queue": "from-dict", "RETRY": 3}, ASYNCABLE_QUEUE="from-attr", OTHER=1)

    assert _namespaced_attributes(source, "ASYNCABLE") == {"QUEUE": "from-attr", "RETRY": 3}


def test_settings_explicit_excludes_package_defaults():
    settings = Settings()
    assert settings["BACKEND"] == "immediate"
    assert settings.explicit() == {}

    settings.update_from_mapping({"queue": "q"})
    assert settings.explicit() == {"QUEUE": "q"}


def test_settings_update_from_object_and_envvar(monkeypatch):
    module = types.ModuleType("asyncable_temp_conf")
    module.ASYNCABLE_QUEUE = "mod-q"
    monkeypatch.setitem(sys.modules, "asyncable_temp_conf", module)

    settings = Settings()
    settings.update_from_object("asyncable_temp_conf", namespace="ASYNCABLE")
    assert settings["QUEUE"] == "mod-q"

    env_module = types.ModuleType("asyncable_env_conf")
    env_module.RETRY = 7
    monkeypatch.setitem(sys.modules, "asyncable_env_conf", env_module)
    monkeypatch.setenv("ASYNCABLE_CONFIG_MODULE", "asyncable_env_conf")

    settings.update_from_envvar()
    assert settings["RETRY"] == 7


def test_app_reads_environment(monkeypatch):
    monkeypatch.setenv("ASYNCABLE_QUEUE", "env-q")
    monkeypatch.setenv("ASYNCABLE_RETRY", "false")
    monkeypatch.setenv("ASYNCABLE_BACKEND", "memory")

    app = Asyncable("env")

    assert isinstance(app.backend, InMemoryBackend)
    assert app.conf.queue == "env-q"
    assert app.conf.retry is False


def test_configure_rebuilds_conf_and_switches_backend():
    app = Asyncable("cfg")
    assert isinstance(app.backend, ImmediateBackend)

    app.configure(queue="critical", backend="memory")

    assert isinstance(app.backend, InMemoryBackend)
    assert app.conf.queue == "critical"
    assert app.conf.retry is True


def test_use_backend_reseeds_defaults():
    app = Asyncable("seed", backend=InMemoryBackend(default_queue="first"))
    assert app.conf.queue == "first"

    app.use_backend(InMemoryBackend(default_queue="second"))
    assert app.conf.queue == "second"


def test_validate_arguments_setting():
    app = Asyncable("validate", backend="memory")
    assert app.conf.validate_arguments is True

    app.configure(validate_arguments=False)
    assert app.conf.validate_arguments is False
