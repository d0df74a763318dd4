import pytest

from asyncable.backends import InMemoryBackend


@pytest.fixture(scope="session")
def django_setup():
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            INSTALLED_APPS=["asyncable.contrib.django"],
            DATABASES={},
            SECRET_KEY="test",  # nosec - test only
            USE_TZ=True,
            ASYNCABLE={"QUEUE": "django-q", "RETRY": 4},
            ASYNCABLE_TAGS=["web"],
        )
    django.setup()


@pytest.fixture()
def app_config(django_setup):
    from django.apps import apps

    return apps.get_app_config("asyncable")


def test_app_config_identity(app_config):
    assert app_config.name == "asyncable.contrib.django"
    assert app_config.label == "asyncable"


def test_ready_applies_django_settings_to_current_app(app, app_config):
    app_config.ready()

    assert app.conf.queue == "django-q"
    assert app.conf.retry == 4
    assert app.conf.tags == ["web"]


def test_prefixed_settings_win_over_dict(app, django_setup):
    from django.test import override_settings

    from asyncable.contrib.django.apps import configure_from_django

    with override_settings(ASYNCABLE_QUEUE="prefixed"):
        configure_from_django(app)

    assert app.conf.queue == "prefixed"


def test_backend_can_be_selected_from_settings(django_setup):
    from django.test import override_settings

    from asyncable import Asyncable
    from asyncable.contrib.django.apps import configure_from_django

    app = Asyncable("django-backend")
    with override_settings(ASYNCABLE={"BACKEND": "memory", "QUEUE": "mem"}):
        configure_from_django(app)

    assert isinstance(app.backend, InMemoryBackend)
    assert app.conf.queue == "mem"


def test_env_opt_out_skips_configuration(app, app_config, monkeypatch):
    monkeypatch.setenv("ASYNCABLE_AUTOCONFIGURE", "0")

    app_config.ready()

    assert app.conf.queue == "default"
    assert app.conf.tags is None


def test_settings_opt_out_skips_configuration(app, app_config):
    from django.test import override_settings

    with override_settings(ASYNCABLE_AUTOCONFIGURE=False):
        app_config.ready()

    assert app.conf.queue == "default"


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), ("yes", True), ("0", False), ("off", False), (None, True), (0, False)],
)
def test_coerce_bool(django_setup, value, expected):
    from asyncable.contrib.django.apps import _coerce_bool

    assert _coerce_bool(value) is expected
