"""Django integration: add ``"asyncable.contrib.django"`` to ``INSTALLED_APPS``."""
