"""Main settings file for the project.

Settings are split into components and environments with
``django-split-settings``. The environment is picked from the
``DJANGO_ENV`` variable and defaults to ``development``.
"""

from os import environ

from split_settings.tools import include, optional

_ENV = environ.get('DJANGO_ENV') or 'development'

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/uploads.py',
    # Select the right env:
    f'environments/{_ENV}.py',
    # Optionally override some settings:
    optional('environments/local.py'),
)

include(*_base_settings)
