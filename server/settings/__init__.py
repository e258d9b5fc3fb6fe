"""Settings entry point.

Settings are split into ``components`` shared by every environment and one
``environments/<DJANGO_ENV>.py`` overlay, composed by django-split-settings.
"""

from os import environ

import django_stubs_ext
from split_settings.tools import include, optional

# Allows generic admin and queryset annotations at runtime:
django_stubs_ext.monkeypatch()

# Managing environment via `DJANGO_ENV` variable:
environ.setdefault('DJANGO_ENV', 'development')
_ENV = environ['DJANGO_ENV']

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/nodes.py',

    # Select the right env:
    'environments/{0}.py'.format(_ENV),

    # Optionally override some settings:
    optional('environments/local.py'),
)

# Include settings:
include(*_base_settings)
