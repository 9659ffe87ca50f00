"""ASGI config for Bloomly.

Chart series are computed on the async ORM, so ASGI is the deployment entry
point. This exposes the ASGI callable as a module-level variable named
`application`.
"""

from __future__ import annotations

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "bloomly.settings")

application = get_asgi_application()
