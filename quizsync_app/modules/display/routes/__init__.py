# File: quizsync_app/modules/display/routes/__init__.py
from . import api
