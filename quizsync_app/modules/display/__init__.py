# File: quizsync_app/modules/display/__init__.py
from flask import Blueprint

blueprint = Blueprint('display', __name__)

# Module Metadata
module_metadata = {
    'name': 'Explanation Display Sync',
    'icon': 'display',
    'category': 'Core',
    'url_prefix': '/display',
    'enabled': True
}

def setup_module(app):
    """Register routes for the display module."""
    from . import routes
