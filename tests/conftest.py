"""
Pytest configuration
"""

import os


def pytest_configure(config):
    """Configure pytest"""
    os.environ['DATAFORM_COMPONENT'] = 'mod_data'
    os.environ['DATAFORM_STRINGS_PREFIX'] = 'addon.mod_data.'
    os.environ.setdefault('DATAFORM_DEBUG', 'false')
