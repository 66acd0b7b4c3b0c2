"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to widen the credit band:
    GRADEBOOK_MAX_CREDITS = 40

All configuration values are lazily loaded to avoid Django setup issues.
Code that needs a consistent snapshot should use ``GradingPolicy.from_settings()``
instead of reading these one at a time.
"""


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


# Define defaults as constants for direct use when Django settings are not needed
_DEFAULTS = {
    # Credit load band for one semester (inclusive)
    'MIN_CREDITS': 12,
    'MAX_CREDITS': 36,

    # Letter grade -> grade points
    'GRADE_POINTS': {
        'O': 10,
        'A+': 9,
        'A': 8,
        'B+': 7,
        'B': 6,
        'C': 5,
        'F': 0,
    },

    # Externally sourced (supplementary) courses
    'SUPPLEMENTARY_COURSE_TYPE': 'NPTEL',
    'SUPPLEMENTARY_ID_PREFIX': 'NPTEL-',
    'SUPPLEMENTARY_DEFAULT_CREDITS': 3,

    # Department whose courses every student may browse
    'SHARED_DEPARTMENT': 'Science & Humanities',

    # File upload limits
    'MAX_FILE_SIZE': 5 * 1024 * 1024,  # 5 MB

    # External lecture catalogue
    'CATALOG_MAX_RESULTS': 20,
    'CATALOG_TIMEOUT': 10,  # seconds

    # Bulk operation settings
    'RECONCILE_BATCH_SIZE': 500,

    # Celery task settings
    'TASK_MAX_RETRIES': 3,
    'TASK_RETRY_DELAY': 60,  # seconds
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


# Module-level proxy object for attribute access
_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
