"""
directory_rbac – role and permission resolution from directory identity data.

Import path convention::

    from directory_rbac.rbac import Resolver, IdentityRecord, Override
    from directory_rbac.config import EnvSettingsLoader, ResolverSettings
    from directory_rbac.kernel.errors import InvalidIdentityError, ConfigError
    from directory_rbac.observability.logging import JsonLoggerFactory
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
