"""Version information for portal-a11y."""

__version__ = "1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Package metadata
__title__ = "portal-a11y"
__description__ = "Portal-scoped crawler that audits every page for accessibility violations"
__license__ = "MIT"
