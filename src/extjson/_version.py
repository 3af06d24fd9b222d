"""Version of the installed extjson distribution."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Installed version, or "0.0.0" when running from an uninstalled source tree."""
    try:
        return version("extjson")
    except PackageNotFoundError:
        return "0.0.0"
