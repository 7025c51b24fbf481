# perevod/__init__.py
"""
Perevod - Excel translation to Russian

Translates Armenian and English spreadsheet cells into Russian using a banking
dictionary first and Yandex Cloud Translate for everything else.
"""

from pathlib import Path


def _get_version() -> str:
    """
    Read the version from pyproject.toml.

    Falls back to the hardcoded version when the package is installed without
    the project tree next to it.

    Returns:
        str: Version string (e.g. "0.1.0")
    """
    try:
        import tomllib  # Python 3.11+ standard library

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
            return data.get("project", {}).get("version", "0.0.0")
    except (ImportError, OSError, ValueError):
        pass

    return "0.1.0"


__version__ = _get_version()
__app_name__ = "Perevod"
