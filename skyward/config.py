from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tomli as tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:  # Python < 3.11
        import tomli as tomllib

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "skyward" / "config.toml"
DEFAULT_PROVIDER_ORDER = ("usno", "horizons", "opale")


class Config:
    def __init__(self, data: dict):
        self._data = data

    @property
    def site_latitude_deg(self):
        return self._data.get("site", {}).get("latitude_deg", None)

    @property
    def site_longitude_deg(self):
        return self._data.get("site", {}).get("longitude_deg", None)

    @property
    def site_timezone_offset_hours(self):
        return self._data.get("site", {}).get("timezone_offset_hours", None)

    @property
    def providers_enabled(self) -> bool:
        return bool(self._data.get("providers", {}).get("enabled", True))

    @property
    def provider_order(self) -> tuple[str, ...]:
        order = self._data.get("providers", {}).get("order", None)
        if not order:
            return DEFAULT_PROVIDER_ORDER
        return tuple(str(name).lower() for name in order)

    @property
    def provider_timeout_s(self) -> float:
        return float(self._data.get("providers", {}).get("timeout_s", 10.0))

    @property
    def provider_stagger_s(self) -> float:
        return float(self._data.get("providers", {}).get("stagger_s", 0.3))

    @property
    def provider_max_workers(self) -> int:
        return int(self._data.get("providers", {}).get("max_workers", 4))

    @property
    def position_table_path(self):
        path = self._data.get("positions", {}).get("table_path", None)
        if not path:
            return None
        return Path(path).expanduser()


def load_config(path: Path | None = None) -> Config:
    explicit_path = path
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        # Return default config if default file missing
        return Config({})

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return Config(data)
