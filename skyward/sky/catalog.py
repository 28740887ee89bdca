from dataclasses import dataclass
import datetime

from .positions import PositionTable
from .types import CatalogEntry


@dataclass(frozen=True)
class MeteorShower:
    peak_date: str
    hourly_rate: str
    start: tuple[int, int]
    end: tuple[int, int]

    def is_active(self, date: datetime.date) -> bool:
        # Activity periods never wrap past the new year.
        return self.start <= (date.month, date.day) <= self.end


# Planets not covered by the position table fall back to these.
PLANET_DEFAULTS = {
    "Jupiter": CatalogEntry("Jupiter", 3.2, 17.0, magnitude=-2.5, distance=5.2),
    "Mars": CatalogEntry("Mars", 12.5, 18.0, magnitude=0.5, distance=1.5),
    "Venus": CatalogEntry("Venus", 6.5, 20.0, magnitude=-4.2, distance=0.7),
    "Saturn": CatalogEntry("Saturn", 0.8, 9.0, magnitude=0.8, distance=9.5),
}
PLANET_ORDER = ("Mercury", "Venus", "Mars", "Jupiter", "Saturn")

# Distances: Moon in AU, stars in light-years, galaxies in thousands of light-years.
MOON = CatalogEntry("Moon", 8.5, 15.0, magnitude=-12.6, distance=0.00257, type="moon")

FIXED_OBJECTS = (
    CatalogEntry("Sirius", 6.75, -16.7, magnitude=-1.46, distance=8.6, type="star"),
    CatalogEntry("Polaris", 2.53, 89.3, magnitude=1.98, distance=433.0, type="star"),
    CatalogEntry("Orion", 5.5, 5.0, magnitude=-1.0, type="constellation"),
    CatalogEntry("Big Dipper", 11.0, 60.0, magnitude=1.8, type="constellation"),
    CatalogEntry("Cassiopeia", 1.0, 60.0, magnitude=2.2, type="constellation"),
    CatalogEntry("Little Dipper", 15.0, 75.0, magnitude=2.0, type="constellation"),
    CatalogEntry("Andromeda Galaxy", 0.67, 41.3, magnitude=3.4, distance=2500.0, type="galaxy"),
    CatalogEntry("Triangulum Galaxy", 1.33, 30.65, magnitude=5.7, distance=3000.0, type="galaxy"),
    CatalogEntry("Whirlpool Galaxy", 13.5, 47.2, magnitude=8.4, distance=31000.0, type="galaxy"),
    CatalogEntry("Perseids", 3.2, 58.0, magnitude=0.0, type="meteor"),
    CatalogEntry("Geminids", 7.5, 32.0, magnitude=0.0, type="meteor"),
    CatalogEntry("Leonids", 10.2, 22.0, magnitude=0.0, type="meteor"),
    CatalogEntry("Lyrids", 18.1, 32.0, magnitude=0.0, type="meteor"),
)

REQUIRES_TELESCOPE = {
    "Andromeda Galaxy": False,
    "Triangulum Galaxy": True,
    "Whirlpool Galaxy": True,
}

METEOR_SHOWERS = {
    "Perseids": MeteorShower("August 12-13", "100+", (7, 17), (8, 24)),
    "Geminids": MeteorShower("December 13-14", "120+", (11, 4), (12, 17)),
    "Leonids": MeteorShower("November 17-18", "15-20", (11, 6), (11, 30)),
    "Lyrids": MeteorShower("April 22-23", "10-20", (4, 16), (4, 25)),
}


def is_meteor_shower_active(name: str, date: datetime.date) -> bool:
    shower = METEOR_SHOWERS.get(name)
    if shower is None:
        return False
    return shower.is_active(date)


def planet_entries(table: PositionTable | None, when: datetime.date | datetime.datetime) -> list[CatalogEntry]:
    entries = []
    for name in PLANET_ORDER:
        entry = table.lookup(name, when) if table is not None else None
        if entry is None:
            entry = PLANET_DEFAULTS.get(name)
        if entry is not None:
            entries.append(entry)
    return entries


def list_catalog(
    table: PositionTable | None,
    when: datetime.date | datetime.datetime,
) -> list[CatalogEntry]:
    """Every object in the sky report, planets first, for the given date."""
    return [*planet_entries(table, when), MOON, *FIXED_OBJECTS]
