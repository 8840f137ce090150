import re
from typing import Dict, Optional, Tuple

from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.location_service.lookup")

# name (lower case) -> (lat, lng, description)
KNOWN_PLACES: Dict[str, Tuple[float, float, str]] = {
    "eiffel tower": (48.8584, 2.2945, "Iconic wrought-iron lattice tower on the Champ de Mars."),
    "louvre museum": (48.8606, 2.3376, "The world's most-visited art museum, home of the Mona Lisa."),
    "louvre": (48.8606, 2.3376, "The world's most-visited art museum, home of the Mona Lisa."),
    "notre-dame cathedral": (48.8530, 2.3499, "Medieval Catholic cathedral on the Île de la Cité."),
    "arc de triomphe": (48.8738, 2.2950, "Triumphal arch at the western end of the Champs-Élysées."),
    "sacré-cœur": (48.8867, 2.3431, "White-domed basilica at the summit of Montmartre."),
    "montmartre": (48.8867, 2.3431, "Hilltop artists' quarter with sweeping city views."),
    "colosseum": (41.8902, 12.4922, "Ancient Roman amphitheatre in the centre of Rome."),
    "trevi fountain": (41.9009, 12.4833, "Baroque fountain where visitors toss a coin to return to Rome."),
    "pantheon": (41.8986, 12.4769, "Former Roman temple with the world's largest unreinforced concrete dome."),
    "vatican museums": (41.9065, 12.4536, "Papal art collections including the Sistine Chapel."),
    "sagrada familia": (41.4036, 2.1744, "Gaudí's unfinished basilica, a UNESCO World Heritage Site."),
    "park güell": (41.4145, 2.1527, "Colourful mosaic park designed by Antoni Gaudí."),
    "rijksmuseum": (52.3600, 4.8852, "Dutch national museum of art and history."),
    "anne frank house": (52.3752, 4.8840, "Museum in the canal house where Anne Frank hid during WWII."),
    "belém tower": (38.6916, -9.2160, "Sixteenth-century fortified tower on the Tagus river."),
    "charles bridge": (50.0865, 14.4114, "Gothic stone bridge lined with baroque statues."),
    "prague castle": (50.0911, 14.4016, "Vast castle complex overlooking the Vltava."),
    "schönbrunn palace": (48.1845, 16.3122, "Former imperial summer residence with formal gardens."),
    "fushimi inari shrine": (34.9671, 135.7727, "Shinto shrine famous for thousands of vermilion torii gates."),
    "kinkaku-ji": (35.0394, 135.7292, "Zen temple whose top floors are covered in gold leaf."),
    "statue of liberty": (40.6892, -74.0445, "Colossal neoclassical statue on Liberty Island."),
    "central park": (40.7829, -73.9654, "Urban park spanning 843 acres in the heart of Manhattan."),
    "times square": (40.7580, -73.9855, "Neon-lit commercial intersection in Midtown Manhattan."),
    "hagia sophia": (41.0086, 28.9802, "Byzantine cathedral turned mosque with a monumental dome."),
    "grand bazaar": (41.0107, 28.9681, "One of the largest and oldest covered markets in the world."),
    "big ben": (51.5007, -0.1246, "Clock tower at the north end of the Palace of Westminster."),
    "tower of london": (51.5081, -0.0759, "Historic castle and home of the Crown Jewels."),
    "british museum": (51.5194, -0.1270, "Museum of human history, art and culture."),
    "brandenburg gate": (52.5163, 13.3777, "Neoclassical monument and symbol of German reunification."),
    "sydney opera house": (-33.8568, 151.2153, "Performing arts centre with distinctive sail-shaped shells."),
    "machu picchu": (-13.1631, -72.5450, "Fifteenth-century Inca citadel high in the Andes."),
    "taj mahal": (27.1751, 78.0421, "Ivory-white marble mausoleum on the bank of the Yamuna."),
    "acropolis": (37.9715, 23.7257, "Ancient citadel above Athens crowned by the Parthenon."),
}


def _key(name: str) -> str:
    key = re.sub(r"\s+", " ", name.strip().lower())
    return re.sub(r"^the\s+", "", key)


def _find(name: str) -> Optional[Tuple[float, float, str]]:
    if not name:
        return None
    return KNOWN_PLACES.get(_key(name))


def lookup_coordinates(name: str) -> Optional[Tuple[float, float]]:
    """Approximate (lat, lng) for a known place, None when the name is unknown."""
    place = _find(name)
    if place is None:
        logger.debug(f"No known coordinates for '{name}'")
        return None
    return place[0], place[1]


def lookup_description(name: str) -> str:
    """Short description for a known place, 'Visit {name}' otherwise."""
    place = _find(name)
    if place is None:
        return f"Visit {name.strip()}"
    return place[2]
