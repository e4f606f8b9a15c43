from typing import Final

DATE_FORMAT: Final[str] = "%Y-%m-%d"
DAYS_IN_WEEK: Final[int] = 7
DAYS_PL: Final[tuple[str, ...]] = (
    "poniedziałek", "wtorek", "środa", "czwartek", "piątek", "sobota", "niedziela"
)
MONTHS_PL: Final[tuple[str, ...]] = (
    "Styczeń", "Luty", "Marzec", "Kwiecień", "Maj", "Czerwiec",
    "Lipiec", "Sierpień", "Wrzesień", "Październik", "Listopad", "Grudzień",
)
MONTHS_SHORT_PL: Final[tuple[str, ...]] = (
    "sty", "lut", "mar", "kwi", "maj", "cze", "lip", "sie", "wrz", "paź", "lis", "gru"
)
UNITS: Final[tuple[str, ...]] = (
    "g", "kg", "ml", "l", "szt.", "łyżka", "łyżeczka", "szklanka", "opakowanie"
)
DEFAULT_CATEGORY_EMOJI: Final[str] = "🍽️"
EXPORT_VERSION: Final[int] = 1
