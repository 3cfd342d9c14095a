"""Real-estate competitors that must never be cited."""

from __future__ import annotations

COMPETITOR_DOMAINS: tuple[str, ...] = (
    # Spanish property portals
    "idealista.com",
    "fotocasa.es",
    "pisos.com",
    "habitaclia.com",
    "yaencontre.com",
    "tucasa.com",
    "properati.es",
    "enalquiler.com",
    # International portal networks
    "kyero.com",
    "propertyguides.com",
    "spanishpropertychoice.com",
    "aplaceinthesun.com",
    "spanishpropertyinsight.com",
    "spanishhomes.com",
    "thinkspain.com",
    "propertyshowrooms.com",
    "property-spain.com",
    "spanishvillas.com",
    # UK portals
    "rightmove.co.uk",
    "zoopla.co.uk",
    "onthemarket.com",
    "primelocation.com",
    # Agency networks
    "re-max.es",
    "re-max.com",
    "remax.com",
    "engel-voelkers.com",
    "engelvoelkers.com",
    "sothebysrealty.com",
    "christiesrealestate.com",
    "coldwellbanker.com",
    "century21.es",
    "century21.com",
    "kw.com",
    "kellerwilliams.com",
    # Costa del Sol agencies
    "marbella-hills.com",
    "terra-meridiana.com",
    "gilmar.es",
    "lucas-fox.com",
    "clearhomes.es",
    "viva-sothebys.com",
    "drumelia.com",
    "panorama.es",
    "mpvillareal.com",
    "luxuryrealestate.com",
    # Other regional competitors
    "savills.es",
    "savills.com",
    "knightfrank.es",
    "knightfrank.com",
    "berkshirehathaway.es",
)

# (substring markers, reason), checked in order
COMPETITOR_REASONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("idealista", "fotocasa", "pisos.com"), "Major property listing portal (direct competitor)"),
    (("kyero", "propertyguides"), "International property portal (competitor)"),
    (
        ("re-max", "remax", "engel-voelkers", "engelvoelkers", "sotheby", "century21"),
        "Real estate agency network (competitor)",
    ),
    (("marbella-hills", "gilmar", "lucas-fox", "drumelia"), "Regional Costa del Sol competitor"),
)

DEFAULT_COMPETITOR_REASON = "Real estate competitor"
