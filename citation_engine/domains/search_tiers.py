"""Search tier table: which domains are searched together, and in which order.

Tiers are searched strictly in order; later tiers are only consulted while
the target citation count is unmet. Approved domains missing from every
tier list fall into the default tier of their category.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..models.domain import DomainCategory, SearchTier


class TierDefinition(BaseModel):
    """One row of the tier table."""

    tier: SearchTier
    label: str
    domains: tuple[str, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}


SEARCH_TIERS: tuple[TierDefinition, ...] = (
    TierDefinition(
        tier=SearchTier.S,
        label="Tier S (Gov/Official)",
        domains=(
            "boe.es", "agenciatributaria.es", "exteriores.gob.es", "juntadeandalucia.es",
            "gov.uk", "gov.ie", "spain.info", "andalucia.org", "visitcostadelsol.com",
            "cnmc.es", "ine.es", "catastro.gob.es", "mjusticia.gob.es",
            "extranjeria.administracionespublicas.gob.es",
        ),
    ),
    TierDefinition(
        tier=SearchTier.A,
        label="Tier A (Professional)",
        domains=(
            "abogadoespanol.com", "legalservicesinspain.com", "lexidy.com",
            "sspa.juntadeandalucia.es", "quironsalud.es", "nhs.uk", "sanitas.com",
            "uma.es", "britishcouncil.es", "ibo.org", "nabss.org",
            "aena.es", "renfe.com", "registradores.org", "notariado.org",
            "malagasolicitors.es", "cofaes.es", "vithas.es", "hospiten.com",
        ),
    ),
    TierDefinition(
        tier=SearchTier.B,
        label="Tier B (News/Expat)",
        domains=(
            "surinenglish.com", "euroweeklynews.com", "theolivepress.es",
            "thelocal.es", "expatica.com", "internations.org", "expatarrivals.com",
            "spainexpat.com", "britoninspain.com", "eyeonspain.com",
            "essentialmagazine.com", "thinkspain.com", "spainenglish.com",
            "inspain.news", "lachispa.net", "andaluciatoday.com",
        ),
    ),
    TierDefinition(
        tier=SearchTier.C,
        label="Tier C (Tourism)",
        domains=(
            "cuevadenerja.es", "malaga.com", "turismo.malaga.eu", "turismo.benalmadena.es",
            "turismo.estepona.es", "turismo.fuengirola.es", "blog.visitcostadelsol.com",
            "malagaturismo.com", "festivaldemalaga.com", "museosdemalaga.com",
            "guidetomalaga.com", "worldtravelguide.net", "aqualand.es",
            "bioparcfuengirola.es", "selwomarina.es", "rmcr.org", "stupabenalmadena.org",
            "castillomonumentocolomares.com", "mariposariodebenalmadena.com",
        ),
    ),
    TierDefinition(
        tier=SearchTier.D,
        label="Tier D (Nature/Climate)",
        domains=(
            "caminodelrey.info", "transandalus.com", "outdooractive.com",
            "weatherspark.com", "aemet.es", "wmo.int", "weather-and-climate.com",
            "climasyviajes.com", "climatestotravel.com", "wikipedia.org",
            "senderismomalaga.com", "cyclespain.net", "malagacyclingclub.com",
            "coastalpath.net", "bicicletasdelsol.com", "actividadesmalaga.com",
            "diverland.es", "telefericobenalmadena.com", "duomoturismo.com",
        ),
    ),
    TierDefinition(
        tier=SearchTier.E,
        label="Tier E (Sports/Food)",
        domains=(
            "padelfederacion.es", "worldpadeltour.com", "marbellaguide.com",
            "michelin.com", "tasteatlas.com", "gastronomiamalaga.com",
            "tastingspain.es", "rutasdelvino.es", "sherry.wine", "vinomalaga.com",
            "alorenademalaga.com", "atarazanasmarket.es", "slowfoodmalaga.com",
            "vivagym.es", "clubelcandado.com", "puenteromano.com",
            "reservadelhigueronresort.com", "yogamarbella.com",
        ),
    ),
    TierDefinition(
        tier=SearchTier.F,
        label="Tier F (Local Services)",
        domains=(
            "marbella.es", "fuengirola.es", "benalmadena.es", "estepona.es",
            "mijas.es", "torremolinos.es", "manilva.es", "casares.es",
            "elcorteingles.es", "miramarcc.com", "movistar.es", "vodafone.es",
            "agenciaandaluzadelaenergia.es", "wwf.es", "renewableenergyworld.com",
            "malaga.eu", "educasol.org", "energy.ec.europa.eu",
        ),
    ),
)

CATEGORY_DEFAULT_TIERS: dict[DomainCategory, SearchTier] = {
    DomainCategory.GOVERNMENT_OFFICIAL: SearchTier.S,
    DomainCategory.LEGAL_PROFESSIONAL: SearchTier.A,
    DomainCategory.FINANCE: SearchTier.A,
    DomainCategory.HEALTHCARE: SearchTier.A,
    DomainCategory.EDUCATION: SearchTier.A,
    DomainCategory.TRANSPORTATION: SearchTier.A,
    DomainCategory.NEWS_MEDIA: SearchTier.B,
    DomainCategory.EXPAT_RESOURCES: SearchTier.B,
    DomainCategory.TOURISM_CULTURE: SearchTier.C,
    DomainCategory.CLIMATE_WEATHER: SearchTier.D,
    DomainCategory.NATURE_OUTDOOR: SearchTier.D,
    DomainCategory.GASTRONOMY: SearchTier.E,
    DomainCategory.SPORTS_RECREATION: SearchTier.E,
    DomainCategory.LOCAL_GOVERNMENT: SearchTier.F,
    DomainCategory.SHOPPING: SearchTier.F,
    DomainCategory.TELECOM: SearchTier.F,
    DomainCategory.SUSTAINABILITY: SearchTier.F,
}

# Host patterns of government / official institutions, matched against "." + host
GOVERNMENT_HOST_PATTERNS: tuple[str, ...] = (
    ".gov", ".edu", ".ac.uk", ".gov.uk", ".nhs.uk", ".ofcom.org.uk", ".fca.org.uk",
    ".cqc.org.uk", ".ons.gov.uk", ".gob.es", ".gob.", ".ine.es", ".bde.es", ".boe.es",
    ".agenciatributaria.es", ".registradores.org", ".mitma.gob.es", ".inclusion.gob.es",
    ".mjusticia.gob.es", ".exteriores.gob.es", ".europa.eu", ".eurostat.ec.europa.eu",
    ".gouv.", ".overheid.nl", ".gc.ca", ".gov.au", ".govt.nz",
)
