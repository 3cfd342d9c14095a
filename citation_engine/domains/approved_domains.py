"""Curated allow-list of citation domains, grouped by topical category.

Entries are lowercase hostnames. An entry may carry a path prefix
("ikea.com/es") to approve only that section of a site. A domain listed
under more than one category belongs to the first category it appears in.
"""

from __future__ import annotations

from ..models.domain import DomainCategory

APPROVED_DOMAINS: dict[DomainCategory, tuple[str, ...]] = {
    DomainCategory.GOVERNMENT_OFFICIAL: (
        "boe.es",
        "agenciatributaria.es",
        "exteriores.gob.es",
        "juntadeandalucia.es",
        "gov.uk",
        "gov.ie",
        "dfa.ie",
        "cnmc.es",
        "ine.es",
        "catastro.gob.es",
        "e-justice.europa.eu",
        "extranjeria.administracionespublicas.gob.es",
        "mjusticia.gob.es",
    ),
    DomainCategory.LEGAL_PROFESSIONAL: (
        "abogadoespanol.com",
        "legalservicesinspain.com",
        "costaluzlawyers.es",
        "spanishsolutions.net",
        "lexidy.com",
        "registradores.org",
        "notariado.org",
        "cec-spain.es",
        "negociosabogados.com",
        "nuevoleon.net",
        "malagasolicitors.es",
    ),
    DomainCategory.FINANCE: (
        "bde.es",
        "caa.co.uk",
        "fred.stlouisfed.org",
        "ecb.europa.eu",
        "imf.org",
        "numbeo.com",
    ),
    DomainCategory.TOURISM_CULTURE: (
        "spain.info",
        "andalucia.org",
        "visitcostadelsol.com",
        "cuevadenerja.es",
        "aqualand.es",
        "bioparcfuengirola.es",
        "selwomarina.es",
        "castillomonumentocolomares.com",
        "mariposariodebenalmadena.com",
        "rmcr.org",
        "stupabenalmadena.org",
        "aena.es",
        "malaga.com",
        "turismo.benalmadena.es",
        "turismo.estepona.es",
        "turismo.fuengirola.es",
        "turismo.malaga.eu",
        "blog.visitcostadelsol.com",
        "europasur.es",
        "guidetomalaga.com",
        "worldtravelguide.net",
        "spainvisa.eu",
        "malagaturismo.com",
        "festivaldemalaga.com",
        "museosdemalaga.com",
        "andalucia.com",
        "rutasdelsol.es",
    ),
    DomainCategory.HEALTHCARE: (
        "sspa.juntadeandalucia.es",
        "quironsalud.es",
        "vithas.es",
        "hospiten.com",
        "helicopterossanitarios.com",
        "medimar.com",
        "nhs.uk",
        "panoramamarbella.com",
        "sanitas.com",
        "citizensinformation.ie",
        "juntadeandalucia.es",
        "cofaes.es",
        "andalucia.com",
    ),
    DomainCategory.EDUCATION: (
        "nabss.org",
        "ibo.org",
        "britishcouncil.es",
        "alohacollege.com",
        "sis.ac",
        "international-schools-database.com",
        "uma.es",
        "miuc.org",
        "baleario.com",
        "udc.es",
        "spain.info",
        "campusdelasol.uma.es",
        "eoimalaga.com",
        "ihmarbella.com",
        "cit.es",
        "escuelaeuropea.es",
        "colegioatalaya.com",
    ),
    DomainCategory.NEWS_MEDIA: (
        "surinenglish.com",
        "euroweeklynews.com",
        "theolivepress.es",
        "essentialmagazine.com",
        "societymarbella.com",
        "homeandlifestyle.es",
        "webexpressguide.com",
        "thespanisheye.com",
        "andaluciatoday.com",
        "thelocal.es",
        "spainenglish.com",
        "expatica.com",
        "inspain.news",
        "eyeonspain.com",
        "thinkspain.com",
        "lachispa.net",
    ),
    DomainCategory.EXPAT_RESOURCES: (
        "expatarrivals.com",
        "internations.org",
        "britoninspain.com",
        "spainexpat.com",
        "renewspain.com",
        "schengenvisainfo.com",
    ),
    DomainCategory.TRANSPORTATION: (
        "aena.es",
        "renfe.com",
        "alsa.es",
        "britishairways.com",
        "aerlingus.com",
        "iberia.com",
        "ryanair.com",
        "easyjet.com",
        "jet2.com",
        "vueling.com",
        "tui.co.uk",
    ),
    DomainCategory.CLIMATE_WEATHER: (
        "wikipedia.org",
        "weather-and-climate.com",
        "climasyviajes.com",
        "weatherspark.com",
        "aemet.es",
        "wmo.int",
        "climatestotravel.com",
        "ncdc.noaa.gov",
        "es.weatherspark.com",
    ),
    DomainCategory.NATURE_OUTDOOR: (
        "caminodelrey.info",
        "transandalus.com",
        "strava.com",
        "komoot.com",
        "malagacyclingclub.com",
        "coastalpath.net",
        "bicicletasdelsol.com",
        "cyclespain.net",
        "outdooractive.com",
        "diverland.es",
        "senderismomalaga.com",
        "telefericobenalmadena.com",
        "actividadesmalaga.com",
        "duomoturismo.com",
    ),
    DomainCategory.GASTRONOMY: (
        "tastingspain.es",
        "rutasdelvino.es",
        "sherry.wine",
        "vinomalaga.com",
        "dopronda.es",
        "michelin.com",
        "alorenademalaga.com",
        "atarazanasmarket.es",
        "tasteatlas.com",
        "gastronomiamalaga.com",
        "lamelonera.com",
        "slowfoodmalaga.com",
    ),
    DomainCategory.SPORTS_RECREATION: (
        "padelfederacion.es",
        "marbellaguide.com",
        "worldpadeltour.com",
        "clubpadelexterio.org",
        "haciendadelalamo.com",
        "padelclick.com",
        "padelenred.com",
        "benahavispadelacademy.com",
        "vivagym.es",
        "basic-fit.com/es",
        "synergym.es",
        "yogamarbella.com",
        "yogaforlife.es",
        "clubelcandado.com",
        "puenteromano.com",
        "reservadelhigueronresort.com",
    ),
    DomainCategory.LOCAL_GOVERNMENT: (
        "marbella.es",
        "fuengirola.es",
        "torremolinos.es",
        "benalmadena.es",
        "mijas.es",
        "estepona.es",
        "manilva.es",
        "casares.es",
        "sanpedroalcantara.es",
        "sotogrande.es",
    ),
    DomainCategory.TELECOM: (
        "movistar.es",
        "vodafone.es",
        "orange.es",
        "masmovil.com",
    ),
    DomainCategory.SHOPPING: (
        "miramarcc.com",
        "plazamayor.es",
        "la-canada.com",
        "elcorteingles.es",
        "decathlon.es",
        "ikea.com/es",
        "leroymerlin.es",
    ),
    DomainCategory.SUSTAINABILITY: (
        "agenciaandaluzadelaenergia.es",
        "energy.ec.europa.eu",
        "renewableenergyworld.com",
        "wwf.es",
        "benalmadena.es",
        "malaga.eu",
        "programmemabiosfera.es",
        "climateportugal.com",
        "educasol.org",
    ),
}
