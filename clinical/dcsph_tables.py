"""
DCSPH knowledge base.

Table A holds body locations, table B pathologies. A DCSPH code is the
2-digit location code followed by the 2-digit pathology code. The full set
of combinations is built once at import time and keyed by code.

GOVERNANCE:
- Static reference data only
- Codes are suggestions for the therapist, never a final diagnosis
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LocationCode:
    """Table A row."""

    code: str
    description: str
    region: str


@dataclass(frozen=True)
class PathologyCode:
    """Table B row."""

    code: str
    description: str
    category: str


@dataclass(frozen=True)
class DiagnosisCodeEntry:
    """A location x pathology combination."""

    code: str
    category: str
    description: str
    is_valid: bool
    location_code: str
    pathology_code: str
    location_description: str
    pathology_description: str
    region: str


def _locations(region: str, rows: list[tuple[str, str]]) -> list[LocationCode]:
    return [LocationCode(code, description, region) for code, description in rows]


def _pathologies(category: str, rows: list[tuple[str, str]]) -> list[PathologyCode]:
    return [PathologyCode(code, description, category) for code, description in rows]


# Table A: Lichaamslocaties
LOCATION_CODES: list[LocationCode] = [
    *_locations(
        "hoofd-hals",
        [
            ("10", "Achterzijde hoofd"),
            ("11", "Aangezicht"),
            ("12", "Regio buccalis inclusief de kaak"),
            ("13", "Regio cervicalis (oppervlakkige weke delen)"),
            ("19", "Gecombineerd ** Hoofd/ Hals"),
        ],
    ),
    *_locations(
        "thorax-buik",
        [
            ("20", "Regio thoracalis anterior (oppervlakkige weke delen)"),
            ("21", "Regio thoracalis dorsalis (oppervlakkige weke delen)"),
            ("22", "Ribben I Sternum"),
            ("23", "Regio abdominalis (oppervlakkige weke delen)"),
            ("24", "Regio lumbalis (oppervlakkige weke delen)"),
            ("25", "Inwendige organen thorax"),
            ("26", "Inwendige organen abdomen"),
            ("29", "Gecombineerd ** Thorax/ Buik/ Organen"),
        ],
    ),
    *_locations(
        "wervelkolom",
        [
            ("30", "Cervicale wervelkolom"),
            ("31", "Cervico-thoracale wervelkolom"),
            ("32", "Thoracale wervelkolom"),
            ("33", "Thoraco-lumbale wervelkolom"),
            ("34", "Lumbale wervelkolom"),
            ("35", "Lumbo-sacrale wervel kolom"),
            ("36", "Sacrum en S.I. gewrichten"),
        ],
    ),
    *_locations(
        "onderste-extremiteit",
        [
            ("72", "Bovenste spronggewricht (inclusief weke delen)"),
            ("73", "Onderste spronggewricht (inclusief weke delen)"),
            ("74", "Voetwortel"),
            ("75", "Middenvoet"),
            ("76", "Voorvoet (tenen)"),
            ("79", "Gecombineerd ** Knie/ Onderbeen/ Voet"),
        ],
    ),
    *_locations(
        "gegeneraliseerd",
        [
            ("90", "Één lichaamszijde"),
            ("91", "Bovenste lichaamshelft"),
            ("92", "Onderste lichaamshelft"),
            ("93", "Gegeneraliseerd"),
            ("94", "Meer Lokalisaties"),
        ],
    ),
]

# Table B: Pathologieën
PATHOLOGY_CODES: list[PathologyCode] = [
    *_pathologies(
        "chirurgie",
        [
            ("00", "Amputatie"),
            ("01", "Gewrichten, uitgezonderd wervelkolom, meniscectomie, synovectomie"),
            ("02", "Botten, uitgezonderd wervelkolom"),
            ("03", "Meniscectomie, synovectomie"),
            ("04", "Pees, spier, ligament"),
            ("05", "Wervelkolom"),
            ("06", "Verwijderde osteosynthese materiaal"),
            ("08", "Postoperatieve contractuur / atrofie"),
            ("09", "Overige chirurgie van het bewegingsapparaat (incl. nieuwvormingen)"),
        ],
    ),
    *_pathologies(
        "orthopedisch",
        [
            ("10", "Aseptische botnecrose"),
            ("11", "Afwijkingen wervelkolom / bekken"),
            ("12", "Skeletafwijkingen (aangeboren)"),
            ("13", "Ossificatiestoornis"),
            ("14", "Ontstekingen / nieuwvormingen in het skelet"),
            ("15", "Pseudo-arthrose / epiphysiolysis / apofysitiden"),
            ("16", "Standsafwijkingen extremiteiten"),
            ("17", "Afwijkingen gewrichten, uitgezonderd wervelkolom / bekken"),
            ("18", "Overige orthopedische aandoeningen zonder chirurgie"),
            ("19", "Dupuytren"),
        ],
    ),
    *_pathologies(
        "degeneratief",
        [
            ("20", "Epicondylitis / tendinitis / tendovaginitis"),
            ("21", "Bursitis (niet traumatisch) / capsulitis"),
            ("22", "Chondropathie / arthropathie / meniscuslaesie"),
            ("23", "Artrose"),
            ("24", "Osteoporose"),
            ("25", "Syndroom van Costen"),
            ("26", "Spier-, pees- en fascie aandoeningen"),
            ("27", "Discusdegeneratie, coccygodynie / HNP"),
            ("28", "Sudeckse a(dys)trofie"),
        ],
    ),
    *_pathologies(
        "traumatisch",
        [
            ("31", "Gewrichtcontusie / -distorsie"),
            ("32", "Luxatie (sub-)"),
            ("33", "Spier-, peesruptuur / haematoom"),
            ("34", "Hydrops / haemarthos / haematoom"),
            ("35", "Myositis ossificans / adhaesies / traumatische bursitis"),
            ("36", "Fracturen"),
            ("38", "Whiplash injury (nektrauma)"),
            ("39", "Status na brandwonden"),
        ],
    ),
    *_pathologies(
        "cardiovasculair",
        [
            ("40", "Hartaandoeningen (niet genoemd onder 41 t/m 49)"),
            ("41", "Myocard-infarct (AMI)"),
            ("42", "Status na coronary artery bypassoperatie (CABG)"),
            ("43", "Status na percutane transluminale coronair angioplastiek (PTCA)"),
            ("44", "Status na hartklepoperatie"),
            ("45", "Status na operatief gecorrigeerde congenitale afwijkingen"),
            ("46", "Lymfevataandoeningen / oedeem"),
            ("47", "Ulcus / decubitus / necrose"),
            ("48", "Algemeen vaatlijden, circulatiestoornissen"),
        ],
    ),
    *_pathologies(
        "respiratoir",
        [
            ("51", "Aangeboren afwijkingen tractus respiratorius"),
            ("52", "Pneumothorax / longoedeem"),
            ("53", "Luchtweginfecties"),
            ("54", "COPD"),
            ("55", "Emfyseem"),
            ("56", "Interstitiële longaandoeningen incl. sarcoïdose"),
        ],
    ),
    *_pathologies(
        "endocrinologisch",
        [
            ("60", "Diabetes mellitus"),
            ("61", "Immuniteitsstoornissen"),
            ("62", "Spastisch colon"),
            ("63", "Covid-19"),
            ("64", "Adipositas"),
            ("65", "Overige-, erfelijke aandoeningen"),
            ("68", "Chirurgie niet bewegingsapparaat (niet cardiochirurgie)"),
            ("69", "Nieuwvormingen zonder chirurgie"),
        ],
    ),
    *_pathologies(
        "neurologisch",
        [
            ("70", "Perifere zenuwaandoening"),
            ("71", "Cerebellaire aandoeningen / encephalopathieën"),
            ("72", "Cerebrovasculair accident / centrale parese"),
            ("73", "Multiple sclerose / ALS/ spinale spieratrofie"),
            ("74", "Parkinson / extrapyramidale aandoening"),
            ("75", "HNP met radiculair syndroom"),
            ("76", "Dwarslaesie (incl. traumatisch en partieel)"),
            ("77", "Neurotraumata"),
            ("78", "Overige neurologische aandoeningen / neuropathieën /ziekten van neurologische oorsprong"),
            ("79", "Psychomotore retardatie / ontwikkelingsstoornissen"),
        ],
    ),
    *_pathologies(
        "psychosomatisch",
        [
            ("80", "Symptomatologie (nog zonder aanwijsbare pathologie)"),
            ("81", "Psychosomatische aandoeningen"),
            ("82", "Hyperventilatie zonder longpathologie"),
        ],
    ),
    *_pathologies(
        "specialistisch",
        [
            ("83", "Proctologie"),
            ("84", "M.D.L. (Maag, Darm, Lever)"),
            ("85", "Seksuologie"),
            ("86", "Urine incontinentie, incontinentie urinae"),
            ("87", "Fecale incontinentie, incontinentie alvi"),
            ("88", "Urologie"),
            ("89", "Gynaecologie"),
        ],
    ),
    *_pathologies(
        "reumatisch",
        [
            ("90", "Reumatoïde arthritis, chronische reuma"),
            ("91", "Juveniel reuma"),
            ("92", "(Poly-) arthritis"),
            ("93", "Spondylitis ankylopoetica / ankylose"),
            ("94", "Overige reumatische- en collageenaandoeningen"),
        ],
    ),
    *_pathologies(
        "huid",
        [
            ("95", "Littekenweefsel"),
            ("96", "Sclerodermie"),
            ("97", "Psoriasis"),
            ("98", "Hyperhydrosis"),
            ("99", "Overige huidaandoeningen"),
        ],
    ),
]

_LOCATIONS_BY_CODE = {location.code: location for location in LOCATION_CODES}
_PATHOLOGIES_BY_CODE = {pathology.code: pathology for pathology in PATHOLOGY_CODES}

_EXTREMITY_REGIONS = {"onderste-extremiteit", "bovenste-extremiteit"}
_FRACTURE_CODE = "36"
_SOFT_TISSUE_LOCATIONS = {"13", "20", "21"}


def get_location(code: str) -> Optional[LocationCode]:
    """Look up a table A row."""
    return _LOCATIONS_BY_CODE.get(code)


def get_pathology(code: str) -> Optional[PathologyCode]:
    """Look up a table B row."""
    return _PATHOLOGIES_BY_CODE.get(code)


def is_logical_combination(location_code: str, pathology_code: str) -> bool:
    """
    Check whether a location/pathology pair makes clinical sense.

    Cardiovascular pathologies are not coded on the extremities, and
    fractures are not coded on regions that only hold superficial soft
    tissue.
    """
    location = get_location(location_code)
    pathology = get_pathology(pathology_code)
    if location is None or pathology is None:
        return False

    if pathology.category == "cardiovasculair" and location.region in _EXTREMITY_REGIONS:
        return False

    if pathology_code == _FRACTURE_CODE and location_code in _SOFT_TISSUE_LOCATIONS:
        return False

    return True


def build_entry(location: LocationCode, pathology: PathologyCode) -> DiagnosisCodeEntry:
    """Combine a table A and table B row into a code entry."""
    return DiagnosisCodeEntry(
        code=location.code + pathology.code,
        category=pathology.category,
        description=f"{pathology.description} - {location.description}",
        is_valid=is_logical_combination(location.code, pathology.code),
        location_code=location.code,
        pathology_code=pathology.code,
        location_description=location.description,
        pathology_description=pathology.description,
        region=location.region,
    )


KNOWLEDGE_BASE: dict[str, DiagnosisCodeEntry] = {
    location.code + pathology.code: build_entry(location, pathology)
    for location in LOCATION_CODES
    for pathology in PATHOLOGY_CODES
}


def get_entry(code: str) -> Optional[DiagnosisCodeEntry]:
    """Look up a 4-digit code in the knowledge base."""
    return KNOWLEDGE_BASE.get(code)
