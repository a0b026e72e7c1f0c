"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> acematch/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Pesos del score agregado (en porcentaje, deben sumar 100)
    weight_price: int = Field(30, ge=0, le=100, description="Peso del presupuesto")
    weight_bedrooms: int = Field(25, ge=0, le=100, description="Peso de dormitorios")
    weight_location: int = Field(25, ge=0, le=100, description="Peso de ubicación")
    weight_type: int = Field(20, ge=0, le=100, description="Peso del tipo de propiedad")

    # Umbrales de etiqueta
    label_excellent: int = Field(90, ge=0, le=100, description="Desde acá: Excellent Match")
    label_great: int = Field(75, ge=0, le=100, description="Desde acá: Great Match")
    label_good: int = Field(60, ge=0, le=100, description="Desde acá: Good Match")

    # Scoring
    bedroom_step_penalty: int = Field(
        25, ge=0, le=100, description="Puntos que se pierden por dormitorio fuera de rango"
    )

    # Notificaciones
    notify_min_score: int = Field(
        0, ge=0, le=100, description="Piso opcional de score para notificar (0 = sin piso)"
    )
    renotify_score_increase: int = Field(
        10, ge=0, le=100, description="Suba de score que habilita re-notificar"
    )
    renotify_after_days: int = Field(
        30, ge=0, description="Días tras los cuales se puede re-notificar"
    )
    claim_ttl_minutes: int = Field(
        60, ge=1, description="Vida de un claim pendiente antes de considerarse abandonado"
    )
    dispatch_concurrency: int = Field(
        5, ge=1, description="Envíos concurrentes por invocación"
    )
    notification_webhook_url: Optional[str] = Field(
        None, description="Endpoint del servicio de emails"
    )
    notification_webhook_secret: Optional[str] = Field(
        None, description="Bearer token para el servicio de emails"
    )
    notification_timeout_seconds: float = Field(
        10.0, gt=0, description="Timeout por envío al servicio de emails"
    )
    site_url: str = Field(
        "https://aceinvestmentproperties.co.uk",
        description="URL pública del marketplace (links de los emails)",
    )

    # Candidatos
    fetch_retry_attempts: int = Field(
        3, ge=1, description="Intentos al leer candidatos de Supabase"
    )
    admin_top_n: int = Field(
        10, ge=1, description="Inversores a mostrar en el panel de admin"
    )
    recent_window_hours: int = Field(
        24, ge=1, description="Ventana del ciclo programado de matching"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
PROPERTY_TYPES = [
    "Studio",
    "1BR",
    "2BR",
    "3BR+",
    "House",
    "HMO",
    "Apartment",
    "Flat",
    "Terraced",
    "Semi-Detached",
    "Detached",
]

LICENCE_TYPES = ["hmo", "c2", "selective", "additional", "other"]

# Estados de `properties` que cuentan como disponibles ("active" es el legacy)
AVAILABLE_STATUSES = ["available", "active"]

# Región -> sub-regiones. Una preferencia por región cubre todas sus sub-regiones.
UK_REGIONS = {
    "London": [
        "Central London",
        "North London",
        "North West London",
        "East London",
        "South East London",
        "South West London",
        "West London",
    ],
    "North West": [
        "Greater Manchester",
        "Merseyside",
        "Cheshire",
        "Lancashire",
        "Cumbria",
    ],
    "North East & Yorkshire": [
        "Tyne & Wear",
        "County Durham & Tees Valley",
        "Northumberland",
        "West Yorkshire",
        "South Yorkshire",
        "North & East Yorkshire",
    ],
    "Midlands": [
        "West Midlands (Metropolitan)",
        "Staffordshire & Shropshire",
        "Warwickshire & Coventry",
        "East Midlands - Leicester, Nottingham & Derby Areas",
        "East Midlands - Lincolnshire & Northamptonshire",
    ],
    "South East": [
        "Berkshire & Thames Valley",
        "Kent & Medway",
        "Surrey",
        "Sussex (East & West)",
        "Hampshire & Isle of Wight",
        "Oxfordshire",
        "Buckinghamshire & Milton Keynes",
    ],
    "South West & East of England": [
        "Bristol & Somerset",
        "Devon & Cornwall",
        "Dorset & Wiltshire",
        "Gloucestershire",
        "Cambridgeshire & Peterborough",
        "Norfolk & Suffolk",
        "Essex & Hertfordshire",
        "Bedfordshire & Luton",
        "Isles of Scilly",
    ],
}

# Sub-región -> local authorities. Las propiedades se ubican por local authority.
LOCAL_AUTHORITIES = {
    # LONDON (33 authorities)
    "Central London": [
        "Camden",
        "City of London",
        "Islington",
        "Westminster",
    ],
    "North London": [
        "Barnet",
        "Enfield",
        "Haringey",
    ],
    "North West London": [
        "Brent",
        "Harrow",
    ],
    "East London": [
        "Barking and Dagenham",
        "Hackney",
        "Havering",
        "Newham",
        "Redbridge",
        "Tower Hamlets",
        "Waltham Forest",
    ],
    "South East London": [
        "Bexley",
        "Bromley",
        "Greenwich",
        "Lewisham",
    ],
    "South West London": [
        "Croydon",
        "Kingston upon Thames",
        "Lambeth",
        "Merton",
        "Richmond upon Thames",
        "Southwark",
        "Sutton",
        "Wandsworth",
    ],
    "West London": [
        "Ealing",
        "Hammersmith and Fulham",
        "Hillingdon",
        "Hounslow",
        "Kensington and Chelsea",
    ],

    # NORTH WEST (49 authorities)
    "Greater Manchester": [
        "Bolton",
        "Bury",
        "Manchester",
        "Oldham",
        "Rochdale",
        "Salford",
        "Stockport",
        "Tameside",
        "Trafford",
        "Wigan",
    ],
    "Merseyside": [
        "Knowsley",
        "Liverpool",
        "Sefton",
        "St Helens",
        "Wirral",
    ],
    "Cheshire": [
        "Cheshire East",
        "Cheshire West and Chester",
        "Halton",
        "Warrington",
    ],
    "Lancashire": [
        "Blackburn with Darwen",
        "Blackpool",
        "Burnley",
        "Chorley",
        "Fylde",
        "Hyndburn",
        "Lancaster",
        "Lancashire County Council",
        "Pendle",
        "Preston",
        "Ribble Valley",
        "Rossendale",
        "South Ribble",
        "West Lancashire",
        "Wyre",
    ],
    "Cumbria": [
        "Cumberland",
        "Westmorland and Furness",
    ],

    # NORTH EAST & YORKSHIRE (27 authorities)
    "Tyne & Wear": [
        "Gateshead",
        "Newcastle upon Tyne",
        "North Tyneside",
        "South Tyneside",
        "Sunderland",
    ],
    "County Durham & Tees Valley": [
        "Darlington",
        "Durham",
        "Hartlepool",
        "Middlesbrough",
        "Redcar and Cleveland",
        "Stockton-on-Tees",
    ],
    "Northumberland": [
        "Northumberland",
    ],
    "West Yorkshire": [
        "Bradford",
        "Calderdale",
        "Kirklees",
        "Leeds",
        "Wakefield",
    ],
    "South Yorkshire": [
        "Barnsley",
        "Doncaster",
        "Rotherham",
        "Sheffield",
    ],
    "North & East Yorkshire": [
        "East Riding of Yorkshire",
        "Hull (Kingston upon Hull)",
        "North Yorkshire",
        "York",
    ],

    # MIDLANDS (57 authorities)
    "West Midlands (Metropolitan)": [
        "Birmingham",
        "Coventry",
        "Dudley",
        "Sandwell",
        "Solihull",
        "Walsall",
        "Wolverhampton",
    ],
    "Staffordshire & Shropshire": [
        "Bromsgrove",
        "Cannock Chase",
        "East Staffordshire",
        "Herefordshire",
        "Lichfield",
        "Malvern Hills",
        "Newcastle-under-Lyme",
        "Redditch",
        "Shropshire",
        "South Staffordshire",
        "Stafford",
        "Staffordshire County Council",
        "Staffordshire Moorlands",
        "Stoke-on-Trent",
        "Tamworth",
        "Telford and Wrekin",
        "Worcester",
        "Worcestershire County Council",
        "Wychavon",
        "Wyre Forest",
    ],
    "Warwickshire & Coventry": [
        "North Warwickshire",
        "Nuneaton and Bedworth",
        "Rugby",
        "Stratford-on-Avon",
        "Warwick",
        "Warwickshire County Council",
    ],
    "East Midlands - Leicester, Nottingham & Derby Areas": [
        "Amber Valley",
        "Ashfield",
        "Bassetlaw",
        "Blaby",
        "Bolsover",
        "Broxtowe",
        "Charnwood",
        "Chesterfield",
        "Derby",
        "Derbyshire County Council",
        "Derbyshire Dales",
        "Erewash",
        "Gedling",
        "Harborough",
        "High Peak",
        "Hinckley and Bosworth",
        "Leicester",
        "Leicestershire County Council",
        "Mansfield",
        "Melton",
        "Newark and Sherwood",
        "North East Derbyshire",
        "North West Leicestershire",
        "Nottingham",
        "Nottinghamshire County Council",
        "Oadby and Wigston",
        "Rushcliffe",
        "South Derbyshire",
    ],
    "East Midlands - Lincolnshire & Northamptonshire": [
        "Boston",
        "East Lindsey",
        "Lincoln",
        "Lincolnshire County Council",
        "North East Lincolnshire",
        "North Kesteven",
        "North Lincolnshire",
        "North Northamptonshire",
        "Rutland",
        "South Holland",
        "South Kesteven",
        "West Lindsey",
        "West Northamptonshire",
    ],

    # SOUTH EAST (75 authorities)
    "Berkshire & Thames Valley": [
        "Bracknell Forest",
        "Reading",
        "Slough",
        "West Berkshire",
        "Windsor and Maidenhead",
        "Wokingham",
    ],
    "Kent & Medway": [
        "Ashford",
        "Canterbury",
        "Dartford",
        "Dover",
        "Folkestone and Hythe",
        "Gravesham",
        "Kent County Council",
        "Maidstone",
        "Medway",
        "Sevenoaks",
        "Swale",
        "Thanet",
        "Tonbridge and Malling",
        "Tunbridge Wells",
    ],
    "Surrey": [
        "Elmbridge",
        "Epsom and Ewell",
        "Guildford",
        "Mole Valley",
        "Reigate and Banstead",
        "Runnymede",
        "Spelthorne",
        "Surrey County Council",
        "Surrey Heath",
        "Tandridge",
        "Waverley",
        "Woking",
    ],
    "Sussex (East & West)": [
        "Adur",
        "Arun",
        "Brighton and Hove",
        "Chichester",
        "Crawley",
        "East Sussex County Council",
        "Eastbourne",
        "Hastings",
        "Horsham",
        "Lewes",
        "Mid Sussex",
        "Rother",
        "Wealden",
        "West Sussex County Council",
        "Worthing",
    ],
    "Hampshire & Isle of Wight": [
        "Basingstoke and Deane",
        "East Hampshire",
        "Eastleigh",
        "Fareham",
        "Gosport",
        "Hampshire County Council",
        "Hart",
        "Havant",
        "Isle of Wight",
        "New Forest",
        "Portsmouth",
        "Rushmoor",
        "Southampton",
        "Test Valley",
        "Winchester",
    ],
    "Oxfordshire": [
        "Cherwell",
        "Oxford",
        "Oxfordshire County Council",
        "South Oxfordshire",
        "Vale of White Horse",
        "West Oxfordshire",
    ],
    "Buckinghamshire & Milton Keynes": [
        "Buckinghamshire",
        "Milton Keynes",
    ],

    # SOUTH WEST & EAST OF ENGLAND (76 authorities)
    "Bristol & Somerset": [
        "Bath and North East Somerset",
        "Bristol",
        "North Somerset",
        "Somerset",
        "South Gloucestershire",
    ],
    "Devon & Cornwall": [
        "Cornwall",
        "Devon County Council",
        "East Devon",
        "Exeter",
        "Mid Devon",
        "North Devon",
        "Plymouth",
        "South Hams",
        "Teignbridge",
        "Torbay",
        "Torridge",
        "West Devon",
    ],
    "Dorset & Wiltshire": [
        "Bournemouth, Christchurch and Poole",
        "Dorset",
        "Swindon",
        "Wiltshire",
    ],
    "Gloucestershire": [
        "Cheltenham",
        "Cotswold",
        "Forest of Dean",
        "Gloucester",
        "Gloucestershire County Council",
        "Stroud",
        "Tewkesbury",
    ],
    "Cambridgeshire & Peterborough": [
        "Cambridge",
        "Cambridgeshire County Council",
        "East Cambridgeshire",
        "Fenland",
        "Huntingdonshire",
        "Peterborough",
        "South Cambridgeshire",
    ],
    "Norfolk & Suffolk": [
        "Babergh",
        "Breckland",
        "Broadland",
        "East Suffolk",
        "Great Yarmouth",
        "Ipswich",
        "King's Lynn and West Norfolk",
        "Mid Suffolk",
        "Norfolk County Council",
        "North Norfolk",
        "Norwich",
        "South Norfolk",
        "Suffolk County Council",
        "West Suffolk",
    ],
    "Essex & Hertfordshire": [
        "Basildon",
        "Braintree",
        "Brentwood",
        "Broxbourne",
        "Castle Point",
        "Chelmsford",
        "Colchester",
        "Dacorum",
        "East Hertfordshire",
        "Epping Forest",
        "Essex County Council",
        "Harlow",
        "Hertfordshire County Council",
        "Hertsmere",
        "Maldon",
        "North Hertfordshire",
        "Rochford",
        "Southend-on-Sea",
        "St Albans",
        "Stevenage",
        "Tendring",
        "Three Rivers",
        "Thurrock",
        "Uttlesford",
        "Watford",
        "Welwyn Hatfield",
    ],
    "Bedfordshire & Luton": [
        "Bedford",
        "Central Bedfordshire",
        "Luton",
    ],
    "Isles of Scilly": [
        "Isles of Scilly",
    ],
}
