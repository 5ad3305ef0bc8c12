"""
Query Translator - Spanish keywords -> English search queries

Stock photo / image search APIs work much better with English queries, while
the narration (and therefore the extracted keywords) is Spanish. Keywords are
translated through a static dictionary; unknown terms (proper nouns, terms that
are already English) pass through unchanged.

build_queries() returns one primary query and up to 2 alternatives used by the
image cascade when the primary query finds nothing relevant.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from transition_analyzer import strip_diacritics


# ============================================================================
# DICTIONARY (keys: lowercase, no diacritics)
# ============================================================================

SPANISH_TO_ENGLISH: Dict[str, str] = {
    # AI / machine learning
    "inteligencia": "intelligence",
    "artificial": "artificial",
    "aprendizaje": "learning",
    "profundo": "deep",
    "automatico": "machine",
    "modelo": "model",
    "modelos": "models",
    "algoritmo": "algorithm",
    "datos": "data",
    "entrenamiento": "training",
    "inferencia": "inference",
    "neuronal": "neural",
    "neuronales": "neural",
    "red": "network",
    "redes": "networks",
    "cerebro": "brain",
    "prediccion": "prediction",
    "clasificacion": "classification",
    "generativa": "generative",
    "generativo": "generative",
    "chatbot": "chatbot",
    "agente": "agent",
    "agentes": "agents",
    "multimodal": "multimodal",
    "parametros": "parameters",
    "tokens": "tokens",
    "contexto": "context",
    "prompt": "prompt",
    "ia": "ai",
    # robotics / autonomy
    "robot": "robot",
    "robots": "robots",
    "robotica": "robotics",
    "humanoide": "humanoid",
    "humanoides": "humanoid",
    "dron": "drone",
    "drones": "drones",
    "autonomo": "autonomous",
    "autonoma": "autonomous",
    "vehiculo": "vehicle",
    "vehiculos": "vehicles",
    "coche": "car",
    "conduccion": "driving",
    "sensor": "sensor",
    "sensores": "sensors",
    # companies / industry
    "empresa": "company",
    "empresas": "companies",
    "industria": "industry",
    "plataforma": "platform",
    "sistema": "system",
    "sistemas": "systems",
    "servicio": "service",
    "servicios": "services",
    "herramienta": "tool",
    "herramientas": "tools",
    "aplicacion": "application",
    "producto": "product",
    "productos": "products",
    "lanzamiento": "launch",
    "anuncio": "announcement",
    "version": "version",
    "actualizacion": "update",
    "disponible": "available",
    "gratis": "free",
    "gratuito": "free",
    "precio": "price",
    "costo": "cost",
    "millones": "millions",
    # general technology
    "tecnologia": "technology",
    "digital": "digital",
    "software": "software",
    "hardware": "hardware",
    "procesador": "processor",
    "chip": "chip",
    "chips": "chips",
    "memoria": "memory",
    "almacenamiento": "storage",
    "servidor": "server",
    "servidores": "servers",
    "nube": "cloud",
    "computacion": "computing",
    "programacion": "programming",
    "codigo": "code",
    "desarrollo": "development",
    "desarrollador": "developer",
    "desarrolladores": "developers",
    "interfaz": "interface",
    "pantalla": "screen",
    "dispositivo": "device",
    "dispositivos": "devices",
    "movil": "mobile",
    "internet": "internet",
    "navegador": "browser",
    "busqueda": "search",
    "buscador": "search engine",
    # actions / action nouns
    "revoluciona": "revolution",
    "transforma": "transformation",
    "mejora": "improvement",
    "avance": "advancement",
    "innovacion": "innovation",
    "descubrimiento": "discovery",
    "investigacion": "research",
    "creacion": "creation",
    "generacion": "generation",
    "deteccion": "detection",
    "reconocimiento": "recognition",
    "procesamiento": "processing",
    "analisis": "analysis",
    "optimizacion": "optimization",
    "automatizacion": "automation",
    "capacidad": "capability",
    "rendimiento": "performance",
    "velocidad": "speed",
    "precision": "accuracy",
    "eficiencia": "efficiency",
    "funcionalidad": "functionality",
    "caracteristica": "feature",
    "cambio": "change",
    "impacto": "impact",
    # security
    "seguridad": "security",
    "ciberseguridad": "cybersecurity",
    "privacidad": "privacy",
    "proteccion": "protection",
    "vulnerabilidad": "vulnerability",
    "amenaza": "threat",
    "riesgo": "risk",
    # media / content
    "imagen": "image",
    "imagenes": "images",
    "video": "video",
    "texto": "text",
    "voz": "voice",
    "audio": "audio",
    "lenguaje": "language",
    "traduccion": "translation",
    "contenido": "content",
    "multimedia": "multimedia",
    "fotografia": "photography",
    "musica": "music",
    "arte": "art",
    # medicine / science
    "medicina": "medicine",
    "medico": "medical",
    "diagnostico": "diagnosis",
    "cirugia": "surgery",
    "farmaceutico": "pharmaceutical",
    "genoma": "genome",
    "proteina": "protein",
    "salud": "health",
    "paciente": "patient",
    "tratamiento": "treatment",
    # business / finance
    "mercado": "market",
    "inversion": "investment",
    "financiero": "financial",
    "economia": "economy",
    "comercio": "commerce",
    "usuario": "user",
    "usuarios": "users",
    "cliente": "client",
    "competencia": "competition",
    "crecimiento": "growth",
    # space / physics
    "espacio": "space",
    "satelite": "satellite",
    "exploracion": "exploration",
    "universo": "universe",
    "energia": "energy",
    "renovable": "renewable",
    "cuantico": "quantum",
    "cuantica": "quantum",
    "fisica": "physics",
    "ciencia": "science",
    # gaming / entertainment
    "juego": "game",
    "juegos": "games",
    "videojuego": "videogame",
    "videojuegos": "videogames",
    "jugador": "player",
    "simulacion": "simulation",
    "virtual": "virtual",
    "realidad": "reality",
    "aumentada": "augmented",
    "graficos": "graphics",
    "render": "render",
    "mundo": "world",
    "mundos": "worlds",
    "interactivo": "interactive",
    "streaming": "streaming",
    # common adjectives in tech news
    "nuevo": "new",
    "nueva": "new",
    "nuevos": "new",
    "nuevas": "new",
    "avanzado": "advanced",
    "avanzada": "advanced",
    "potente": "powerful",
    "rapido": "fast",
    "rapida": "fast",
    "inteligente": "intelligent",
    "global": "global",
    "masivo": "massive",
    "experimental": "experimental",
    "revolucionario": "revolutionary",
    "revolucionaria": "revolutionary",
    "abierto": "open",
    "abierta": "open",
    "libre": "open source",
    "futuro": "future",
    "proximo": "next",
    "proxima": "next",
    "mejor": "better",
    "mayor": "bigger",
    "grande": "large",
    "pequeno": "small",
    "completo": "complete",
}

QUERY_CONFIG = {
    "max_alternatives": 2,
    # APIs behave better with short queries
    "max_keywords_per_query": 3,
}

# Topical fallbacks for the last alternative slot
FALLBACK_TOPICS = (
    "artificial intelligence technology",
    "technology innovation",
    "computer science research",
    "software developer workspace",
    "data center servers",
    "digital innovation office",
)


@dataclass
class SmartQueryResult:
    primary: str
    alternatives: List[str] = field(default_factory=list)
    language: str = "en"
    original_keywords: List[str] = field(default_factory=list)
    translated_keywords: List[str] = field(default_factory=list)


def _normalize_keyword(text: str) -> str:
    return strip_diacritics(str(text or "").strip().lower())


class QueryTranslator:
    """
    Deterministic keyword translation + query building.

    rng drives only the topical fallback alternative; pass random.Random(seed)
    for reproducible alternatives.
    """

    def __init__(
        self,
        dictionary: Optional[Mapping[str, str]] = None,
        fallback_topics: Optional[Sequence[str]] = None,
        max_keywords_per_query: int = QUERY_CONFIG["max_keywords_per_query"],
        max_alternatives: int = QUERY_CONFIG["max_alternatives"],
        rng: Optional[random.Random] = None,
        verbose: bool = False,
    ):
        self.dictionary = dict(dictionary if dictionary is not None else SPANISH_TO_ENGLISH)
        self.fallback_topics = tuple(fallback_topics if fallback_topics is not None else FALLBACK_TOPICS)
        self.max_keywords_per_query = int(max_keywords_per_query)
        self.max_alternatives = int(max_alternatives)
        self.rng = rng or random.Random()
        self.verbose = verbose

    def translate(self, keywords: Sequence[str]) -> List[str]:
        translated: List[str] = []
        seen = set()
        for kw in keywords or []:
            raw = str(kw or "").strip()
            if not raw:
                continue
            term = self.dictionary.get(_normalize_keyword(raw), raw.lower())
            key = term.lower()
            if key in seen:
                continue
            seen.add(key)
            translated.append(term)

        if self.verbose and translated:
            print(f"🌐 SmartQuery: [{', '.join(keywords)}] → [{', '.join(translated)}]")
        return translated

    def build_queries(
        self,
        keywords: Sequence[str],
        segment_text: str = "",
        entity: Optional[str] = None,
    ) -> SmartQueryResult:
        translated = self.translate(keywords)
        primary = " ".join(translated[: self.max_keywords_per_query])
        alternatives = self._alternatives(translated, entity, primary)

        if self.verbose:
            print(f"🔤 SmartQuery: primary='{primary}', alternatives={alternatives}")

        return SmartQueryResult(
            primary=primary,
            alternatives=alternatives,
            language="en",
            original_keywords=list(keywords or []),
            translated_keywords=translated,
        )

    def simplify(self, keywords: Sequence[str]) -> str:
        """Shortest useful query: first two translated keywords."""
        return " ".join(self.translate(keywords)[:2])

    def _alternatives(self, translated: List[str], entity: Optional[str], primary: str) -> List[str]:
        alternatives: List[str] = []

        def _add(q: str) -> None:
            q = " ".join(q.split())
            if q and q != primary and q not in alternatives and len(alternatives) < self.max_alternatives:
                alternatives.append(q)

        ent = str(entity or "").strip().lower()
        if ent and translated:
            _add(f"{ent} {translated[0]}")

        if len(translated) >= 2:
            _add(" ".join(translated[1:3]))

        if len(alternatives) < self.max_alternatives and self.fallback_topics:
            _add(self.rng.choice(self.fallback_topics))

        return alternatives
