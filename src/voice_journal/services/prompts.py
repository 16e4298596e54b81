"""Prompt construction for nutrition and exercise extraction."""

from collections.abc import Callable
from datetime import UTC, datetime

_PREAMBLE = (
    "Analiza el siguiente texto y extrae información sobre alimentos "
    "consumidos y ejercicios realizados.\n"
    "Devuelve SOLO un JSON válido con la siguiente estructura:"
)

_SCHEMA = """{{
  "foods": [
    {{
      "name": "nombre del alimento",
      "quantity": "cantidad consumida",
      "calories": número_entero_de_calorías,
      "nutrition": {{
        "protein": "gramos de proteína",
        "carbs": "gramos de carbohidratos",
        "fat": "gramos de grasa",
        "fiber": "gramos de fibra"
      }}
    }}
  ],
  "exercises": [
    {{
      "type": "tipo de ejercicio",
      "duration": "duración en minutos",
      "intensity": "baja/media/alta",
      "calories_burned": número_entero_estimado_de_calorías_quemadas
    }}
  ],
  "timestamp": "{timestamp}"
}}"""

_RULES = (
    "Reglas:\n"
    '- Si no se mencionan alimentos específicos, devuelve un array vacío en "foods".\n'
    "- Si no se mencionan ejercicios específicos, devuelve un array vacío en "
    '"exercises".\n'
    "- Estima las calorías a partir de porciones estándar.\n"
    "- Usa valores nutricionales aproximados pero realistas.\n"
    "- Estima las calorías quemadas según la duración y la intensidad.\n"
    "- Mantén los nombres de alimentos y ejercicios en el idioma del texto.\n"
    "- Devuelve solo el JSON, sin texto adicional."
)


def format_timestamp(moment: datetime) -> str:
    """Render an instant as ISO-8601 UTC with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (
        moment.astimezone(UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(tz=UTC)


def build_prompt(user_text: str, now: Callable[[], datetime] = utc_now) -> str:
    """Render the extraction prompt for ``user_text``."""
    timestamp = format_timestamp(now())
    return "\n\n".join(
        [
            _PREAMBLE,
            _SCHEMA.format(timestamp=timestamp),
            f'Texto a analizar: "{user_text}"',
            _RULES,
        ]
    )
