import logging
import os

logger = logging.getLogger(__name__)

# Valores por defecto si no hay variable de entorno
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_EXPIRING_SOON_DAYS = 30
DEFAULT_WARNING_HORIZON_DAYS = 30


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Valor no numérico en %s=%r, usando %s", name, raw, default)
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def get_log_level() -> str:
    """Nivel de log desde COMPLIANCE_LOG_LEVEL, leído en cada llamada."""
    raw = os.getenv("COMPLIANCE_LOG_LEVEL")
    if raw is None or not raw.strip():
        return DEFAULT_LOG_LEVEL
    return raw.strip().upper()


def load_aggregation_settings():
    """
    Construye AggregationSettingsV1 desde variables de entorno.

    Variables:
        COMPLIANCE_EXPIRING_SOON_DAYS: días antes de caducar para "expiring" (30)
        COMPLIANCE_WARNING_HORIZON_DAYS: horizonte de fechas límite con aviso (30)
        COMPLIANCE_SAFE_MODE: si true, los avisos no se marcan para notificar

    Se lee en el momento de la llamada (no al importar); el motor solo ve el
    objeto de settings que recibe como parámetro.
    """
    from compliance_engine.shared.compliance_models_v1 import AggregationSettingsV1

    return AggregationSettingsV1(
        expiring_soon_days=_env_int("COMPLIANCE_EXPIRING_SOON_DAYS", DEFAULT_EXPIRING_SOON_DAYS),
        warning_horizon_days=_env_int("COMPLIANCE_WARNING_HORIZON_DAYS", DEFAULT_WARNING_HORIZON_DAYS),
        safe_mode=_env_bool("COMPLIANCE_SAFE_MODE"),
    )
