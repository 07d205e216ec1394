# formatting.py
import datetime

import pandas as pd
import pytz

from config import get_settings

# --- Process parameters (ideal ranges of the juice-treatment line) ---
PARAMETERS = [
    {"key": "ph", "label": "pH", "icon": "🧪", "unit": "", "ideal": "6.8 - 7.2"},
    {"key": "brix", "label": "Brix", "icon": "📏", "unit": "°Bx", "ideal": "14 - 18"},
    {"key": "pol", "label": "Pol", "icon": "📈", "unit": "%", "ideal": "12 - 16"},
    {"key": "turbidity", "label": "Turbidez", "icon": "💧", "unit": "NTU", "ideal": "< 500"},
    {"key": "temperature", "label": "Temperatura", "icon": "🌡️", "unit": "°C", "ideal": "103 - 105"},
    {"key": "flow", "label": "Vazão", "icon": "🔄", "unit": "m³/h", "ideal": "Nominal"},
]

PARAMETER_RANGES = {
    "ph": (6.8, 7.2),
    "brix": (14, 18),
    "pol": (12, 16),
    "turbidity": (0, 500),
    "temperature": (103, 105),
    "flow": (1, 1000),
}

SHIFTS = {
    "A": "Turno A (08h - 16h)",
    "B": "Turno B (16h - 00h)",
    "C": "Turno C (00h - 08h)",
}

URGENCY_LABELS = {"baixa": "Baixa", "media": "Média", "alta": "Alta", "critica": "Crítica"}
URGENCY_ICONS = {"baixa": "🟢", "media": "🟡", "alta": "🟠", "critica": "🔴", "urgente": "🔴"}
OCCURRENCE_STATUS_LABELS = {"aberta": "Aberta", "andamento": "Em andamento", "resolvida": "Resolvida"}

OCCURRENCE_TYPES = {
    "entupimento": "Entupimento",
    "falha_dosagem": "Falha de Dosagem",
    "excesso_impurezas": "Excesso de Impurezas",
    "perda_clarificacao": "Perda de Clarificação",
    "vazamento": "Vazamento",
    "temperatura": "Problema de Temperatura",
    "outros": "Outros",
}

EQUIPMENT = [
    "Peneira Rotativa",
    "Tanque de Caldo Misto",
    "Aquecedor Primário",
    "Aquecedor Secundário",
    "Decantador",
    "Filtro Rotativo",
    "Dosador de Cal",
    "Dosador de Floculante",
    "Bomba de Caldo",
    "Trocador de Calor",
    "Flasheador",
    "Outro",
]

PRIORITY_LABELS = {"baixa": "Baixa", "media": "Média", "alta": "Alta", "urgente": "Urgente"}
WORK_ORDER_STATUS_LABELS = {"pendente": "Pendente", "em_andamento": "Em Andamento", "concluida": "Concluída"}

CHEMICALS = [
    {"value": "cal", "label": "Cal", "unit": "kg", "color": "#3b82f6"},
    {"value": "floculante", "label": "Floculante", "unit": "L", "color": "#10b981"},
    {"value": "acido", "label": "Ácido Fosfórico", "unit": "L", "color": "#f59e0b"},
    {"value": "polimero", "label": "Polímero", "unit": "kg", "color": "#8b5cf6"},
]

RISK_ICONS = {"BAIXO": "🟢", "MÉDIO": "🟡", "ALTO": "🟠", "CRÍTICO": "🔴"}


def _to_local(value):
    if not value:
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts.tz_convert(get_settings().tz)


def format_date(value) -> str:
    ts = _to_local(value)
    return ts.strftime("%d/%m/%Y %H:%M") if ts is not None else "-"


def format_date_short(value) -> str:
    ts = _to_local(value)
    return ts.strftime("%d/%m") if ts is not None else "-"


def format_currency(value) -> str:
    """R$ 1.234,56"""
    text = f"{float(value or 0):,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_number(value, digits=1) -> str:
    if value is None:
        return "—"
    try:
        return f"{float(value):.{digits}f}"
    except (TypeError, ValueError):
        return "—"


def parameter_status(name: str, value) -> str:
    """'ok', 'warning' or 'critical' for a reading of parameter `name`."""
    bounds = PARAMETER_RANGES.get(name)
    if bounds is None or value is None:
        return "ok"
    low, high = bounds
    if low <= value <= high:
        return "ok"
    if name == "turbidity" and value > 800:
        return "critical"
    if name == "ph" and (value < 6.2 or value > 7.8):
        return "critical"
    return "warning"


def trend(current, average):
    """Percent deviation of `current` from `average`, None when undefined."""
    if current is None or not average:
        return None
    return (current - average) / average * 100


def current_shift(now=None) -> str:
    now = now or datetime.datetime.now(pytz.timezone(get_settings().local_timezone))
    if now.hour < 8:
        return "C"
    if now.hour < 16:
        return "A"
    return "B"


def chemical(value):
    return next((c for c in CHEMICALS if c["value"] == value), None)
