# datasets.py
"""Shaping backend payloads into what the screens filter, chart and export."""
import datetime

import pandas as pd

from access_policy import role_label
from formatting import CHEMICALS, SHIFTS, chemical, format_date

ENTITY_LABELS = {
    "all": "Todos",
    "occurrence": "Ocorrências",
    "parameter": "Parâmetros",
    "dosage": "Dosagens",
}


def _contains(value, needle: str) -> bool:
    return needle in str(value or "").lower()


# --- Occurrences ---
def filter_occurrences(occurrences, search="", urgency="all", status="all"):
    needle = (search or "").strip().lower()
    rows = []
    for occ in occurrences or []:
        matches_search = not needle or any(
            _contains(occ.get(k), needle) for k in ("protocol", "equipment", "description")
        )
        if not matches_search:
            continue
        if urgency != "all" and occ.get("urgency") != urgency:
            continue
        if status != "all" and occ.get("status") != status:
            continue
        rows.append(occ)
    return rows


# --- Work orders ---
def filter_work_orders(work_orders, status="all"):
    return [wo for wo in work_orders or [] if status == "all" or wo.get("status") == status]


def can_progress(work_order, user_id) -> bool:
    """Only the assignee starts or completes an open order."""
    assignee = work_order.get("assigned_to")
    if not user_id or assignee is None:
        return False
    return work_order.get("status") != "concluida" and str(assignee) == str(user_id)


def missing_work_order_fields(title, description, equipment, assigned_to) -> list:
    required = {
        "Título": (title or "").strip(),
        "Descrição": (description or "").strip(),
        "Equipamento": equipment,
        "Atribuir a": assigned_to,
    }
    return [label for label, value in required.items() if not value]


# --- Users ---
def filter_users(users, search="", role="all"):
    needle = (search or "").strip().lower()
    return [
        u for u in users or []
        if (not needle or _contains(u.get("name"), needle) or _contains(u.get("matricula"), needle))
        and (role == "all" or u.get("role") == role)
    ]


def user_counts(users) -> dict:
    users = users or []
    return {
        "total": len(users),
        "operators": sum(1 for u in users if u.get("role") == "operator"),
        "supervisors": sum(1 for u in users if u.get("role") == "supervisor"),
        "active": sum(1 for u in users if u.get("active")),
    }


def users_frame(users) -> pd.DataFrame:
    rows = [{
        "Matrícula": u.get("matricula"),
        "Nome": u.get("name"),
        "Função": u.get("function") or "-",
        "Perfil": role_label(u.get("role")),
        "Ativo": bool(u.get("active")),
        "Criado em": format_date(u.get("created_at")),
    } for u in users or []]
    return pd.DataFrame(rows, columns=["Matrícula", "Nome", "Função", "Perfil", "Ativo", "Criado em"])


# --- Chemical dosage ---
def chemical_totals(stats) -> list:
    """One entry per known chemical, zeros where the backend has no data."""
    totals = []
    for chem in CHEMICALS:
        data = (stats or {}).get(chem["value"]) or {}
        totals.append({
            **chem,
            "total_quantity": float(data.get("total_quantity") or 0),
            "total_cost": float(data.get("total_cost") or 0),
            "count": int(data.get("count") or 0),
        })
    return totals


def total_cost(stats) -> float:
    return sum(float((v or {}).get("total_cost") or 0) for v in (stats or {}).values())


def cost_distribution(stats) -> pd.DataFrame:
    rows = []
    for chem_type, data in (stats or {}).items():
        chem = chemical(chem_type)
        rows.append({
            "name": chem["label"] if chem else chem_type,
            "value": float((data or {}).get("total_cost") or 0),
            "color": chem["color"] if chem else "#9ca3af",
        })
    return pd.DataFrame(rows, columns=["name", "value", "color"])


def dosage_by_shift(dosages) -> pd.DataFrame:
    """Quantity per shift (rows A, B, C) and chemical label (columns)."""
    labels = [c["label"] for c in CHEMICALS]
    df = pd.DataFrame(dosages or [], columns=["shift", "chemical_type", "quantity"])
    if df.empty:
        return pd.DataFrame(0.0, index=pd.Index(list(SHIFTS), name="shift"), columns=labels)
    df["quantity"] = pd.to_numeric(df["quantity"], errors="coerce").fillna(0.0)
    df["chemical"] = df["chemical_type"].map({c["value"]: c["label"] for c in CHEMICALS})
    table = df.pivot_table(index="shift", columns="chemical", values="quantity", aggfunc="sum")
    return table.reindex(index=list(SHIFTS), columns=labels).fillna(0.0).rename_axis("shift")


def dosages_frame(dosages) -> pd.DataFrame:
    rows = []
    for d in dosages or []:
        chem = chemical(d.get("chemical_type"))
        quantity = float(d.get("quantity") or 0)
        cost = float(d.get("cost_per_unit") or 0)
        rows.append({
            "Data/Hora": format_date(d.get("timestamp")),
            "Produto": chem["label"] if chem else d.get("chemical_type"),
            "Quantidade": quantity,
            "Unidade": d.get("unit") or (chem["unit"] if chem else ""),
            "Custo Total": d.get("total_cost", quantity * cost),
            "Turno": d.get("shift"),
            "Operador": d.get("operator_name"),
        })
    return pd.DataFrame(rows)


# --- Supervisor ---
def weekly_trends_frame(trends) -> pd.DataFrame:
    """Backend sends newest first keyed by `_id` (a date); charts want oldest first."""
    df = pd.DataFrame(list(reversed(trends or [])))
    if df.empty:
        return pd.DataFrame(columns=["date", "avg_ph", "avg_turbidity"])
    df = df.rename(columns={"_id": "date"})
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


# --- Audit history ---
def filter_audit_logs(logs, search=""):
    needle = (search or "").strip().lower()
    if not needle:
        return list(logs or [])
    keys = ("protocol", "equipment", "operator_name", "chemical_type", "description")
    return [log for log in logs or [] if any(_contains(log.get(k), needle) for k in keys)]


def audit_detail(log) -> str:
    return log.get("protocol") or log.get("chemical_type") or f"pH: {log.get('ph')}"


def audit_frame(logs) -> pd.DataFrame:
    rows = [{
        "Tipo": ENTITY_LABELS.get(log.get("entity_type"), log.get("entity_type")),
        "Data/Hora": format_date(log.get("timestamp")),
        "Operador": log.get("operator_name"),
        "Detalhes": audit_detail(log),
    } for log in logs or []]
    return pd.DataFrame(rows, columns=["Tipo", "Data/Hora", "Operador", "Detalhes"])


def audit_csv(logs) -> bytes:
    return audit_frame(logs).to_csv(index=False).encode("utf-8")


def audit_filename(today=None) -> str:
    today = today or datetime.date.today()
    return f"historico_ipiranga_{today.isoformat()}.csv"


def audit_query(entity_type="all", start_date=None, end_date=None) -> dict:
    params = {}
    if entity_type and entity_type != "all":
        params["entity_type"] = entity_type
    if start_date:
        params["start_date"] = datetime.datetime.combine(start_date, datetime.time.min).isoformat()
    if end_date:
        params["end_date"] = datetime.datetime.combine(end_date, datetime.time.max).isoformat()
    return params
