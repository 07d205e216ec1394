# reports.py
"""
Occurrence report: QR code of the protocol and a one-page A4 PDF.
"""
import io

import fitz  # PyMuPDF
import qrcode

from formatting import (
    OCCURRENCE_TYPES,
    PARAMETERS,
    URGENCY_LABELS,
    format_date,
    format_number,
)

A4_WIDTH, A4_HEIGHT = 595, 842  # points
MARGIN = 50


def qr_payload(occurrence) -> str:
    return f"IPIRANGA-AI:{occurrence.get('protocol', '')}"


def generate_qr_bytes(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def occurrence_type_label(value) -> str:
    return OCCURRENCE_TYPES.get(value) or str(value or "").replace("_", " ")


def report_lines(occurrence):
    """(label, value) rows of the report body, in print order."""
    rows = [
        ("Protocolo", occurrence.get("protocol") or "-"),
        ("Data/Hora", format_date(occurrence.get("timestamp"))),
        ("Operador", occurrence.get("operator_name") or "-"),
        ("Equipamento", occurrence.get("equipment") or "-"),
        ("Tipo", occurrence_type_label(occurrence.get("occurrence_type"))),
        ("Urgência", URGENCY_LABELS.get(occurrence.get("urgency"), occurrence.get("urgency") or "-")),
    ]
    snapshot = occurrence.get("parameters_snapshot") or {}
    for param in PARAMETERS:
        if param["key"] in snapshot:
            value = format_number(snapshot.get(param["key"]))
            rows.append((param["label"], f"{value} {param['unit']}".strip()))
    return rows


def build_occurrence_pdf(occurrence) -> bytes:
    doc = fitz.open()
    page = doc.new_page(width=A4_WIDTH, height=A4_HEIGHT)

    page.insert_text((MARGIN, 70), "IPIRANGA AI", fontsize=20, fontname="hebo")
    page.insert_text((MARGIN, 90), "Relatório de Ocorrência - Tratamento de Caldo", fontsize=11)

    qr_size = 110
    qr_rect = fitz.Rect(A4_WIDTH - MARGIN - qr_size, 40, A4_WIDTH - MARGIN, 40 + qr_size)
    page.insert_image(qr_rect, stream=generate_qr_bytes(qr_payload(occurrence)))

    y = 180
    for label, value in report_lines(occurrence):
        page.insert_text((MARGIN, y), f"{label}:", fontsize=11, fontname="hebo")
        page.insert_text((MARGIN + 130, y), str(value), fontsize=11)
        y += 20

    y += 15
    page.insert_text((MARGIN, y), "Descrição", fontsize=12, fontname="hebo")
    body = fitz.Rect(MARGIN, y + 10, A4_WIDTH - MARGIN, A4_HEIGHT - 80)
    page.insert_textbox(body, occurrence.get("description") or "-", fontsize=10)

    page.insert_text(
        (MARGIN, A4_HEIGHT - 40),
        f"Gerado a partir do protocolo {occurrence.get('protocol', '-')}",
        fontsize=8,
    )

    pdf = doc.tobytes()
    doc.close()
    return pdf


def report_filename(occurrence) -> str:
    return f"relatorio_{occurrence.get('protocol') or 'ocorrencia'}.pdf"
