# batualam/infrastructure/gateways.py
"""
Gateways para serviços externos: armazenamento de arquivos (storage padrão do
Django) e renderização do relatório de vendas em PDF (ReportLab).
"""
import logging
import os
import uuid
from io import BytesIO
from typing import Any, List
from xml.sax.saxutils import escape

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from batualam.core.entities import SalesReport, format_rupiah
from batualam.core.exceptions import StorageError
from batualam.core.ports import IFileStorage, ISalesReportRenderer

logger = logging.getLogger(__name__)


# ====================================================================
# 1. ARMAZENAMENTO DE ARQUIVOS
# ====================================================================

class DjangoFileStorage(IFileStorage):
    """Grava uploads no storage padrão (MEDIA_ROOT) sob um namespace."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def save(self, namespace: str, uploaded_file: Any) -> str:
        extension = os.path.splitext(getattr(uploaded_file, 'name', '') or '')[1].lower()
        name = f"{namespace}/{uuid.uuid4().hex}{extension}"
        try:
            if hasattr(uploaded_file, 'seek'):
                uploaded_file.seek(0)
            return self.storage.save(name, uploaded_file)
        except OSError as exc:
            logger.error("Failed to store %s: %s", name, exc)
            raise StorageError() from exc

    def delete(self, path: str) -> None:
        if not path:
            return
        try:
            self.storage.delete(path)
        except OSError as exc:
            # Arquivo órfão fica registrado no log para limpeza manual.
            logger.warning("Failed to delete %s: %s", path, exc)


# ====================================================================
# 2. RELATÓRIO DE VENDAS EM PDF
# ====================================================================

class ReportLabSalesReportRenderer(ISalesReportRenderer):

    HEADER = ['ID', 'Order', 'Date', 'Customer', 'Items', 'Total']
    COLUMN_WIDTHS = [14 * mm, 34 * mm, 24 * mm, 34 * mm, 48 * mm, 26 * mm]
    EMPTY_MESSAGE = 'No sales data for this period.'

    def __init__(self, store_name: str = None):
        self.store_name = store_name

    @staticmethod
    def _local(value):
        if value is not None and timezone.is_aware(value):
            return timezone.localtime(value)
        return value

    def build_rows(self, report: SalesReport, cell) -> List[list]:
        """Cabeçalho mais uma linha por pedido, identificado pelo id (#42)."""
        rows = [list(self.HEADER)]
        for line in report.lines:
            items = '<br/>'.join(
                escape(f"{item.quantity} x {item.display_name}") for item in line.items
            )
            rows.append([
                f"#{line.order_id}",
                line.order_code,
                f"{self._local(line.order_date):%d %b %Y}",
                Paragraph(escape(line.buyer_name), cell),
                Paragraph(items or '-', cell),
                format_rupiah(line.total),
            ])
        return rows

    def render(self, report: SalesReport) -> bytes:
        store_name = self.store_name or getattr(settings, 'STORE_NAME', 'Batu Alam')
        styles = getSampleStyleSheet()
        cell = styles['BodyText']
        buffer = BytesIO()
        document = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=f"Sales report {report.start_date:%Y-%m-%d} - {report.end_date:%Y-%m-%d}",
            leftMargin=12 * mm,
            rightMargin=12 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
        )

        generated_at = self._local(report.generated_at) or timezone.localtime()
        story = [
            Paragraph(escape(f"{store_name} - Sales Report"), styles['Title']),
            Paragraph(
                f"Period: {report.start_date:%d %b %Y} to {report.end_date:%d %b %Y}", styles['Normal']
            ),
            Paragraph(f"Generated at: {generated_at:%d %b %Y %H:%M}", styles['Normal']),
            Spacer(1, 6 * mm),
        ]

        rows = self.build_rows(report, cell)

        table_style = [
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#44403c')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
        ]
        if report.is_empty():
            rows.append([self.EMPTY_MESSAGE] + [''] * (len(self.HEADER) - 1))
            table_style += [
                ('SPAN', (0, 1), (-1, 1)),
                ('ALIGN', (0, 1), (-1, 1), 'CENTER'),
            ]

        table = Table(rows, colWidths=self.COLUMN_WIDTHS, repeatRows=1)
        table.setStyle(TableStyle(table_style))
        story.append(table)
        story.append(Spacer(1, 8 * mm))

        summary = Table(
            [
                ['Total orders', str(report.total_orders)],
                ['Total revenue', format_rupiah(report.total_revenue)],
            ],
            colWidths=[45 * mm, 45 * mm],
            hAlign='RIGHT',
        )
        summary.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ]))
        story.append(summary)

        document.build(story)
        return buffer.getvalue()
