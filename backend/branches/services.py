import logging
import secrets
from datetime import datetime
from typing import Optional

import pytz
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import NotFoundError, ServiceError
from .models import Branch, QRCode

logger = logging.getLogger(__name__)


class BranchService:

    @staticmethod
    def local_time(branch: Branch, at: Optional[datetime] = None):
        """Convert `at` (default now) to the branch's wall-clock time."""
        at = at or timezone.now()
        if timezone.is_naive(at):
            at = timezone.make_aware(at, pytz.UTC)
        return at.astimezone(pytz.timezone(branch.timezone)).time()

    @staticmethod
    def is_open(branch: Branch, at: Optional[datetime] = None) -> bool:
        """
        Whether the branch is open at `at`.

        A closing time earlier than the opening time wraps past midnight
        (18:00-02:00). Equal times mean open around the clock.
        """
        if not branch.is_active:
            return False

        opens, closes = branch.opening_time, branch.closing_time
        if opens == closes:
            return True

        now = BranchService.local_time(branch, at)
        if closes < opens:
            return now >= opens or now < closes
        return opens <= now < closes


class QRCodeService:

    @staticmethod
    def generate_code(branch: Branch, table_number: int) -> str:
        return f"B{branch.pk}T{table_number}-{secrets.token_hex(4)}".upper()

    @staticmethod
    @transaction.atomic
    def bulk_create(branch: Branch, start_table: int, end_table: int):
        """
        Create one QR code per table in [start_table, end_table].
        Tables that already have a code are left alone.
        """
        if start_table < 1 or end_table < start_table:
            raise ServiceError("Invalid table range", code="invalid_table_range")

        existing = set(
            QRCode.objects.filter(branch=branch).values_list('table_number', flat=True)
        )
        codes = [
            QRCode(
                tenant=branch.tenant,
                branch=branch,
                table_number=table,
                code=QRCodeService.generate_code(branch, table),
            )
            for table in range(start_table, end_table + 1)
            if table not in existing
        ]
        created = QRCode.objects.bulk_create(codes)
        logger.info(
            f"Created {len(created)} QR codes for branch {branch.pk} "
            f"(tables {start_table}-{end_table}, {len(existing)} already existed)"
        )
        return created

    @staticmethod
    def record_scan(code: str) -> dict:
        """Count a scan and return where the customer is sitting."""
        try:
            qr = QRCode.objects.select_related('branch').get(
                code=(code or '').strip().upper(), is_active=True, branch__is_active=True
            )
        except QRCode.DoesNotExist:
            raise NotFoundError("Invalid or inactive QR code", code="qr_not_found")

        QRCode.objects.filter(pk=qr.pk).update(
            scan_count=F('scan_count') + 1, last_scanned_at=timezone.now()
        )
        return {
            "branch_id": qr.branch_id,
            "branch_name": qr.branch.name,
            "branch_slug": qr.branch.slug,
            "table_number": qr.table_number,
        }

    @staticmethod
    def toggle(qr: QRCode) -> QRCode:
        qr.is_active = not qr.is_active
        qr.save(update_fields=['is_active'])
        return qr
