"""CSV import service for transactions."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from finboard.models.account import Account
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.utils.csv_parser import ColumnMapping, CSVParseError, ParsedTransaction, parse_csv

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = ("csv", "txt")


class ImportService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def import_csv(
        self,
        user: User,
        account_id: int,
        filename: str,
        content: bytes,
        mapping: ColumnMapping | None = None,
    ) -> dict:
        """Import every row of a CSV file into the account the user picked.

        The file is accepted or rejected as a whole: a single malformed row
        raises ValidationError before anything is written.
        """
        account = await self.db.get(Account, account_id)
        if not account:
            raise NotFoundError("Account")
        if account.user_id != user.id:
            raise ForbiddenError()

        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in SUPPORTED_EXTENSIONS:
            supported = ", ".join(f".{e}" for e in SUPPORTED_EXTENSIONS)
            raise ValidationError(f"Unsupported format: .{ext}. Accepted formats: {supported}")

        try:
            parsed_txns: list[ParsedTransaction] = parse_csv(content, mapping)
        except CSVParseError as e:
            logger.info("csv_import_rejected", account_id=account_id, filename=filename, error=str(e))
            raise ValidationError(f"Unable to parse file: {e}") from e

        if not parsed_txns:
            raise ValidationError("The file contains no transactions.")

        self.db.add_all([
            Transaction(
                account_id=account_id,
                date=pt.date,
                amount=pt.amount,
                payee=pt.payee,
                notes=pt.notes,
            )
            for pt in parsed_txns
        ])
        await self.db.flush()

        logger.info(
            "csv_imported",
            user_id=user.id,
            account_id=account_id,
            filename=filename,
            imported=len(parsed_txns),
        )
        return {
            "account_id": account_id,
            "total_rows": len(parsed_txns),
            "imported_count": len(parsed_txns),
        }
