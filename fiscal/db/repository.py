"""Data access layer for incomes, settings, and the audit log."""

import json
import sqlite3
from collections.abc import Sequence
from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from fiscal.db.aggregator import IncomeAggregator
from fiscal.engines.brackets import ANEXO_III
from fiscal.exceptions import DataValidationError
from fiscal.models.enums import SettingKey
from fiscal.models.reports import AuditEntry, Income
from fiscal.models.settings import FiscalSettings

# Columns that may be summed; guards the interpolated column name
_SUMMABLE = frozenset({"gross_amount", "tax_amount", "net_amount"})

MAX_MANUAL_BRACKET = len(ANEXO_III)


def _one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:  # 29 February
        return day.replace(year=day.year - 1, day=28)


class IncomeRepository(IncomeAggregator):
    """SQLite-backed income store that also serves as the aggregator."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # --- Incomes ---

    def save_income(self, income: Income) -> str:
        """Insert an income record. Returns the record ID."""
        record_id = income.id or str(uuid4())
        self.conn.execute(
            """INSERT INTO incomes
               (id, account_id, income_date, amount_usd, exchange_rate,
                gross_amount, tax_amount, net_amount, description)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                record_id,
                income.account_id,
                income.income_date.isoformat(),
                str(income.amount_usd),
                str(income.exchange_rate),
                str(income.gross_amount),
                str(income.tax_amount),
                str(income.net_amount),
                income.description,
            ),
        )
        self.conn.commit()
        return record_id

    def get_incomes(
        self,
        account_ids: Sequence[int],
        start: date | None = None,
        end: date | None = None,
    ) -> list[Income]:
        """Retrieve incomes for the given accounts, newest first."""
        if not account_ids:
            return []
        placeholders = ", ".join("?" for _ in account_ids)
        sql = f"SELECT * FROM incomes WHERE account_id IN ({placeholders})"
        params: list = list(account_ids)
        if start is not None:
            sql += " AND income_date >= ?"
            params.append(start.isoformat())
        if end is not None:
            sql += " AND income_date <= ?"
            params.append(end.isoformat())
        sql += " ORDER BY income_date DESC"

        cursor = self.conn.execute(sql, params)
        columns = [desc[0] for desc in cursor.description]
        incomes = []
        for row in cursor.fetchall():
            record = dict(zip(columns, row))
            incomes.append(Income(
                id=record["id"],
                account_id=record["account_id"],
                income_date=date.fromisoformat(record["income_date"]),
                amount_usd=Decimal(record["amount_usd"]),
                exchange_rate=Decimal(record["exchange_rate"]),
                gross_amount=Decimal(record["gross_amount"]),
                tax_amount=Decimal(record["tax_amount"]),
                net_amount=Decimal(record["net_amount"]),
                description=record["description"] or "",
            ))
        return incomes

    def delete_income(self, income_id: str) -> bool:
        """Delete an income. Returns True if a row was removed."""
        cursor = self.conn.execute("DELETE FROM incomes WHERE id = ?", (income_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    # --- Aggregation ---

    def _sum(self, column: str, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        if column not in _SUMMABLE:
            raise ValueError(f"Column {column!r} cannot be aggregated")
        if not account_ids:
            return Decimal("0")
        placeholders = ", ".join("?" for _ in account_ids)
        cursor = self.conn.execute(
            f"""SELECT {column} FROM incomes
                WHERE income_date >= ? AND income_date <= ?
                AND account_id IN ({placeholders})""",
            (start.isoformat(), end.isoformat(), *account_ids),
        )
        # Summed in Python to keep full Decimal precision
        return sum((Decimal(row[0]) for row in cursor.fetchall()), Decimal("0"))

    def sum_gross(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        return self._sum("gross_amount", start, end, account_ids)

    def sum_tax(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        return self._sum("tax_amount", start, end, account_ids)

    def sum_net(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        return self._sum("net_amount", start, end, account_ids)

    def trailing_12_month_revenue(self, account_ids: Sequence[int], as_of: date) -> Decimal:
        return self.sum_gross(_one_year_before(as_of), as_of, account_ids)

    # --- Settings ---

    def get_settings(self) -> FiscalSettings:
        """Load persisted settings over the defaults."""
        cursor = self.conn.execute("SELECT key, value FROM settings")
        stored = dict(cursor.fetchall())
        values: dict = {}
        for key in SettingKey:
            if key.value not in stored:
                continue
            raw = stored[key.value]
            values[key.value] = int(raw) if key == SettingKey.MANUAL_BRACKET else Decimal(raw)
        return FiscalSettings(**values)

    def save_setting(self, key: str, value: str) -> None:
        """Validate and persist a single setting."""
        try:
            setting = SettingKey(key)
        except ValueError:
            valid = ", ".join(k.value for k in SettingKey)
            raise DataValidationError(key, f"unknown setting (valid: {valid})")

        try:
            if setting == SettingKey.MANUAL_BRACKET:
                parsed: Decimal | int = int(value)
            else:
                parsed = Decimal(value)
        except (ValueError, InvalidOperation):
            raise DataValidationError(key, f"not a number: {value!r}")
        if isinstance(parsed, Decimal) and not parsed.is_finite():
            raise DataValidationError(key, "must be a finite number")
        if parsed < 0:
            raise DataValidationError(key, "must not be negative")
        if setting == SettingKey.MANUAL_BRACKET and parsed > MAX_MANUAL_BRACKET:
            raise DataValidationError(key, f"must be between 0 and {MAX_MANUAL_BRACKET}")

        self.conn.execute(
            """INSERT INTO settings (key, value, updated_at)
               VALUES (?, ?, datetime('now'))
               ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                              updated_at = excluded.updated_at""",
            (setting.value, str(parsed)),
        )
        self.conn.commit()

    # --- Audit log ---

    def save_audit_entry(self, entry: AuditEntry) -> None:
        """Insert an audit log entry."""
        self.conn.execute(
            """INSERT INTO audit_log (timestamp, engine, operation, inputs, output, notes)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                entry.timestamp.isoformat(),
                entry.engine,
                entry.operation,
                json.dumps(entry.inputs, default=str),
                json.dumps(entry.output, default=str),
                entry.notes,
            ),
        )
        self.conn.commit()

    def get_audit_entries(self, operation: str | None = None) -> list[dict]:
        """Retrieve audit log records, optionally filtered by operation."""
        if operation:
            cursor = self.conn.execute(
                "SELECT * FROM audit_log WHERE operation = ? ORDER BY id", (operation,)
            )
        else:
            cursor = self.conn.execute("SELECT * FROM audit_log ORDER BY id")
        columns = [desc[0] for desc in cursor.description]
        rows = []
        for row in cursor.fetchall():
            record = dict(zip(columns, row))
            record["inputs"] = json.loads(record["inputs"]) if record["inputs"] else {}
            record["output"] = json.loads(record["output"]) if record["output"] else {}
            rows.append(record)
        return rows
