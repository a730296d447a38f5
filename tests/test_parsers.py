"""Tests for the credit card and bank account parsers.

Each parser is tested against the sample statements in tests/fixtures/:
metadata offsets, transaction start detection, sign and currency handling,
descriptions, balances, IDs, and data-quality reporting.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from statement_tracker.categorizer import make_categorizer
from statement_tracker.models import (
    BankAccountMetadata,
    BankAccountRow,
    Category,
    CreditCardMetadata,
    CreditCardRow,
    Currency,
    FileType,
    TransactionSource,
    TransactionType,
)
from statement_tracker.overrides import OverrideStore
from statement_tracker.parsers import bank_account, credit_card, parse
from statement_tracker.parsers.utils import read_rows

# ---------------------------------------------------------------------------
# Credit card
# ---------------------------------------------------------------------------


class TestCreditCardParser:
    def test_basic_result(self, credit_card_csv: str):
        result = credit_card.parse(credit_card_csv, "CreditCardsMovementsDetail.csv")
        assert result.file_type == FileType.CREDIT_CARD
        assert result.file_name == "CreditCardsMovementsDetail.csv"
        assert len(result.transactions) == 4
        assert result.errors == []

    def test_metadata(self, credit_card_csv: str):
        metadata = credit_card.parse(credit_card_csv, "cc.csv").metadata
        assert isinstance(metadata, CreditCardMetadata)
        assert metadata.cliente == "Gazzano Arismendi Jose"
        assert metadata.numero_tarjeta == "XXXXX-4362"
        assert metadata.alias == "Visa Soy Santander"
        assert metadata.tipo_producto == "Tarjeta de crédito"
        assert metadata.fecha_corte == "04/12/2025"
        assert metadata.fecha_vencimiento == "22/12/2025"
        assert metadata.limite_credito_usd == "0,00"
        assert metadata.limite_credito_uyu == "270.000,00"
        assert metadata.saldo_anterior_usd == "2.238,54"
        assert metadata.saldo_anterior_uyu == "58.259,16"
        assert metadata.pago_minimo_usd == "0,00"
        assert metadata.pago_minimo_uyu == "1.108,00"
        assert metadata.pago_contado_usd == "-593,71"
        assert metadata.pago_contado_uyu == "20.428,95"
        assert metadata.monto_vencido_usd == "0,00"
        assert metadata.monto_vencido_uyu == "0,00"
        assert metadata.periodo_desde == "01/12/2025"
        assert metadata.periodo_hasta == "31/12/2025"

    def test_uyu_debit(self, credit_card_csv: str):
        txn = credit_card.parse(credit_card_csv, "cc.csv").transactions[0]
        assert txn.description == "Devoto Supermercado"
        assert txn.date == date(2025, 11, 4)
        assert txn.amount == Decimal("1878.39")
        assert txn.currency == Currency.UYU
        assert txn.type == TransactionType.DEBIT
        assert txn.source == TransactionSource.CREDIT_CARD
        assert txn.category == Category.GROCERIES.value
        assert txn.balance is None

    def test_usd_debit(self, credit_card_csv: str):
        txn = credit_card.parse(credit_card_csv, "cc.csv").transactions[1]
        assert txn.description == "Jetbrains Americas Inc"
        assert txn.amount == Decimal("10.37")
        assert txn.currency == Currency.USD
        assert txn.type == TransactionType.DEBIT
        assert txn.category == Category.SOFTWARE.value

    def test_usd_payment_is_credit(self, credit_card_csv: str):
        txn = credit_card.parse(credit_card_csv, "cc.csv").transactions[2]
        assert txn.amount == Decimal("2238.54")
        assert txn.currency == Currency.USD
        assert txn.type == TransactionType.CREDIT
        assert txn.category == Category.TRANSFER.value

    def test_uyu_payment_is_credit(self, credit_card_csv: str):
        txn = credit_card.parse(credit_card_csv, "cc.csv").transactions[3]
        assert txn.amount == Decimal("58259.16")
        assert txn.currency == Currency.UYU
        assert txn.type == TransactionType.CREDIT

    def test_amounts_non_negative(self, credit_card_csv: str):
        for txn in credit_card.parse(credit_card_csv, "cc.csv").transactions:
            assert txn.amount >= 0

    def test_raw_data_kept(self, credit_card_csv: str):
        txn = credit_card.parse(credit_card_csv, "cc.csv").transactions[0]
        assert isinstance(txn.raw_data, CreditCardRow)
        assert txn.raw_data.numero_autorizacion == "770025140510"
        assert txn.raw_data.pesos == "1.878,39"

    def test_ids_unique_and_stable(self, credit_card_csv: str):
        first = [t.id for t in credit_card.parse(credit_card_csv, "a.csv").transactions]
        second = [t.id for t in credit_card.parse(credit_card_csv, "b.csv").transactions]
        assert first == second
        assert len(set(first)) == 4
        assert [i.rsplit("-", 1)[1] for i in first] == ["0", "1", "2", "3"]

    def test_find_transactions_start(self, credit_card_csv: str):
        rows = read_rows(credit_card_csv)
        start = credit_card.find_transactions_start(rows)
        assert rows[start - 2][0] == "Movimientos"
        assert rows[start][3] == "Devoto Supermercado"

    def test_no_movements_marker(self):
        content = "Cliente,Número de tarjeta de crédito\nX,Y\n"
        result = credit_card.parse(content, "cc.csv")
        assert result.transactions == []
        assert credit_card.find_transactions_start(read_rows(content)) == -1

    def test_rows_without_date_skipped(self, credit_card_csv: str):
        content = credit_card_csv + '\n,,,Subtotal,"0,00","1,00","0,00",\n'
        assert len(credit_card.parse(content, "cc.csv").transactions) == 4

    def test_non_numeric_amount_reported(self, credit_card_csv: str):
        content = credit_card_csv + '10/11/2025,X,1,Antel,"0,00","abc","0,00",\n'
        result = credit_card.parse(content, "cc.csv")
        txn = result.transactions[-1]
        assert txn.amount.is_nan()
        assert txn.currency == Currency.UYU
        assert txn.type == TransactionType.DEBIT
        assert len(result.errors) == 1
        assert "non-numeric amount" in result.errors[0]

    def test_non_numeric_dollars_reported(self, credit_card_csv: str):
        content = credit_card_csv + '10/11/2025,X,1,Antel,"0,00","10,00","abc",\n'
        result = credit_card.parse(content, "cc.csv")
        txn = result.transactions[-1]
        assert txn.currency == Currency.UYU
        assert txn.amount == Decimal("10.00")
        assert len(result.errors) == 1
        assert "non-numeric amount" in result.errors[0]

    def test_invalid_date_reported(self, credit_card_csv: str):
        content = credit_card_csv + '31/02/2025,X,1,Antel,"0,00","10,00","0,00",\n'
        result = credit_card.parse(content, "cc.csv")
        assert result.transactions[-1].date is None
        assert any("invalid date" in e for e in result.errors)

    def test_categorize_callable_used(self, credit_card_csv: str):
        store = OverrideStore()
        store.set("Devoto Supermercado", "shopping")
        result = credit_card.parse(credit_card_csv, "cc.csv", categorize=make_categorizer(store))
        assert result.transactions[0].category == "shopping"
        assert result.transactions[0].category_confidence == 1.0


# ---------------------------------------------------------------------------
# Bank account
# ---------------------------------------------------------------------------


class TestBankAccountParserUSD:
    def test_cr_only_line_endings(self, bank_usd_csv: str):
        result = parse(bank_usd_csv.replace("\n", "\r"), "mac.csv")
        assert result.file_type == FileType.BANK_ACCOUNT_USD
        assert len(result.transactions) == 4
        assert result.metadata.cliente == "Gazzano      A Jose"
        assert result.errors == []

    def test_basic_result(self, bank_usd_csv: str):
        result = bank_account.parse(bank_usd_csv, "USDmovements.csv")
        assert result.file_type == FileType.BANK_ACCOUNT_USD
        assert result.file_name == "USDmovements.csv"
        assert len(result.transactions) == 4
        assert result.errors == []

    def test_metadata(self, bank_usd_csv: str):
        metadata = bank_account.parse(bank_usd_csv, "usd.csv").metadata
        assert isinstance(metadata, BankAccountMetadata)
        assert metadata.cliente == "Gazzano      A Jose"
        assert metadata.cuenta == "Ca De Ahorro Atm"
        assert metadata.numero == "007003529538"
        assert metadata.moneda == "USD"
        assert metadata.sucursal == "02 - 18 De Julio"
        assert metadata.periodo_desde == "01/11/2025"
        assert metadata.periodo_hasta == "30/11/2025"

    def test_debit_row(self, bank_usd_csv: str):
        txn = bank_account.parse(bank_usd_csv, "usd.csv").transactions[0]
        assert txn.description == "DEBITO OPERACION EN SUPERNET O SMS P--"
        assert txn.date == date(2025, 11, 27)
        assert txn.amount == Decimal("174.65")
        assert txn.currency == Currency.USD
        assert txn.type == TransactionType.DEBIT
        assert txn.source == TransactionSource.BANK_ACCOUNT
        assert txn.balance == Decimal("11749.61")

    def test_transfer_debit(self, bank_usd_csv: str):
        txn = bank_account.parse(bank_usd_csv, "usd.csv").transactions[1]
        assert txn.amount == Decimal("1.90")
        assert txn.type == TransactionType.DEBIT
        assert txn.category == Category.TRANSFER.value

    def test_salary_credit(self, bank_usd_csv: str):
        txn = bank_account.parse(bank_usd_csv, "usd.csv").transactions[2]
        assert txn.amount == Decimal("6104.26")
        assert txn.type == TransactionType.CREDIT
        assert txn.category == Category.INCOME.value
        assert txn.balance == Decimal("14623.67")

    def test_every_row_in_header_currency(self, bank_usd_csv: str):
        transactions = bank_account.parse(bank_usd_csv, "usd.csv").transactions
        assert {t.currency for t in transactions} == {Currency.USD}

    def test_ids_unique(self, bank_usd_csv: str):
        transactions = bank_account.parse(bank_usd_csv, "usd.csv").transactions
        assert len({t.id for t in transactions}) == 4

    def test_raw_data_kept(self, bank_usd_csv: str):
        txn = bank_account.parse(bank_usd_csv, "usd.csv").transactions[3]
        assert isinstance(txn.raw_data, BankAccountRow)
        assert txn.raw_data.referencia == "LR46465738"
        assert txn.raw_data.debito == ""
        assert txn.raw_data.credito == "69.99"


class TestBankAccountParserUYU:
    def test_file_type_and_currency(self, bank_uyu_csv: str):
        result = bank_account.parse(bank_uyu_csv, "UYUmovements.csv")
        assert result.file_type == FileType.BANK_ACCOUNT_UYU
        assert {t.currency for t in result.transactions} == {Currency.UYU}
        assert len(result.transactions) == 4

    def test_quoted_commas_in_description(self, bank_uyu_csv: str):
        txn = bank_account.parse(bank_uyu_csv, "uyu.csv").transactions[2]
        assert txn.description == "RETIRO CORRESPONSALES , MONTEVIDEO TARJ: ############9172"
        assert txn.amount == Decimal("1500.00")
        assert txn.type == TransactionType.DEBIT
        assert txn.balance == Decimal("116.44")

    def test_merchant_in_bank_description(self, bank_uyu_csv: str):
        txn = bank_account.parse(bank_uyu_csv, "uyu.csv").transactions[3]
        assert txn.category == Category.RESTAURANTS.value
        assert txn.amount == Decimal("47.00")


class TestBankAccountEdgeCases:
    HEADER = (
        "Cliente,Test,\nCuenta,Caja,\nNúmero,1,\nMoneda,UYU,\nSucursal,01,\n\n"
        "Movimientos,\nDesde:,01/11/2025,Hasta:,30/11/2025\n\n"
        "Fecha,Referencia,Concepto,Descripción,Débito,Crédito,Saldos,\n"
    )

    def test_blank_not_zero_decides_side(self):
        content = self.HEADER + "01/11/2025,1,AJUSTE,,0.00,,100.00,\n"
        txn = bank_account.parse(content, "x.csv").transactions[0]
        assert txn.type == TransactionType.DEBIT
        assert txn.amount == 0

    def test_both_blank_is_zero_credit(self):
        content = self.HEADER + "01/11/2025,1,AJUSTE,,,,100.00,\n"
        txn = bank_account.parse(content, "x.csv").transactions[0]
        assert txn.type == TransactionType.CREDIT
        assert txn.amount == 0

    def test_concept_and_description_joined(self):
        content = self.HEADER + "01/11/2025,1,COMPRA,  FARMASHOP  ,-10.00,,90.00,\n"
        txn = bank_account.parse(content, "x.csv").transactions[0]
        assert txn.description == "COMPRA   FARMASHOP"

    def test_unknown_currency_falls_back_to_uyu(self):
        content = self.HEADER.replace("Moneda,UYU", "Moneda,EUR") + (
            "01/11/2025,1,COMPRA,,-10.00,,90.00,\n"
        )
        result = bank_account.parse(content, "x.csv")
        assert result.file_type == FileType.BANK_ACCOUNT_UYU
        assert result.transactions[0].currency == Currency.UYU
        assert any("unknown currency" in e for e in result.errors)

    def test_missing_header_row_gives_no_transactions(self):
        content = "Cliente,Test,\nCuenta,Caja,\nNúmero,1,\nMoneda,USD,\n"
        result = bank_account.parse(content, "x.csv")
        assert result.transactions == []

    def test_non_numeric_debit_reported(self):
        content = self.HEADER + "01/11/2025,1,COMPRA,,abc,,90.00,\n"
        result = bank_account.parse(content, "x.csv")
        assert result.transactions[0].amount.is_nan()
        assert result.transactions[0].type == TransactionType.DEBIT
        assert len(result.errors) == 1
