from meter.exceptions import ExpenseMeterError, StorageError
from meter.formatting import format_currency, format_number, format_progress


def test_format_currency_known_symbols():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0, "eur") == "€0.00"
    assert format_currency(-20, "GBP") == "-£20.00"


def test_format_currency_unknown_code():
    assert format_currency(12, "KZT") == "12.00 KZT"
    assert format_currency(-1500.256, "CHF") == "-1,500.26 CHF"


def test_format_number():
    assert format_number(1500) == "1,500"
    assert format_number(2.5) == "2.5"
    assert format_number(0) == "0"
    assert format_number(0.125) == "0.12"


def test_format_progress():
    assert format_progress(0.4) == "40% of goal"
    assert format_progress(2.5) == "250% of goal"


def test_error_details_in_message():
    err = StorageError("Failed to save state", details={"path": "/x"})

    assert isinstance(err, ExpenseMeterError)
    assert str(err) == "Failed to save state (path=/x)"
    assert str(ExpenseMeterError("plain")) == "plain"
