CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "CHF": "CHF",
    "CNY": "¥",
    "INR": "₹",
    "MXN": "$",
}


def get_currency_symbol(currency_code: str = "USD") -> str:
    return CURRENCY_SYMBOLS.get(currency_code, currency_code)


def format_currency(amount: float, currency_code: str = "USD") -> str:
    """Two decimals with thousands separators; EUR puts the symbol after the amount."""
    symbol = get_currency_symbol(currency_code)
    formatted = f"{amount:,.2f}"
    if currency_code == "EUR":
        return f"{formatted} {symbol}"
    return f"{symbol}{formatted}"
