# apps/payments/providers/datatrans/error_codes.py

# коды ошибок UPP, которые шлюз присылает в errorCode
ERROR_CODES: dict[str, str] = {
    "1001": "Required parameter missing",
    "1002": "Invalid parameter format",
    "1003": "Value of parameter not found",
    "1004": "Invalid card number",
    "1007": "Access denied by sign control / parameter sign invalid",
    "1008": "Merchant disabled by Datatrans",
    "1400": "Invalid card number",
    "1401": "Invalid expiration date",
    "1402": "Card expired",
    "1403": "Transaction declined by card issuer",
    "1404": "Card blocked",
    "1405": "Amount exceeded",
    "3000": "Denied by fraud management",
    "3001": "IP address declined by global fraud management",
    "3002": "IP address declined by merchant fraud management",
    "3003": "Card number declined by global fraud management",
    "3004": "Card number declined by merchant fraud management",
    "3005": "IP address declined by group fraud management",
    "3006": "Card number declined by group fraud management",
    "3011": "Declined by merchant fraud management",
    "3012": "Declined by group fraud management",
    "3013": "Declined by global fraud management",
    "3014": "Declined by credit card blacklist",
    "-885": "Card alias update error",
    "-886": "Card alias insert error",
    "-887": "Card alias does not match with card number",
    "-888": "Card alias not found",
    "-900": "Card alias service not enabled",
}


def describe(code: str | None) -> str:
    if not code:
        return "No error code"
    return ERROR_CODES.get(str(code).strip(), "Unknown error")
