"""Carrier tracking links.

Public tracking pages are keyed by carrier code. Adding a carrier means adding
one template here.
"""

from urllib.parse import quote

TRACKING_URL_TEMPLATES = {
    "usps": "https://tools.usps.com/go/TrackConfirmAction?tLabels={tracking_number}",
    "ups": "https://www.ups.com/track?tracknum={tracking_number}",
    "fedex": "https://www.fedex.com/fedextrack/?trknbr={tracking_number}",
    "dhl": "https://www.dhl.com/en/express/tracking.html?AWB={tracking_number}",
}

# Spellings operators type into forms and CSV files
_CARRIER_ALIASES = {
    "united states postal service": "usps",
    "us postal service": "usps",
    "fed ex": "fedex",
    "federal express": "fedex",
    "dhl express": "dhl",
}


def normalize_carrier(carrier: str | None) -> str | None:
    """Return the canonical carrier code, or None when blank."""
    if carrier is None:
        return None
    key = carrier.strip().lower()
    if not key:
        return None
    return _CARRIER_ALIASES.get(key, key)


def tracking_url_for(carrier: str | None, tracking_number: str) -> str | None:
    """Build the public tracking URL for a shipment.

    Unknown or missing carriers return None rather than failing.
    """
    code = normalize_carrier(carrier)
    template = TRACKING_URL_TEMPLATES.get(code) if code else None
    if template is None or not tracking_number.strip():
        return None
    return template.format(tracking_number=quote(tracking_number.strip(), safe=""))
