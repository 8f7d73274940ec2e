"""Order fulfillment back office.

Decides what an order needs before it ships: tracking import, package weight,
inventory risk, order filtering, and bulk status transitions.
"""
