"""
ThingsIX forwarder - gateway identity storage for LoRaWAN gateways.
"""

__version__ = "0.1.0"
