"""Platform service backends."""

from pycellwatch.telephony._base import LocationService, TelephonyService
from pycellwatch.telephony.http import HttpLocationService, HttpTelephonyService
from pycellwatch.telephony.termux import TermuxLocationService, TermuxTelephonyService

__all__ = [
    "HttpLocationService",
    "HttpTelephonyService",
    "LocationService",
    "TelephonyService",
    "TermuxLocationService",
    "TermuxTelephonyService",
]
