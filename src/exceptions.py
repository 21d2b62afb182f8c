# src/exceptions.py


class NetworkError(Exception):
    """Base class for facility network errors"""


class FacilityNotFound(NetworkError, KeyError):
    """Raised when a facility id is not part of the graph"""

    def __init__(self, facility_id: str):
        self.facility_id = facility_id
        super().__init__(f"Facility not found: {facility_id}")

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class InvalidReference(NetworkError, ValueError):
    """Raised when a connection references a facility that does not exist"""


class InvalidWeights(NetworkError, ValueError):
    """Raised when objective weights cannot be normalized"""
