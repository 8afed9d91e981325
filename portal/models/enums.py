import enum


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    AGENCY_ADMIN = "AGENCY_ADMIN"
    AGENT = "AGENT"


class ListingStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PropertyType(str, enum.Enum):
    HOUSE = "HOUSE"
    APARTMENT = "APARTMENT"
    LAND = "LAND"
    OFFICE = "OFFICE"
    COMMERCIAL = "COMMERCIAL"
    WAREHOUSE = "WAREHOUSE"


class TransactionType(str, enum.Enum):
    SALE = "SALE"
    RENT = "RENT"
    ANTICRETICO = "ANTICRETICO"


class Currency(str, enum.Enum):
    DOLLARS = "DOLLARS"
    BOLIVIANOS = "BOLIVIANOS"


class QuadrantType(str, enum.Enum):
    DEPARTAMENTO = "DEPARTAMENTO"
    OFICINA = "OFICINA"
    LOCAL_COMERCIAL = "LOCAL_COMERCIAL"


class QuadrantStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"
    RESERVED = "RESERVED"
