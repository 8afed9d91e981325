import uuid

# Id prefixes per entity; keeps ids readable in logs and audit rows.
AGENCY = "agc"
USER = "usr"
API_KEY = "key"
PROPERTY = "prp"
PROJECT = "prj"
FLOOR = "flr"
QUADRANT = "qdr"
AUDIT = "aud"


def gen_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"
