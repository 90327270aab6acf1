# hrms/organizations.py

import random
import string

from sqlmodel import Session, select

from hrms.models import Organization

ORG_CODE_LENGTH = 6


def generate_org_code(session: Session, rng: random.Random = None) -> str:
    """Unique 6-letter uppercase join code, retried until no org holds it."""
    rng = rng or random.SystemRandom()
    while True:
        code = "".join(rng.choice(string.ascii_uppercase) for _ in range(ORG_CODE_LENGTH))
        taken = session.exec(select(Organization.id).where(Organization.org_code == code)).first()
        if taken is None:
            return code


def find_by_code(session: Session, org_code: str):
    return session.exec(
        select(Organization).where(Organization.org_code == org_code.strip().upper())
    ).first()
